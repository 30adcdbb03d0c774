"""Schema management for SQL-backed providers.

Memory providers keep no schema, so they are skipped. For sqlite and
postgresql the repositories of every aggregate and entity stored there are
touched first, which makes Protean declare their tables on the provider's
metadata.
"""

from collections.abc import Iterator

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

logger = structlog.get_logger(__name__)

SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain) -> Iterator:
    for _, provider in domain.providers.items():
        if provider.conn_info["provider"] in SQL_PROVIDERS:
            yield provider


def _register_tables(domain: Domain, provider) -> None:
    records = list(domain.registry.aggregates.values()) + list(domain.registry.entities.values())
    for record in records:
        if record.cls.meta_.provider == provider.name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> list[str]:
    """Create the tables of every SQL provider. Returns the table names."""
    created = []
    with domain.domain_context():
        for provider in _sql_providers(domain):
            _register_tables(domain, provider)
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.create_all(engine)
            engine.dispose()

            tables = sorted(provider._metadata.tables)
            logger.info("Schema created", provider=provider.name, tables=len(tables))
            created.extend(tables)
    return created


def drop_db(domain: Domain) -> list[str]:
    """Drop the tables of every SQL provider. Returns the table names."""
    dropped = []
    with domain.domain_context():
        for provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            engine.dispose()

            tables = sorted(provider._metadata.tables)
            logger.info("Schema dropped", provider=provider.name, tables=len(tables))
            dropped.extend(tables)
    return dropped
