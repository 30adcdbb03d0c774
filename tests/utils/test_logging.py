import logging

import structlog
from freshcart.utils.logging import add_context, clear_context, configure_logging, log_level_for


class TestLogLevel:
    def test_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert log_level_for("production") == "INFO"
        assert log_level_for("development") == "DEBUG"
        assert log_level_for("test") == "WARNING"
        assert log_level_for("somewhere-else") == "INFO"

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert log_level_for("development") == "ERROR"


def test_configure_writes_rotating_files(tmp_path, monkeypatch):
    monkeypatch.setenv("PROTEAN_ENV", "test")
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(log_dir=str(tmp_path))
        assert root.level == logging.WARNING
        assert (tmp_path / "freshcart.log").exists()
        assert (tmp_path / "freshcart_error.log").exists()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)
        structlog.reset_defaults()


def test_context_is_bound_and_cleared():
    add_context(request_id="req-1")
    assert structlog.contextvars.get_contextvars()["request_id"] == "req-1"
    clear_context()
    assert structlog.contextvars.get_contextvars() == {}
