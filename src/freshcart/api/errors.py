"""HTTP mapping of the FreshCart error taxonomy.

Protean's handlers cover ValidationError (400). The handlers below pin
missing aggregates to 404 and add conflicts, partial writes and
unreachable backends.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError
from protean.integrations.fastapi import register_exception_handlers

from freshcart.errors import ConflictError, PartialFailureError, TransportError

logger = structlog.get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(ObjectNotFoundError)
    async def not_found_handler(request: Request, exc: ObjectNotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        logger.info("Request conflicts with current state", path=request.url.path, error=type(exc).__name__)
        return JSONResponse(status_code=409, content={"error": exc.messages, "type": type(exc).__name__})

    @app.exception_handler(PartialFailureError)
    async def partial_failure_handler(request: Request, exc: PartialFailureError):
        logger.error("Order only partially written", order_id=exc.order_id, repaired=exc.repaired)
        return JSONResponse(
            status_code=500,
            content={"error": exc.messages, "order_id": exc.order_id, "repaired": exc.repaired},
        )

    @app.exception_handler(TransportError)
    async def transport_handler(request: Request, exc: TransportError):
        logger.error("Backend unreachable", source=exc.source, reason=exc.reason)
        return JSONResponse(status_code=503, content={"error": exc.messages})
