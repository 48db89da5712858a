"""Maps domain exceptions to HTTP responses."""

import logging

import falcon
import falcon.asgi

from quillgate.domain.exceptions import (
    ConcurrentModification,
    DelegationNotPermitted,
    GovernanceError,
    InsufficientGrantorScope,
    NotFound,
    PermissionDenied,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS: list[tuple[type[Exception], str]] = [
    (NotFound, falcon.HTTP_404),
    (PermissionDenied, falcon.HTTP_403),
    (InsufficientGrantorScope, falcon.HTTP_403),
    (DelegationNotPermitted, falcon.HTTP_403),
    (ValidationError, falcon.HTTP_400),
    (ConcurrentModification, falcon.HTTP_409),
    (GovernanceError, falcon.HTTP_409),
]


def _handler_for(status: str):
    async def handle(
        req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params
    ) -> None:
        resp.status = status
        resp.media = {"error": str(ex), "type": type(ex).__name__}

    return handle


async def _handle_unexpected(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params
) -> None:
    logger.error("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"error": "Internal server error"}


def register_error_handlers(app: falcon.asgi.App) -> None:
    """Register one handler per domain exception; anything else becomes a logged 500."""
    app.add_error_handler(Exception, _handle_unexpected)
    for exc_type, status in _STATUS:
        app.add_error_handler(exc_type, _handler_for(status))
