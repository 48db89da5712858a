"""Auth middleware - resolves the caller from a bearer token."""

from dataclasses import dataclass
from uuid import UUID

import falcon.asgi

CORRELATION_HEADER = "X-Correlation-ID"


@dataclass
class RequestUser:
    """Caller from request context."""

    user_id: str
    email: str | None = None
    username: str | None = None
    session_id: str | None = None


class AuthMiddleware:
    """Sets req.context.user (None when unauthenticated) and req.context.correlation_id."""

    def __init__(self, keycloak_provider=None) -> None:
        self._keycloak = keycloak_provider

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        req.context.correlation_id = _correlation_id(req.get_header(CORRELATION_HEADER))
        req.context.user = None

        auth = req.get_header("Authorization")
        if not auth or not auth.startswith("Bearer ") or not self._keycloak:
            return
        user = self._keycloak.decode_token(auth[7:])
        if user:
            req.context.user = RequestUser(
                user_id=user.user_id,
                email=user.email,
                username=user.username,
                session_id=user.session_id,
            )

    async def process_response(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, req_succeeded
    ) -> None:
        """Echo the caller's correlation id."""
        correlation_id = getattr(req.context, "correlation_id", None)
        if correlation_id:
            resp.set_header(CORRELATION_HEADER, str(correlation_id))


def _correlation_id(value: str | None) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None
