"""CORS middleware for the admin UI origins."""

import falcon.asgi

from quillgate.interfaces.api.middleware.auth import CORRELATION_HEADER


class CORSMiddleware:
    """Adds CORS headers for allowed origins and answers OPTIONS preflight."""

    def __init__(self, origins: list[str]) -> None:
        self._origins = origins

    def _set_cors_headers(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        origin = req.get_header("Origin")
        if not origin or origin not in self._origins:
            return
        resp.set_header("Access-Control-Allow-Origin", origin)
        resp.set_header("Vary", "Origin")
        resp.set_header("Access-Control-Allow-Methods", "GET, POST, DELETE, OPTIONS")
        resp.set_header(
            "Access-Control-Allow-Headers", f"Authorization, Content-Type, {CORRELATION_HEADER}"
        )
        resp.set_header("Access-Control-Expose-Headers", CORRELATION_HEADER)
        resp.set_header("Access-Control-Max-Age", "86400")

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Short-circuit OPTIONS preflight."""
        self._set_cors_headers(req, resp)
        if req.method == "OPTIONS":
            resp.status = falcon.HTTP_200
            resp.media = {}
            resp.complete = True

    async def process_response(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, req_succeeded
    ) -> None:
        self._set_cors_headers(req, resp)
