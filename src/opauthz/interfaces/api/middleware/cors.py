"""CORS middleware for browser clients of the team and permissions API."""

import falcon
import falcon.asgi

_ALLOW_METHODS = "GET, POST, PATCH, DELETE, OPTIONS"
_ALLOW_HEADERS = "Authorization, Content-Type, X-Operation-Id"


class CORSMiddleware:
    """Echoes allowed origins and answers OPTIONS preflight.

    Unlisted origins get no Access-Control-Allow-Origin header, so browsers
    block the response.
    """

    def __init__(self, origins: list[str]) -> None:
        self._origins = frozenset(origins)

    def _apply(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        origin = req.get_header("Origin")
        if not origin or origin not in self._origins:
            return
        resp.set_headers(
            {
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": _ALLOW_METHODS,
                "Access-Control-Allow-Headers": _ALLOW_HEADERS,
                "Access-Control-Max-Age": "86400",
                "Vary": "Origin",
            }
        )

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        # Preflight carries no credentials; answer it before auth and hooks.
        if req.method == "OPTIONS":
            self._apply(req, resp)
            resp.status = falcon.HTTP_204
            resp.complete = True

    async def process_response(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, req_succeeded
    ) -> None:
        if req.method != "OPTIONS":
            self._apply(req, resp)
