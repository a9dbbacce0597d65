"""Auth middleware - resolves the caller Identity from a bearer token."""

import falcon.asgi


class AuthMiddleware:
    """Middleware that validates the token and sets req.context.identity.

    req.context.identity is None when no valid token was presented; guards
    answer such requests with 401.
    """

    def __init__(self, keycloak_provider=None) -> None:
        self._keycloak = keycloak_provider

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        """Extract identity from Authorization header."""
        req.context.identity = None
        auth = req.get_header("Authorization")
        if not auth or not auth.startswith("Bearer ") or not self._keycloak:
            return
        req.context.identity = await self._keycloak.decode_token(auth[7:])
