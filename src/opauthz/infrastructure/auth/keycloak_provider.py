"""Keycloak OIDC provider for token validation."""

import logging

from keycloak import KeycloakOpenID

from opauthz.domain.entities import Identity
from opauthz.domain.value_objects import PlatformRole

logger = logging.getLogger(__name__)


def platform_role_from_claims(
    realm_roles: list[str],
    admin_role: str = "admin",
    super_admin_role: str = "super_admin",
) -> PlatformRole:
    """Highest platform role named in the token's realm roles."""
    if super_admin_role in realm_roles:
        return PlatformRole.SUPER_ADMIN
    if admin_role in realm_roles:
        return PlatformRole.ADMIN
    return PlatformRole.NONE


class KeycloakProvider:
    """Keycloak OIDC - introspects tokens and builds the caller Identity."""

    def __init__(
        self,
        server_url: str,
        realm: str,
        client_id: str,
        client_secret: str = "",
        admin_role: str = "admin",
        super_admin_role: str = "super_admin",
    ) -> None:
        self._keycloak = KeycloakOpenID(
            server_url=server_url,
            realm_name=realm,
            client_id=client_id,
            client_secret_key=client_secret,
        )
        self._admin_role = admin_role
        self._super_admin_role = super_admin_role

    async def decode_token(self, token: str) -> Identity | None:
        """Validate token, return caller identity or None."""
        try:
            token_info = await self._keycloak.a_introspect(token)
        except Exception:
            logger.warning("Token introspection failed", exc_info=True)
            return None
        if not token_info.get("active") or not token_info.get("sub"):
            return None
        realm_roles = (token_info.get("realm_access") or {}).get("roles") or []
        return Identity(
            user_id=token_info["sub"],
            platform_role=platform_role_from_claims(
                realm_roles, self._admin_role, self._super_admin_role
            ),
        )
