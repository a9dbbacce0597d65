"""Permission resolver - decides module actions for an identity on an operation."""

import logging

from opauthz.application.ports import AccessStore
from opauthz.domain.entities import AccessGrant, Identity
from opauthz.domain.exceptions import InvalidGrant
from opauthz.domain.value_objects import OperationRole, PermissionAction, PermissionSet

logger = logging.getLogger(__name__)


class PermissionResolver:
    """Resolves allow/deny from platform role, grant role and permission override.

    Order of evaluation:
    1. platform admin / super_admin -> allow, store not consulted
    2. no grant for (user, operation) -> deny
    3. owner / admin -> allow, override ignored
    4. viewer without override -> allow only view
    5. override present -> the flag itself, absent keys deny

    StoreUnavailable from the store propagates to the caller.
    """

    def __init__(self, access_store: AccessStore) -> None:
        self._store = access_store

    async def resolve(
        self,
        identity: Identity,
        operation_id: str,
        module: str,
        action: str,
    ) -> bool:
        """Return True if identity may perform action on module in operation."""
        if identity.platform_role.bypasses_operation_checks:
            return True

        grant = await self._load_grant(identity, operation_id)
        if grant is None:
            return False
        return self._decide(grant, module, action)

    async def effective_permissions(
        self, identity: Identity, operation_id: str
    ) -> PermissionSet:
        """Every defined module/action flag for identity, from a single grant read."""
        if identity.platform_role.bypasses_operation_checks:
            return PermissionSet.build(lambda module, action: True)

        grant = await self._load_grant(identity, operation_id)
        if grant is None:
            return PermissionSet()
        return PermissionSet.build(
            lambda module, action: self._decide(grant, module, action)
        )

    async def _load_grant(self, identity: Identity, operation_id: str) -> AccessGrant | None:
        try:
            return await self._store.get_grant(identity.user_id, operation_id)
        except InvalidGrant as e:
            logger.warning(
                "Unreadable grant, denying",
                extra={
                    "user_id": identity.user_id,
                    "operation_id": operation_id,
                    "reason": str(e),
                },
            )
            return None

    def _decide(self, grant: AccessGrant, module: str, action: str) -> bool:
        role = grant.role
        if role in (OperationRole.OWNER, OperationRole.ADMIN):
            return True
        if role == OperationRole.VIEWER:
            if grant.permissions is None:
                return action == PermissionAction.VIEW
            return grant.permissions.allows(module, action)
        logger.error(
            "Unrecognized operation role, denying",
            extra={
                "user_id": grant.user_id,
                "operation_id": grant.operation_id,
                "role": str(role),
            },
        )
        return False
