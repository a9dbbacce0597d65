"""Access guard - request-path enforcement of module permissions."""

import logging

from opauthz.application.authorization.permission_resolver import PermissionResolver
from opauthz.application.dto.access_outcome import AccessOutcome, Allow, Reject, RejectKind
from opauthz.domain.entities import Identity
from opauthz.domain.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


class AccessGuard:
    """Wraps PermissionResolver and turns its answer into Allow / Reject."""

    def __init__(self, resolver: PermissionResolver) -> None:
        self._resolver = resolver

    async def enforce(
        self,
        identity: Identity,
        operation_id: str | None,
        module: str,
        action: str,
    ) -> AccessOutcome:
        """Check identity may perform action on module in operation."""
        log_fields = {
            "user_id": identity.user_id,
            "operation_id": operation_id,
            "permission_module": str(module),
            "permission_action": str(action),
        }
        if identity.platform_role.bypasses_operation_checks:
            logger.info(
                "Permission granted (platform role)",
                extra={**log_fields, "platform_role": identity.platform_role.value},
            )
            return Allow()

        if not operation_id:
            logger.info("Operation id missing", extra=log_fields)
            return Reject(
                RejectKind.MISSING_OPERATION_CONTEXT,
                "Operation ID is required",
                module=str(module),
                action=str(action),
            )

        try:
            allowed = await self._resolver.resolve(identity, operation_id, module, action)
        except StoreUnavailable:
            logger.exception("Access store unavailable, denying", extra=log_fields)
            return Reject(
                RejectKind.STORE_UNAVAILABLE,
                "Internal error while checking permissions",
                module=str(module),
                action=str(action),
            )

        if not allowed:
            logger.info("Permission denied", extra=log_fields)
            return Reject(
                RejectKind.ACCESS_DENIED,
                f"Access denied: no permission to {action} in {module}",
                module=str(module),
                action=str(action),
            )

        logger.info("Permission granted", extra=log_fields)
        return Allow()
