"""Team management guard - role-only gate for member administration."""

import logging

from opauthz.application.dto.access_outcome import AccessOutcome, Allow, Reject, RejectKind
from opauthz.application.ports import AccessStore
from opauthz.domain.entities import Identity
from opauthz.domain.exceptions import InvalidGrant, StoreUnavailable
from opauthz.domain.value_objects import OperationRole

logger = logging.getLogger(__name__)


class TeamManagementGuard:
    """Allows inviting, removing and re-roling members only to owners and admins.

    Granular permission overrides (e.g. team.manage) are ignored here: a
    viewer with a permissive override must not be able to change other
    members' access.
    """

    def __init__(self, access_store: AccessStore) -> None:
        self._store = access_store

    async def enforce_team_management(
        self, identity: Identity, operation_id: str | None
    ) -> AccessOutcome:
        """Check identity may administer the team of operation."""
        log_fields = {"user_id": identity.user_id, "operation_id": operation_id}
        if identity.platform_role.bypasses_operation_checks:
            return Allow()

        if not operation_id:
            return Reject(RejectKind.MISSING_OPERATION_CONTEXT, "Operation ID is required")

        try:
            grant = await self._store.get_grant(identity.user_id, operation_id)
        except InvalidGrant:
            logger.warning("Unreadable grant, denying team management", extra=log_fields)
            grant = None
        except StoreUnavailable:
            logger.exception("Access store unavailable, denying team management", extra=log_fields)
            return Reject(
                RejectKind.STORE_UNAVAILABLE,
                "Internal error while checking team permissions",
            )

        if grant is None:
            logger.info("Team management denied (no grant)", extra=log_fields)
            return Reject(
                RejectKind.ACCESS_DENIED,
                "Access denied: you cannot manage this team",
                module="team",
                action="manage",
            )

        if grant.role not in (OperationRole.OWNER, OperationRole.ADMIN):
            logger.info(
                "Team management denied (role)",
                extra={**log_fields, "role": str(grant.role)},
            )
            return Reject(
                RejectKind.ACCESS_DENIED,
                "Access denied: only owners and admins can manage the team",
                module="team",
                action="manage",
            )

        return Allow()
