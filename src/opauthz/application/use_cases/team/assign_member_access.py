"""Assign member access use case."""

from datetime import UTC, datetime

from opauthz.application.authorization import DefaultPermissionFactory, TeamManagementGuard
from opauthz.application.dto.access_outcome import Reject
from opauthz.application.dto.member_dto import MemberAccessInput
from opauthz.application.ports import AccessStore, UnitOfWorkFactory
from opauthz.domain.entities import AccessGrant, Identity
from opauthz.domain.exceptions import NotFound, ValidationError
from opauthz.domain.value_objects import OperationRole, PermissionSet


class AssignMemberAccessUseCase:
    """Create or update the single grant of a member on an operation."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        team_guard: TeamManagementGuard,
        access_store: AccessStore,
        default_permissions: DefaultPermissionFactory,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._team_guard = team_guard
        self._access_store = access_store
        self._defaults = default_permissions

    async def execute(
        self,
        actor: Identity,
        operation_id: str,
        data: MemberAccessInput,
        must_exist: bool = False,
    ) -> AccessGrant:
        """Upsert role/permissions for data.user_id. Actor must manage the team."""
        outcome = await self._team_guard.enforce_team_management(actor, operation_id)
        if isinstance(outcome, Reject):
            outcome.raise_error()

        role = None
        if data.role is not None:
            try:
                role = OperationRole(data.role)
            except ValueError:
                raise ValidationError(f"Unknown role: {data.role}") from None

        override = None
        if data.permissions is not None and not data.reset_permissions:
            override = PermissionSet.validate(data.permissions)

        try:
            async with self._uow_factory() as uow:
                existing = await uow.grants.get(data.user_id, operation_id)
                if existing is None and must_exist:
                    raise NotFound("Member", f"{operation_id}/{data.user_id}")

                if role is None:
                    role = existing.role if existing else OperationRole.VIEWER
                if data.reset_permissions:
                    permissions = self._defaults.defaults_for(role)
                elif data.keep_permissions and existing:
                    permissions = existing.permissions
                else:
                    permissions = override

                if existing:
                    existing.role = role
                    existing.permissions = permissions
                    await uow.grants.update(existing)
                    return existing

                grant = AccessGrant(
                    user_id=data.user_id,
                    operation_id=operation_id,
                    role=role,
                    permissions=permissions,
                    created_at=datetime.now(UTC),
                )
                await uow.grants.create(grant)
                return grant
        finally:
            self._access_store.invalidate(data.user_id, operation_id)
