"""Remove member use case."""

from opauthz.application.authorization import TeamManagementGuard
from opauthz.application.dto.access_outcome import Reject
from opauthz.application.ports import AccessStore, UnitOfWorkFactory
from opauthz.domain.entities import Identity
from opauthz.domain.exceptions import NotFound


class RemoveMemberUseCase:
    """Delete a member's grant on an operation."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        team_guard: TeamManagementGuard,
        access_store: AccessStore,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._team_guard = team_guard
        self._access_store = access_store

    async def execute(self, actor: Identity, operation_id: str, user_id: str) -> None:
        """Remove user_id from operation. Actor must manage the team."""
        outcome = await self._team_guard.enforce_team_management(actor, operation_id)
        if isinstance(outcome, Reject):
            outcome.raise_error()

        try:
            async with self._uow_factory() as uow:
                grant = await uow.grants.get(user_id, operation_id)
                if not grant:
                    raise NotFound("Member", f"{operation_id}/{user_id}")
                await uow.grants.delete(user_id, operation_id)
        finally:
            self._access_store.invalidate(user_id, operation_id)
