"""Access store reading grants through a Unit of Work."""

from psycopg import Error as PsycopgError

from opauthz.application.ports import UnitOfWorkFactory
from opauthz.domain.entities import AccessGrant
from opauthz.domain.exceptions import StoreUnavailable


class UnitOfWorkAccessStore:
    """Point reads of grants; database faults surface as StoreUnavailable."""

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = unit_of_work_factory

    async def get_grant(self, user_id: str, operation_id: str) -> AccessGrant | None:
        try:
            async with self._uow_factory() as uow:
                return await uow.grants.get(user_id, operation_id)
        except PsycopgError as e:
            raise StoreUnavailable(f"Grant lookup failed: {e}") from e

    def invalidate(self, user_id: str, operation_id: str) -> None:
        pass
