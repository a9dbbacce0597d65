"""Access grant repository port."""

from typing import Protocol

from opauthz.domain.entities import AccessGrant


class AccessGrantRepository(Protocol):
    """Port for grant persistence."""

    async def get(self, user_id: str, operation_id: str) -> AccessGrant | None: ...

    async def list_by_operation(self, operation_id: str) -> list[AccessGrant]: ...

    async def create(self, grant: AccessGrant) -> AccessGrant: ...

    async def update(self, grant: AccessGrant) -> None: ...

    async def delete(self, user_id: str, operation_id: str) -> None: ...
