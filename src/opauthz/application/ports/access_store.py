"""Access store port - point reads of a user's grant on an operation."""

from typing import Protocol

from opauthz.domain.entities import AccessGrant


class AccessStore(Protocol):
    """Port for loading grants during authorization.

    Implementations raise StoreUnavailable when the backing store fails.
    """

    async def get_grant(self, user_id: str, operation_id: str) -> AccessGrant | None: ...

    def invalidate(self, user_id: str, operation_id: str) -> None: ...
