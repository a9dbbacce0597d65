"""Unit of Work port - transactional boundary."""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from opauthz.application.ports.repositories.access_grant_repository import (
    AccessGrantRepository,
)


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def grants(self) -> AccessGrantRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory returning an async context manager that yields a UnitOfWork."""

    def __call__(self) -> AbstractAsyncContextManager[UnitOfWork]: ...
