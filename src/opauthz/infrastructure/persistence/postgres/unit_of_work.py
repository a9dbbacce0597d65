"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from opauthz.infrastructure.persistence.postgres.access_grant_repository import (
    PostgresAccessGrantRepository,
)


class PostgresUnitOfWork:
    """Grant repository bound to one pooled connection and its transaction."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn
        self._grants = PostgresAccessGrantRepository(conn)

    @property
    def grants(self) -> PostgresAccessGrantRepository:
        return self._grants

    async def commit(self) -> None:
        await self._conn.commit()

    async def rollback(self) -> None:
        await self._conn.rollback()


def create_uow_factory(
    pool: AsyncConnectionPool,
) -> Callable[[], AbstractAsyncContextManager[PostgresUnitOfWork]]:
    """Create UnitOfWork factory: commit on clean exit, rollback on error.

    Acquiring the connection may raise PoolTimeout when the pool is
    exhausted or the database is down.
    """

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        async with pool.connection() as conn:
            uow = PostgresUnitOfWork(conn)
            try:
                yield uow
            except BaseException:
                await uow.rollback()
                raise
            await uow.commit()

    return factory
