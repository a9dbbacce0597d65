"""Pool lifespan middleware - opens the grant store pool on startup."""

import logging
from typing import Any

from psycopg_pool import AsyncConnectionPool

from opauthz.infrastructure.access import GrantChangeListener

logger = logging.getLogger(__name__)


class PoolLifespanMiddleware:
    """Opens the connection pool when the ASGI server starts, closes it on shutdown.

    The grant change listener, when the grant cache is enabled, runs for the
    same lifetime.
    """

    def __init__(
        self, pool: AsyncConnectionPool, grant_listener: GrantChangeListener | None = None
    ) -> None:
        self._pool = pool
        self._grant_listener = grant_listener

    async def process_startup(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        await self._pool.open()
        logger.info("Connection pool opened", extra={"max_size": self._pool.max_size})
        if self._grant_listener is not None:
            self._grant_listener.start()

    async def process_shutdown(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        if self._grant_listener is not None:
            await self._grant_listener.stop()
        await self._pool.close()
        logger.info("Connection pool closed")
