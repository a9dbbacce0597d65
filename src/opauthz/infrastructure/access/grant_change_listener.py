"""Forwards grant changes committed anywhere to this process's grant cache."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable

import psycopg
from psycopg import AsyncConnection

from opauthz.infrastructure.access.caching_access_store import CachingAccessStore

logger = logging.getLogger(__name__)

CHANNEL = "grant_changed"


class GrantChangeListener:
    """LISTENs on grant_changed (published by the user_operation_access trigger).

    The cache is resumed only once LISTEN is in place and suspended again as
    soon as the connection is lost, so no change can be missed while it
    serves cached grants.
    """

    def __init__(
        self,
        conninfo: str,
        cache: CachingAccessStore,
        reconnect_delay: float = 1.0,
        connect: Callable[..., Awaitable[AsyncConnection]] = AsyncConnection.connect,
    ) -> None:
        self._conninfo = conninfo
        self._cache = cache
        self._reconnect_delay = reconnect_delay
        self._connect = connect
        self._task: asyncio.Task | None = None

    def dispatch(self, payload: str) -> None:
        """Apply one notification payload to the cache."""
        if payload == "*":
            self._cache.clear()
            return
        try:
            data = json.loads(payload)
            user_id, operation_id = data["user_id"], data["operation_id"]
        except (ValueError, TypeError, KeyError):
            logger.warning("Unreadable grant notification, clearing cache", extra={"payload": payload})
            self._cache.clear()
            return
        self._cache.invalidate(user_id, operation_id)

    async def listen_once(self) -> None:
        """Listen on one connection until it ends; raises psycopg.Error on failure."""
        conn = await self._connect(self._conninfo, autocommit=True)
        async with conn:
            await conn.execute(f"LISTEN {CHANNEL}")
            self._cache.resume()
            logger.info("Grant change listener connected")
            async for notify in conn.notifies():
                self.dispatch(notify.payload)

    async def run(self) -> None:
        while True:
            try:
                await self.listen_once()
            except psycopg.Error:
                logger.warning("Grant change listener disconnected", exc_info=True)
            finally:
                self._cache.suspend()
            await asyncio.sleep(self._reconnect_delay)

    def start(self) -> None:
        self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
