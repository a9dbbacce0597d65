"""Read-through grant cache keyed on (user_id, operation_id)."""

import time
from collections.abc import Callable

from opauthz.application.ports import AccessStore
from opauthz.domain.entities import AccessGrant


class CachingAccessStore:
    """Caches grant lookups, including misses, for ttl_seconds.

    Only safe while every grant change reaches invalidate(): local writers
    call it directly and GrantChangeListener forwards changes committed by
    other processes. While suspended (no listener connection) every lookup
    goes to the inner store and nothing is cached.

    A lookup that was in flight when its pair was invalidated, or when the
    cache was cleared, is returned but not cached. Entries expire in
    insertion order, so expired ones are swept from the front on each
    write; at most max_entries are held.
    """

    def __init__(
        self,
        inner: AccessStore,
        ttl_seconds: float,
        max_entries: int = 10_000,
        active: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._inner = inner
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._active = active
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[float, AccessGrant | None]] = {}
        # Only pairs with a lookup in flight: [lookups, invalidations seen].
        self._inflight: dict[tuple[str, str], list[int]] = {}
        self._epoch = 0

    @property
    def active(self) -> bool:
        return self._active

    async def get_grant(self, user_id: str, operation_id: str) -> AccessGrant | None:
        key = (user_id, operation_id)
        if not self._active:
            return await self._inner.get_grant(user_id, operation_id)

        entry = self._entries.get(key)
        if entry is not None:
            if entry[0] > self._clock():
                return entry[1]
            del self._entries[key]

        state = self._inflight.setdefault(key, [0, 0])
        state[0] += 1
        seen, epoch = state[1], self._epoch
        try:
            grant = await self._inner.get_grant(user_id, operation_id)
            if self._active and state[1] == seen and self._epoch == epoch:
                self._store(key, grant)
            return grant
        finally:
            state[0] -= 1
            if state[0] == 0:
                del self._inflight[key]

    def invalidate(self, user_id: str, operation_id: str) -> None:
        key = (user_id, operation_id)
        state = self._inflight.get(key)
        if state is not None:
            state[1] += 1
        self._entries.pop(key, None)
        self._inner.invalidate(user_id, operation_id)

    def clear(self) -> None:
        """Drop every entry; lookups in flight will not be cached."""
        self._epoch += 1
        self._entries.clear()

    def suspend(self) -> None:
        self._active = False
        self.clear()

    def resume(self) -> None:
        self.clear()
        self._active = True

    def _store(self, key: tuple[str, str], grant: AccessGrant | None) -> None:
        now = self._clock()
        self._entries.pop(key, None)
        while self._entries:
            oldest = next(iter(self._entries))
            if self._entries[oldest][0] > now and len(self._entries) < self._max_entries:
                break
            del self._entries[oldest]
        self._entries[key] = (now + self._ttl, grant)
