"""Unit tests for access store adapters."""

import asyncio
import json
from contextlib import asynccontextmanager
from types import SimpleNamespace

import psycopg
import pytest

from opauthz.application.authorization import PermissionResolver

from opauthz.domain.exceptions import StoreUnavailable
from opauthz.domain.value_objects import OperationRole
from opauthz.infrastructure.access import (
    CachingAccessStore,
    GrantChangeListener,
    UnitOfWorkAccessStore,
)

from tests.conftest import (
    OPERATION_ID,
    USER_ID,
    FakeAccessStore,
    FakeUnitOfWork,
    make_grant,
    make_uow_factory,
    member,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


# --- UnitOfWorkAccessStore ---


@pytest.mark.asyncio
async def test_uow_store_reads_grant(fake_uow: FakeUnitOfWork, uow_factory) -> None:
    grant = make_grant(OperationRole.ADMIN)
    fake_uow.grants.add(grant)
    store = UnitOfWorkAccessStore(uow_factory)

    assert await store.get_grant(USER_ID, OPERATION_ID) is grant
    assert await store.get_grant("someone-else", OPERATION_ID) is None


@pytest.mark.asyncio
async def test_uow_store_wraps_database_errors() -> None:
    uow = FakeUnitOfWork()

    async def broken_get(user_id, operation_id):
        raise psycopg.OperationalError("server closed the connection")

    uow.grants.get = broken_get
    store = UnitOfWorkAccessStore(make_uow_factory(uow))

    with pytest.raises(StoreUnavailable, match="Grant lookup failed"):
        await store.get_grant(USER_ID, OPERATION_ID)


@pytest.mark.asyncio
async def test_uow_store_wraps_connection_errors() -> None:
    @asynccontextmanager
    async def unreachable():
        raise psycopg.OperationalError("connection refused")
        yield

    store = UnitOfWorkAccessStore(unreachable)

    with pytest.raises(StoreUnavailable):
        await store.get_grant(USER_ID, OPERATION_ID)


# --- CachingAccessStore ---


@pytest.mark.asyncio
async def test_cache_serves_repeated_reads(access_store: FakeAccessStore) -> None:
    access_store.add(make_grant(OperationRole.VIEWER))
    cache = CachingAccessStore(access_store, ttl_seconds=30, clock=FakeClock())

    first = await cache.get_grant(USER_ID, OPERATION_ID)
    second = await cache.get_grant(USER_ID, OPERATION_ID)

    assert first is second
    assert access_store.calls == 1


@pytest.mark.asyncio
async def test_cache_keys_on_user_and_operation(access_store: FakeAccessStore) -> None:
    access_store.add(make_grant(OperationRole.OWNER))
    cache = CachingAccessStore(access_store, ttl_seconds=30, clock=FakeClock())

    assert await cache.get_grant(USER_ID, OPERATION_ID) is not None
    assert await cache.get_grant(USER_ID, "op-2") is None
    assert await cache.get_grant("user-2", OPERATION_ID) is None
    assert access_store.calls == 3


@pytest.mark.asyncio
async def test_cache_expires_after_ttl(access_store: FakeAccessStore) -> None:
    clock = FakeClock()
    cache = CachingAccessStore(access_store, ttl_seconds=30, clock=clock)

    await cache.get_grant(USER_ID, OPERATION_ID)
    clock.now += 31
    await cache.get_grant(USER_ID, OPERATION_ID)

    assert access_store.calls == 2


@pytest.mark.asyncio
async def test_invalidate_drops_entry(access_store: FakeAccessStore) -> None:
    access_store.add(make_grant(OperationRole.OWNER))
    cache = CachingAccessStore(access_store, ttl_seconds=30, clock=FakeClock())
    await cache.get_grant(USER_ID, OPERATION_ID)

    access_store.add(make_grant(OperationRole.VIEWER))
    cache.invalidate(USER_ID, OPERATION_ID)
    grant = await cache.get_grant(USER_ID, OPERATION_ID)

    assert grant.role is OperationRole.VIEWER
    assert access_store.invalidated == [(USER_ID, OPERATION_ID)]


@pytest.mark.asyncio
async def test_lookup_in_flight_during_invalidate_is_not_cached() -> None:
    clock = FakeClock()

    class SlowStore(FakeAccessStore):
        async def get_grant(self, user_id, operation_id):
            grant = await super().get_grant(user_id, operation_id)
            cache.invalidate(user_id, operation_id)
            return grant

    inner = SlowStore()
    inner.add(make_grant(OperationRole.OWNER))
    cache = CachingAccessStore(inner, ttl_seconds=30, clock=clock)

    await cache.get_grant(USER_ID, OPERATION_ID)
    await cache.get_grant(USER_ID, OPERATION_ID)

    assert inner.calls == 2


@pytest.mark.asyncio
async def test_cache_does_not_store_failures(access_store: FakeAccessStore) -> None:
    cache = CachingAccessStore(access_store, ttl_seconds=30, clock=FakeClock())
    access_store.fail_with = StoreUnavailable("down")

    with pytest.raises(StoreUnavailable):
        await cache.get_grant(USER_ID, OPERATION_ID)

    access_store.fail_with = None
    access_store.add(make_grant(OperationRole.ADMIN))
    grant = await cache.get_grant(USER_ID, OPERATION_ID)
    assert grant is not None


@pytest.mark.asyncio
async def test_clear_during_lookup_is_not_cached() -> None:
    class ClearingStore(FakeAccessStore):
        async def get_grant(self, user_id, operation_id):
            grant = await super().get_grant(user_id, operation_id)
            cache.clear()
            return grant

    inner = ClearingStore()
    cache = CachingAccessStore(inner, ttl_seconds=30, clock=FakeClock())

    await cache.get_grant(USER_ID, OPERATION_ID)
    await cache.get_grant(USER_ID, OPERATION_ID)

    assert inner.calls == 2


@pytest.mark.asyncio
async def test_cache_maps_stay_bounded(access_store: FakeAccessStore) -> None:
    """Expired entries and finished lookups leave nothing behind."""
    clock = FakeClock()
    cache = CachingAccessStore(access_store, ttl_seconds=1, clock=clock)
    for i in range(10_000):
        await cache.get_grant(f"user-{i}", OPERATION_ID)
        cache.invalidate(f"other-{i}", OPERATION_ID)

    clock.now += 1000
    await cache.get_grant(USER_ID, OPERATION_ID)

    assert len(cache._entries) == 1
    assert cache._inflight == {}


@pytest.mark.asyncio
async def test_cache_evicts_oldest_beyond_max_entries(access_store: FakeAccessStore) -> None:
    cache = CachingAccessStore(access_store, ttl_seconds=30, max_entries=3, clock=FakeClock())
    for i in range(5):
        await cache.get_grant(f"user-{i}", OPERATION_ID)

    assert len(cache._entries) == 3
    await cache.get_grant("user-0", OPERATION_ID)
    assert access_store.calls == 6


@pytest.mark.asyncio
async def test_suspended_cache_reads_through(access_store: FakeAccessStore) -> None:
    access_store.add(make_grant(OperationRole.ADMIN))
    cache = CachingAccessStore(access_store, ttl_seconds=30, active=False, clock=FakeClock())

    await cache.get_grant(USER_ID, OPERATION_ID)
    await cache.get_grant(USER_ID, OPERATION_ID)

    assert access_store.calls == 2
    assert cache._entries == {}


@pytest.mark.asyncio
async def test_suspend_drops_cached_grants(access_store: FakeAccessStore) -> None:
    access_store.add(make_grant(OperationRole.ADMIN))
    cache = CachingAccessStore(access_store, ttl_seconds=30, clock=FakeClock())
    await cache.get_grant(USER_ID, OPERATION_ID)

    cache.suspend()
    access_store.add(make_grant(OperationRole.VIEWER))
    cache.resume()

    grant = await cache.get_grant(USER_ID, OPERATION_ID)
    assert grant.role is OperationRole.VIEWER


# --- GrantChangeListener ---


def _change(user_id: str = USER_ID, operation_id: str = OPERATION_ID) -> str:
    return json.dumps({"user_id": user_id, "operation_id": operation_id})


@pytest.mark.asyncio
async def test_demotion_in_another_process_reaches_every_cache(
    access_store: FakeAccessStore,
) -> None:
    """Two workers' caches over one store: a write handled by B is seen by A."""
    access_store.add(make_grant(OperationRole.ADMIN))
    cache_a = CachingAccessStore(access_store, ttl_seconds=300, clock=FakeClock())
    cache_b = CachingAccessStore(access_store, ttl_seconds=300, clock=FakeClock())
    listeners = [GrantChangeListener("", cache_a), GrantChangeListener("", cache_b)]
    resolver_a = PermissionResolver(cache_a)
    assert await resolver_a.resolve(member(), OPERATION_ID, "orders", "delete") is True

    access_store.add(make_grant(OperationRole.VIEWER))
    cache_b.invalidate(USER_ID, OPERATION_ID)
    for listener in listeners:
        listener.dispatch(_change())

    assert await resolver_a.resolve(member(), OPERATION_ID, "orders", "delete") is False


@pytest.mark.asyncio
async def test_cache_without_listener_connection_never_serves_stale(
    access_store: FakeAccessStore,
) -> None:
    access_store.add(make_grant(OperationRole.ADMIN))
    cache = CachingAccessStore(access_store, ttl_seconds=300, active=False, clock=FakeClock())
    resolver = PermissionResolver(cache)
    assert await resolver.resolve(member(), OPERATION_ID, "orders", "delete") is True

    access_store.add(make_grant(OperationRole.VIEWER))

    assert await resolver.resolve(member(), OPERATION_ID, "orders", "delete") is False


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", ["*", "not json", json.dumps({"user_id": "u"})])
async def test_dispatch_clears_on_truncate_or_unreadable_payload(
    access_store: FakeAccessStore, payload: str
) -> None:
    cache = CachingAccessStore(access_store, ttl_seconds=300, clock=FakeClock())
    await cache.get_grant(USER_ID, OPERATION_ID)

    GrantChangeListener("", cache).dispatch(payload)

    assert cache._entries == {}


class FakeListenConnection:
    def __init__(self, payloads: list[str]) -> None:
        self.payloads = payloads
        self.executed: list[str] = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True

    async def execute(self, query):
        self.executed.append(query)

    async def notifies(self):
        for payload in self.payloads:
            yield SimpleNamespace(payload=payload)


@pytest.mark.asyncio
async def test_listen_once_resumes_cache_and_applies_changes(
    access_store: FakeAccessStore,
) -> None:
    conn = FakeListenConnection([_change()])

    async def connect(conninfo, autocommit):
        assert autocommit is True
        return conn

    cache = CachingAccessStore(access_store, ttl_seconds=300, active=False, clock=FakeClock())
    await GrantChangeListener("postgresql://test", cache, connect=connect).listen_once()

    assert conn.executed == ["LISTEN grant_changed"]
    assert cache.active is True
    assert access_store.invalidated == [(USER_ID, OPERATION_ID)]
    assert conn.closed is True


@pytest.mark.asyncio
async def test_run_suspends_cache_when_connection_lost(access_store: FakeAccessStore) -> None:
    attempts = []

    async def connect(conninfo, autocommit):
        attempts.append(conninfo)
        if len(attempts) == 1:
            raise psycopg.OperationalError("connection refused")
        raise asyncio.CancelledError

    cache = CachingAccessStore(access_store, ttl_seconds=300, clock=FakeClock())
    listener = GrantChangeListener("postgresql://test", cache, reconnect_delay=0, connect=connect)

    with pytest.raises(asyncio.CancelledError):
        await listener.run()

    assert len(attempts) == 2
    assert cache.active is False
