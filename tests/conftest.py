"""Pytest fixtures for opauthz tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from opauthz.application.authorization import (
    AccessGuard,
    DefaultPermissionFactory,
    PermissionResolver,
    TeamManagementGuard,
)
from opauthz.domain.entities import AccessGrant, Identity
from opauthz.domain.exceptions import StoreUnavailable
from opauthz.domain.value_objects import OperationRole, PermissionSet, PlatformRole

OPERATION_ID = "op-1"
USER_ID = "user-1"

_BASE_TIME = datetime(2026, 1, 1, tzinfo=UTC)


def make_grant(
    role: OperationRole | str,
    permissions: Any = None,
    user_id: str = USER_ID,
    operation_id: str = OPERATION_ID,
    age: int = 0,
) -> AccessGrant:
    """Grant with permissions parsed the way the store adapter parses them."""
    return AccessGrant(
        user_id=user_id,
        operation_id=operation_id,
        role=role,
        permissions=PermissionSet.from_raw(permissions),
        created_at=_BASE_TIME + timedelta(minutes=age),
    )


def member(user_id: str = USER_ID) -> Identity:
    return Identity(user_id=user_id)


def platform(role: PlatformRole = PlatformRole.SUPER_ADMIN, user_id: str = "staff-1") -> Identity:
    return Identity(user_id=user_id, platform_role=role)


# --- Fake repositories ---


class FakeAccessGrantRepository:
    """In-memory grant repository keyed on (user_id, operation_id)."""

    def __init__(self) -> None:
        self._by_key: dict[tuple[str, str], AccessGrant] = {}

    async def get(self, user_id: str, operation_id: str) -> AccessGrant | None:
        return self._by_key.get((user_id, operation_id))

    async def list_by_operation(self, operation_id: str) -> list[AccessGrant]:
        return [g for g in self._by_key.values() if g.operation_id == operation_id]

    async def create(self, grant: AccessGrant) -> AccessGrant:
        self._by_key[(grant.user_id, grant.operation_id)] = grant
        return grant

    async def update(self, grant: AccessGrant) -> None:
        self._by_key[(grant.user_id, grant.operation_id)] = grant

    async def delete(self, user_id: str, operation_id: str) -> None:
        self._by_key.pop((user_id, operation_id), None)

    def add(self, grant: AccessGrant) -> None:
        """Helper to seed a grant for tests."""
        self._by_key[(grant.user_id, grant.operation_id)] = grant


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.grants = FakeAccessGrantRepository()
        self.committed = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        pass


def make_uow_factory(uow: FakeUnitOfWork):
    """Factory that yields the same FakeUnitOfWork on every call."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        yield uow

    return _factory


# --- Fake access store ---


class FakeAccessStore:
    """In-memory AccessStore that counts lookups and can simulate outages."""

    def __init__(self) -> None:
        self._grants: dict[tuple[str, str], AccessGrant] = {}
        self.calls = 0
        self.fail_with: Exception | None = None
        self.invalidated: list[tuple[str, str]] = []

    def add(self, grant: AccessGrant) -> None:
        self._grants[(grant.user_id, grant.operation_id)] = grant

    async def get_grant(self, user_id: str, operation_id: str) -> AccessGrant | None:
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return self._grants.get((user_id, operation_id))

    def invalidate(self, user_id: str, operation_id: str) -> None:
        self.invalidated.append((user_id, operation_id))


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Fresh in-memory UnitOfWork for each test."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory returning async context manager with the test's FakeUnitOfWork."""
    return make_uow_factory(fake_uow)


@pytest.fixture
def access_store() -> FakeAccessStore:
    return FakeAccessStore()


@pytest.fixture
def store_down(access_store: FakeAccessStore) -> FakeAccessStore:
    """Access store whose every lookup fails."""
    access_store.fail_with = StoreUnavailable("connection refused")
    return access_store


@pytest.fixture
def resolver(access_store: FakeAccessStore) -> PermissionResolver:
    return PermissionResolver(access_store)


@pytest.fixture
def access_guard(resolver: PermissionResolver) -> AccessGuard:
    return AccessGuard(resolver)


@pytest.fixture
def team_guard(access_store: FakeAccessStore) -> TeamManagementGuard:
    return TeamManagementGuard(access_store)


@pytest.fixture
def default_permissions() -> DefaultPermissionFactory:
    return DefaultPermissionFactory()
