"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from opauthz.application.authorization import (
    AccessGuard,
    DefaultPermissionFactory,
    PermissionResolver,
    TeamManagementGuard,
)
from opauthz.application.use_cases.team.assign_member_access import AssignMemberAccessUseCase
from opauthz.application.use_cases.team.remove_member import RemoveMemberUseCase
from opauthz.domain.entities import Identity
from opauthz.domain.value_objects import PlatformRole
from opauthz.infrastructure.access import UnitOfWorkAccessStore
from opauthz.interfaces.api.app import create_app
from opauthz.interfaces.api.resources.health import HealthResource
from opauthz.interfaces.api.resources.members import MemberResource, MembersResource
from opauthz.interfaces.api.resources.permissions import (
    AccessCheckResource,
    DefaultPermissionsResource,
    MyPermissionsResource,
)


class HeaderIdentityMiddleware:
    """Middleware that sets context.identity from X-Test-* headers for testing."""

    async def process_request(self, req, resp):
        user_id = req.get_header("X-Test-User")
        if not user_id:
            req.context.identity = None
            return
        role = req.get_header("X-Test-Platform-Role") or PlatformRole.NONE.value
        req.context.identity = Identity(user_id=user_id, platform_role=PlatformRole(role))


@pytest.fixture
def app(uow_factory):
    """Falcon ASGI app wired like production, over the in-memory UoW."""
    access_store = UnitOfWorkAccessStore(uow_factory)
    resolver = PermissionResolver(access_store)
    access_guard = AccessGuard(resolver)
    team_guard = TeamManagementGuard(access_store)
    default_permissions = DefaultPermissionFactory()
    assign_member_access = AssignMemberAccessUseCase(
        unit_of_work_factory=uow_factory,
        team_guard=team_guard,
        access_store=access_store,
        default_permissions=default_permissions,
    )
    remove_member = RemoveMemberUseCase(
        unit_of_work_factory=uow_factory,
        team_guard=team_guard,
        access_store=access_store,
    )
    return create_app(
        health_resource=HealthResource(),
        members_resource=MembersResource(uow_factory, access_guard, assign_member_access),
        member_resource=MemberResource(assign_member_access, remove_member),
        my_permissions_resource=MyPermissionsResource(resolver),
        default_permissions_resource=DefaultPermissionsResource(default_permissions),
        access_check_resource=AccessCheckResource(access_guard, team_guard),
        middleware=[HeaderIdentityMiddleware()],
    )


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    return TestClient(app)


def as_user(user_id: str, platform_role: str | None = None) -> dict[str, str]:
    headers = {"X-Test-User": user_id}
    if platform_role:
        headers["X-Test-Platform-Role"] = platform_role
    return headers
