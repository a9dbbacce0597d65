"""Application entry point and composition root."""

from functools import partial

from opauthz import __version__
from opauthz.application.authorization import (
    AccessGuard,
    DefaultPermissionFactory,
    PermissionResolver,
    TeamManagementGuard,
)
from opauthz.application.use_cases.team.assign_member_access import AssignMemberAccessUseCase
from opauthz.application.use_cases.team.remove_member import RemoveMemberUseCase
from opauthz.config import Settings, get_settings
from opauthz.infrastructure.access import (
    CachingAccessStore,
    GrantChangeListener,
    UnitOfWorkAccessStore,
)
from opauthz.infrastructure.auth.keycloak_provider import KeycloakProvider
from opauthz.infrastructure.persistence.postgres.connection import create_pool, ping
from opauthz.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from opauthz.interfaces.api.app import create_app
from opauthz.interfaces.api.middleware.auth import AuthMiddleware
from opauthz.interfaces.api.middleware.cors import CORSMiddleware
from opauthz.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from opauthz.interfaces.api.resources.health import HealthResource
from opauthz.interfaces.api.resources.members import MemberResource, MembersResource
from opauthz.interfaces.api.resources.permissions import (
    AccessCheckResource,
    DefaultPermissionsResource,
    MyPermissionsResource,
)
from opauthz.logging_config import configure_logging


def main() -> None:
    """CLI entry point."""
    print(f"opauthz v{__version__}")


def create_opauthz_app(settings: Settings | None = None):
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_logs=settings.json_logs)

    pool = create_pool(settings.database_url, timeout=settings.database_pool_timeout)
    uow_factory = create_uow_factory(pool)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
            admin_role=settings.platform_admin_role,
            super_admin_role=settings.platform_super_admin_role,
        )
        if settings.keycloak_client_secret
        else None
    )

    access_store = UnitOfWorkAccessStore(uow_factory)
    grant_listener = None
    if settings.grant_cache_ttl_seconds > 0:
        # Serves from cache only while the listener is connected.
        access_store = CachingAccessStore(
            access_store,
            settings.grant_cache_ttl_seconds,
            max_entries=settings.grant_cache_max_entries,
            active=False,
        )
        grant_listener = GrantChangeListener(settings.database_url, access_store)

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

    cors_origins = [
        o.strip() for o in settings.cors_origins.split(",") if o.strip()
    ]
    return create_app(
        health_resource=HealthResource(ready_check=partial(ping, pool)),
        members_resource=MembersResource(uow_factory, access_guard, assign_member_access),
        member_resource=MemberResource(assign_member_access, remove_member),
        my_permissions_resource=MyPermissionsResource(resolver),
        default_permissions_resource=DefaultPermissionsResource(default_permissions),
        access_check_resource=AccessCheckResource(access_guard, team_guard),
        middleware=[
            CORSMiddleware(cors_origins),
            PoolLifespanMiddleware(pool, grant_listener),
            AuthMiddleware(keycloak),
        ],
    )


def run_server() -> None:
    """Run uvicorn server."""
    import uvicorn

    uvicorn.run("opauthz.main:create_opauthz_app", factory=True, host="0.0.0.0", port=8000)
