"""Falcon ASGI application."""

import falcon.asgi
from falcon.asgi import App

from opauthz.interfaces.api.errors import register_error_handlers
from opauthz.interfaces.api.resources.health import HealthResource
from opauthz.interfaces.api.resources.members import MemberResource, MembersResource
from opauthz.interfaces.api.resources.permissions import (
    AccessCheckResource,
    DefaultPermissionsResource,
    MyPermissionsResource,
)


def create_app(
    health_resource: HealthResource,
    members_resource: MembersResource,
    member_resource: MemberResource,
    my_permissions_resource: MyPermissionsResource,
    default_permissions_resource: DefaultPermissionsResource,
    access_check_resource: AccessCheckResource,
    middleware: list | None = None,
) -> App:
    """Create Falcon ASGI app with routes."""
    app = falcon.asgi.App(middleware=middleware or [])
    register_error_handlers(app)
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/operations/{operation_id}/members", members_resource)
    app.add_route("/v1/operations/{operation_id}/members/{user_id}", member_resource)
    app.add_route("/v1/operations/{operation_id}/permissions/me", my_permissions_resource)
    app.add_route("/v1/permissions/defaults/{role}", default_permissions_resource)
    app.add_route("/v1/access/check", access_check_resource)
    app.add_route("/v1/access/check/team", access_check_resource, suffix="team")
    return app
