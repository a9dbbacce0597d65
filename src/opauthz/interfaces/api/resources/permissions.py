"""Permission query API resources."""

import falcon
import falcon.asgi

from opauthz.application.authorization import (
    AccessGuard,
    DefaultPermissionFactory,
    PermissionResolver,
    TeamManagementGuard,
)
from opauthz.application.dto.access_outcome import Reject
from opauthz.domain.exceptions import StoreUnavailable
from opauthz.domain.value_objects import OperationRole, ensure_defined
from opauthz.interfaces.api.errors import write_error, write_reject, write_unauthorized


def _operation_id(body: dict) -> str | None:
    value = body.get("operation_id") or body.get("operationId")
    return value if isinstance(value, str) and value else None


class MyPermissionsResource:
    """GET /v1/operations/{operation_id}/permissions/me - caller's effective flags."""

    def __init__(self, resolver: PermissionResolver) -> None:
        self._resolver = resolver

    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        operation_id: str,
    ) -> None:
        identity = getattr(req.context, "identity", None)
        if not identity:
            write_unauthorized(resp)
            return

        try:
            permissions = await self._resolver.effective_permissions(identity, operation_id)
        except StoreUnavailable as e:
            write_error(resp, e)
            return
        resp.media = {"operation_id": operation_id, "permissions": permissions.to_dict()}
        resp.status = falcon.HTTP_200


class DefaultPermissionsResource:
    """GET /v1/permissions/defaults/{role} - seed template for a role."""

    def __init__(self, default_permissions: DefaultPermissionFactory) -> None:
        self._defaults = default_permissions

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role: str
    ) -> None:
        try:
            parsed = OperationRole(role)
        except ValueError:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "not_found", "message": f"Unknown role: {role}"}
            return
        resp.media = {"role": parsed.value, "permissions": self._defaults.defaults_for(parsed).to_dict()}
        resp.status = falcon.HTTP_200


class AccessCheckResource:
    """POST /v1/access/check and /v1/access/check/team - decisions for other services.

    Allowed checks answer 200 {"allowed": true}; rejected checks answer with
    the reject status and body.
    """

    def __init__(self, access_guard: AccessGuard, team_guard: TeamManagementGuard) -> None:
        self._access_guard = access_guard
        self._team_guard = team_guard

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        identity = getattr(req.context, "identity", None)
        if not identity:
            write_unauthorized(resp)
            return

        body = await req.get_media(default_when_empty={})
        if not isinstance(body, dict):
            body = {}
        try:
            module, action = ensure_defined(body.get("module"), body.get("action"))
        except ValueError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "validation_error", "message": str(e)}
            return

        outcome = await self._access_guard.enforce(
            identity, _operation_id(body), module, action
        )
        self._write_outcome(resp, outcome)

    async def on_post_team(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        identity = getattr(req.context, "identity", None)
        if not identity:
            write_unauthorized(resp)
            return

        body = await req.get_media(default_when_empty={})
        if not isinstance(body, dict):
            body = {}
        outcome = await self._team_guard.enforce_team_management(identity, _operation_id(body))
        self._write_outcome(resp, outcome)

    def _write_outcome(self, resp: falcon.asgi.Response, outcome) -> None:
        if isinstance(outcome, Reject):
            write_reject(resp, outcome)
            return
        resp.media = {"allowed": True}
        resp.status = falcon.HTTP_200
