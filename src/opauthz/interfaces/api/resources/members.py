"""Team members API resources."""

import falcon
import falcon.asgi

from opauthz.application.authorization import AccessGuard
from opauthz.application.dto.member_dto import MemberAccessInput, grant_to_dict
from opauthz.application.ports import UnitOfWorkFactory
from opauthz.application.use_cases.team.assign_member_access import AssignMemberAccessUseCase
from opauthz.application.use_cases.team.remove_member import RemoveMemberUseCase
from opauthz.domain.exceptions import OpAuthzError
from opauthz.interfaces.api.errors import write_error, write_unauthorized
from opauthz.interfaces.api.hooks import require_permission


def _bad_request(resp: falcon.asgi.Response, message: str) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": "validation_error", "message": message}


class MembersResource:
    """GET/POST /v1/operations/{operation_id}/members - list and add members."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        access_guard: AccessGuard,
        assign_member_access: AssignMemberAccessUseCase,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self.access_guard = access_guard
        self._assign = assign_member_access

    @falcon.before(require_permission("team", "view"))
    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        operation_id: str,
    ) -> None:
        """List members of operation."""
        async with self._uow_factory() as uow:
            grants = await uow.grants.list_by_operation(operation_id)
        grants.sort(key=lambda g: g.created_at)
        resp.media = {"items": [grant_to_dict(g) for g in grants]}
        resp.status = falcon.HTTP_200

    async def on_post(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        operation_id: str,
    ) -> None:
        """Grant a user a role on operation."""
        identity = getattr(req.context, "identity", None)
        if not identity:
            write_unauthorized(resp)
            return

        body = await req.get_media(default_when_empty={})
        if not isinstance(body, dict) or not isinstance(body.get("user_id"), str):
            _bad_request(resp, "Missing required field: user_id")
            return

        data = MemberAccessInput(
            user_id=body["user_id"],
            role=body.get("role", "viewer"),
            permissions=body.get("permissions"),
            reset_permissions=bool(body.get("reset_permissions", False)),
        )
        try:
            grant = await self._assign.execute(identity, operation_id, data)
        except OpAuthzError as e:
            write_error(resp, e)
            return
        resp.media = grant_to_dict(grant)
        resp.status = falcon.HTTP_201


class MemberResource:
    """PATCH/DELETE /v1/operations/{operation_id}/members/{user_id}."""

    def __init__(
        self,
        assign_member_access: AssignMemberAccessUseCase,
        remove_member: RemoveMemberUseCase,
    ) -> None:
        self._assign = assign_member_access
        self._remove = remove_member

    async def on_patch(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        operation_id: str,
        user_id: str,
    ) -> None:
        """Change role and/or permissions of an existing member."""
        identity = getattr(req.context, "identity", None)
        if not identity:
            write_unauthorized(resp)
            return

        body = await req.get_media(default_when_empty={})
        if not isinstance(body, dict):
            _bad_request(resp, "Body must be an object")
            return

        data = MemberAccessInput(
            user_id=user_id,
            role=body.get("role"),
            permissions=body.get("permissions"),
            reset_permissions=bool(body.get("reset_permissions", False)),
            keep_permissions="permissions" not in body,
        )
        try:
            grant = await self._assign.execute(identity, operation_id, data, must_exist=True)
        except OpAuthzError as e:
            write_error(resp, e)
            return
        resp.media = grant_to_dict(grant)
        resp.status = falcon.HTTP_200

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        operation_id: str,
        user_id: str,
    ) -> None:
        """Remove member from operation."""
        identity = getattr(req.context, "identity", None)
        if not identity:
            write_unauthorized(resp)
            return

        try:
            await self._remove.execute(identity, operation_id, user_id)
        except OpAuthzError as e:
            write_error(resp, e)
            return
        resp.status = falcon.HTTP_204
