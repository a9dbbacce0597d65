"""Falcon hooks that enforce module permissions before a responder runs."""

import falcon.asgi

from opauthz.application.dto.access_outcome import Reject, RejectKind
from opauthz.domain.value_objects import ensure_defined
from opauthz.interfaces.api.errors import RejectedRequest


async def operation_id_from_request(req: falcon.asgi.Request, params: dict) -> str | None:
    """Operation id from route params, query string, header or JSON body, in that order."""
    operation_id = (
        params.get("operation_id")
        or req.get_param("operation_id")
        or req.get_param("operationId")
        or req.get_header("X-Operation-Id")
    )
    if operation_id:
        return operation_id
    if req.content_length and req.content_type and "json" in req.content_type:
        body = await req.get_media(default_when_empty=None)
        if isinstance(body, dict):
            value = body.get("operation_id") or body.get("operationId")
            if isinstance(value, str) and value:
                return value
    return None


def require_permission(module: str, action: str):
    """Before hook factory: @falcon.before(require_permission("orders", "edit")).

    The module/action pair is checked against the module action table when
    the hook is built, so a misspelled pair fails at import time. The guard
    is taken from the resource's access_guard attribute.
    """
    module, action = ensure_defined(module, action)

    async def hook(
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        resource,
        params: dict,
    ) -> None:
        identity = getattr(req.context, "identity", None)
        if identity is None:
            raise RejectedRequest(Reject(RejectKind.UNAUTHENTICATED, "Unauthorized"))

        operation_id = await operation_id_from_request(req, params)
        outcome = await resource.access_guard.enforce(identity, operation_id, module, action)
        if isinstance(outcome, Reject):
            raise RejectedRequest(outcome)

    return hook
