"""Mapping of reject outcomes and domain exceptions to HTTP responses."""

import logging

import falcon
import falcon.asgi

from opauthz.application.dto.access_outcome import Reject, RejectKind
from opauthz.domain.exceptions import (
    AccessDenied,
    MissingOperationContext,
    NotFound,
    StoreUnavailable,
    Unauthenticated,
    ValidationError,
)

logger = logging.getLogger(__name__)

REJECT_STATUS = {
    RejectKind.UNAUTHENTICATED: falcon.HTTP_401,
    RejectKind.MISSING_OPERATION_CONTEXT: falcon.HTTP_400,
    RejectKind.ACCESS_DENIED: falcon.HTTP_403,
    RejectKind.STORE_UNAVAILABLE: falcon.HTTP_500,
}


def write_reject(resp: falcon.asgi.Response, reject: Reject) -> None:
    """Render a reject outcome; module/action tell clients which control to disable."""
    resp.status = REJECT_STATUS[reject.kind]
    resp.media = {
        "error": reject.kind.value,
        "message": reject.message,
        "module": reject.module,
        "action": reject.action,
    }


def write_unauthorized(resp: falcon.asgi.Response) -> None:
    write_reject(resp, Reject(RejectKind.UNAUTHENTICATED, "Unauthorized"))


def write_error(resp: falcon.asgi.Response, ex: Exception) -> None:
    """Render a domain exception raised by a use case."""
    if isinstance(ex, AccessDenied):
        write_reject(
            resp,
            Reject(RejectKind.ACCESS_DENIED, str(ex), module=ex.module, action=ex.action),
        )
    elif isinstance(ex, MissingOperationContext):
        write_reject(resp, Reject(RejectKind.MISSING_OPERATION_CONTEXT, str(ex)))
    elif isinstance(ex, StoreUnavailable):
        logger.error("Store unavailable", extra={"reason": str(ex)})
        write_reject(
            resp,
            Reject(RejectKind.STORE_UNAVAILABLE, "Internal error while checking permissions"),
        )
    elif isinstance(ex, Unauthenticated):
        write_unauthorized(resp)
    elif isinstance(ex, NotFound):
        resp.status = falcon.HTTP_404
        resp.media = {"error": "not_found", "message": str(ex)}
    elif isinstance(ex, ValidationError):
        resp.status = falcon.HTTP_400
        resp.media = {"error": "validation_error", "message": str(ex)}
    else:
        raise ex


async def handle_unexpected(req, resp, ex, params) -> None:
    """Last-resort error handler: log with traceback, answer 500."""
    logger.exception("Unhandled error", extra={"path": req.path, "method": req.method})
    resp.status = falcon.HTTP_500
    resp.media = {"error": "internal_error", "message": "500 Internal Server Error"}


class RejectedRequest(Exception):
    """Raised by permission hooks to stop a request with a reject outcome."""

    def __init__(self, reject: Reject) -> None:
        super().__init__(reject.message)
        self.reject = reject


async def handle_rejected(req, resp, ex: RejectedRequest, params) -> None:
    write_reject(resp, ex.reject)


def register_error_handlers(app: falcon.asgi.App) -> None:
    app.add_error_handler(Exception, handle_unexpected)
    app.add_error_handler(RejectedRequest, handle_rejected)
