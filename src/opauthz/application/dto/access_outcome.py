"""Access outcome DTOs - result of a guard check."""

from dataclasses import dataclass
from enum import StrEnum

from opauthz.domain.exceptions import (
    AccessDenied,
    MissingOperationContext,
    OpAuthzError,
    StoreUnavailable,
    Unauthenticated,
)


class RejectKind(StrEnum):
    """Machine-readable reason a request was rejected."""

    UNAUTHENTICATED = "unauthenticated"
    MISSING_OPERATION_CONTEXT = "missing_operation_context"
    ACCESS_DENIED = "access_denied"
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass(frozen=True)
class Allow:
    """Request may proceed."""

    allowed = True


@dataclass(frozen=True)
class Reject:
    """Request must not proceed."""

    kind: RejectKind
    message: str
    module: str | None = None
    action: str | None = None

    allowed = False

    def to_exception(self) -> OpAuthzError:
        if self.kind is RejectKind.ACCESS_DENIED:
            return AccessDenied(self.message, module=self.module, action=self.action)
        if self.kind is RejectKind.MISSING_OPERATION_CONTEXT:
            return MissingOperationContext(self.message)
        if self.kind is RejectKind.STORE_UNAVAILABLE:
            return StoreUnavailable(self.message)
        return Unauthenticated(self.message)

    def raise_error(self) -> None:
        raise self.to_exception()


AccessOutcome = Allow | Reject
