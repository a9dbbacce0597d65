"""Domain exceptions."""


class OpAuthzError(Exception):
    """Base exception for opauthz."""

    pass


class Unauthenticated(OpAuthzError):
    """No identity was resolved for the request."""

    pass


class MissingOperationContext(OpAuthzError):
    """Non-platform identity made a request without an operation id."""

    pass


class AccessDenied(OpAuthzError):
    """User does not have permission for the requested module action."""

    def __init__(
        self,
        message: str = "Access denied",
        module: str | None = None,
        action: str | None = None,
    ) -> None:
        super().__init__(message)
        self.module = module
        self.action = action


class StoreUnavailable(OpAuthzError):
    """Access store lookup failed or timed out."""

    pass


class NotFound(OpAuthzError):
    """Requested resource was not found."""

    pass


class ValidationError(OpAuthzError):
    """Validation failed for input data."""

    pass


class InvalidGrant(ValidationError):
    """Stored grant cannot be interpreted (e.g. unknown role)."""

    pass
