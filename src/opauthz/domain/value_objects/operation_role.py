"""Operation-scoped roles."""

from enum import StrEnum


class OperationRole(StrEnum):
    """Role a member holds inside one operation."""

    OWNER = "owner"
    ADMIN = "admin"
    VIEWER = "viewer"

    @property
    def manages_team(self) -> bool:
        return self in (OperationRole.OWNER, OperationRole.ADMIN)
