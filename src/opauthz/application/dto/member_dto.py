"""Member DTOs - team membership input/output."""

from dataclasses import dataclass
from typing import Any

from opauthz.domain.entities import AccessGrant


@dataclass
class MemberAccessInput:
    """Input for assigning a member's role and permissions.

    role None keeps the current role (viewer for a new member).
    keep_permissions leaves an existing override untouched; otherwise
    permissions replaces it, None clearing it back to role defaults.
    """

    user_id: str
    role: str | None = None
    permissions: dict[str, Any] | None = None
    reset_permissions: bool = False
    keep_permissions: bool = False


def grant_to_dict(grant: AccessGrant) -> dict[str, Any]:
    """Serialize a grant for API responses."""
    return {
        "user_id": grant.user_id,
        "operation_id": grant.operation_id,
        "role": grant.role.value,
        "permissions": grant.permissions.to_dict() if grant.permissions is not None else None,
        "created_at": grant.created_at.isoformat(),
    }
