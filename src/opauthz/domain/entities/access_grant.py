"""Access grant entity - binds one user to one operation."""

from dataclasses import dataclass
from datetime import datetime

from opauthz.domain.value_objects import OperationRole, PermissionSet


@dataclass
class AccessGrant:
    """Grant - user holds role on operation, optional permission override."""

    user_id: str
    operation_id: str
    role: OperationRole
    created_at: datetime
    permissions: PermissionSet | None = None
