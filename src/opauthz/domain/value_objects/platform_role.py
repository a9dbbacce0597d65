"""Platform (cross-tenant) roles."""

from enum import StrEnum


class PlatformRole(StrEnum):
    """Roles that apply across all operations."""

    NONE = "none"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def bypasses_operation_checks(self) -> bool:
        return self in (PlatformRole.ADMIN, PlatformRole.SUPER_ADMIN)
