"""Default permission templates per operation role."""

from opauthz.domain.value_objects import (
    Module,
    OperationRole,
    PermissionAction,
    PermissionSet,
)


class DefaultPermissionFactory:
    """Seeds a grant's permissions when it is created or reset.

    Not consulted by PermissionResolver: a viewer without an override is
    handled there directly, so changing these templates never changes
    existing decisions.
    """

    def defaults_for(self, role: OperationRole) -> PermissionSet:
        role = OperationRole(role)
        if role.manages_team:
            return PermissionSet.build(_grant_all)
        return PermissionSet.build(_read_only)


def _grant_all(module: Module, action: PermissionAction) -> bool:
    return True


def _read_only(module: Module, action: PermissionAction) -> bool:
    return not action.is_mutating
