"""Authorization engine - resolver, guards and default permission templates."""

from opauthz.application.authorization.access_guard import AccessGuard
from opauthz.application.authorization.default_permissions import DefaultPermissionFactory
from opauthz.application.authorization.permission_resolver import PermissionResolver
from opauthz.application.authorization.team_management_guard import TeamManagementGuard

__all__ = [
    "AccessGuard",
    "DefaultPermissionFactory",
    "PermissionResolver",
    "TeamManagementGuard",
]
