"""Domain value objects."""

from opauthz.domain.value_objects.module import Module
from opauthz.domain.value_objects.operation_role import OperationRole
from opauthz.domain.value_objects.permission_action import (
    MODULE_ACTIONS,
    PermissionAction,
    ensure_defined,
    is_defined,
)
from opauthz.domain.value_objects.permission_set import PermissionSet
from opauthz.domain.value_objects.platform_role import PlatformRole

__all__ = [
    "MODULE_ACTIONS",
    "Module",
    "OperationRole",
    "PermissionAction",
    "PermissionSet",
    "PlatformRole",
    "ensure_defined",
    "is_defined",
]
