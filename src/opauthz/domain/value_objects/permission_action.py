"""Permission actions and the actions each module defines."""

from enum import StrEnum

from opauthz.domain.value_objects.module import Module


class PermissionAction(StrEnum):
    """Actions that can be performed within a module."""

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    EXPORT = "export"
    INVITE = "invite"
    MANAGE = "manage"

    @property
    def is_mutating(self) -> bool:
        return self not in (PermissionAction.VIEW, PermissionAction.EXPORT)


_CRUD = (
    PermissionAction.VIEW,
    PermissionAction.CREATE,
    PermissionAction.EDIT,
    PermissionAction.DELETE,
)

MODULE_ACTIONS: dict[Module, tuple[PermissionAction, ...]] = {
    Module.DASHBOARD: (PermissionAction.VIEW, PermissionAction.EXPORT),
    Module.ORDERS: _CRUD,
    Module.PRODUCTS: _CRUD,
    Module.ADS: _CRUD,
    Module.INTEGRATIONS: (PermissionAction.VIEW, PermissionAction.EDIT),
    Module.SETTINGS: (PermissionAction.VIEW, PermissionAction.EDIT),
    Module.TEAM: (PermissionAction.VIEW, PermissionAction.INVITE, PermissionAction.MANAGE),
}


def is_defined(module: str, action: str) -> bool:
    """True if action is one of the actions module defines."""
    return action in MODULE_ACTIONS.get(module, ())


def ensure_defined(module: str, action: str) -> tuple[Module, PermissionAction]:
    """Coerce a module/action pair to enums, raising ValueError if undefined."""
    mod = Module(module)
    act = PermissionAction(action)
    if act not in MODULE_ACTIONS[mod]:
        raise ValueError(f"Action {act.value!r} is not defined for module {mod.value!r}")
    return mod, act
