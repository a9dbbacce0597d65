"""Permission set - per-module action flags stored on a grant."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from opauthz.domain.exceptions import ValidationError
from opauthz.domain.value_objects.module import Module
from opauthz.domain.value_objects.permission_action import (
    MODULE_ACTIONS,
    PermissionAction,
    is_defined,
)


@dataclass(frozen=True)
class PermissionSet:
    """Module -> action -> flag. A pair missing from the map is denied."""

    flags: Mapping[Module, Mapping[PermissionAction, bool]] = field(default_factory=dict)

    def allows(self, module: str, action: str) -> bool:
        """Look up a single flag. Unknown or absent keys deny."""
        actions = self.flags.get(module)
        if not actions:
            return False
        return actions.get(action) is True

    def to_dict(self) -> dict[str, dict[str, bool]]:
        return {
            module.value: {action.value: value for action, value in actions.items()}
            for module, actions in self.flags.items()
        }

    @classmethod
    def build(cls, flag: Callable[[Module, PermissionAction], bool]) -> "PermissionSet":
        """Full matrix over every defined module/action pair."""
        return cls(
            {
                module: {action: flag(module, action) for action in actions}
                for module, actions in MODULE_ACTIONS.items()
            }
        )

    @classmethod
    def from_raw(cls, raw: Any) -> "PermissionSet | None":
        """Parse a stored override leniently.

        None stays None (no override). Unknown modules, actions a module does
        not define and non-boolean values are dropped; a blob that is not an
        object parses to an empty set, which denies everything.
        """
        if raw is None:
            return None
        if not isinstance(raw, Mapping):
            return cls()
        flags: dict[Module, dict[PermissionAction, bool]] = {}
        for module_key, actions in raw.items():
            if module_key not in MODULE_ACTIONS or not isinstance(actions, Mapping):
                continue
            module = Module(module_key)
            parsed = {
                PermissionAction(action_key): value
                for action_key, value in actions.items()
                if action_key in MODULE_ACTIONS[module] and isinstance(value, bool)
            }
            flags[module] = parsed
        return cls(flags)

    @classmethod
    def validate(cls, raw: Any) -> "PermissionSet":
        """Parse an override strictly, raising ValidationError on any unknown key."""
        if not isinstance(raw, Mapping):
            raise ValidationError("Permissions must be an object")
        for module_key, actions in raw.items():
            if module_key not in MODULE_ACTIONS:
                raise ValidationError(f"Unknown module: {module_key}")
            if not isinstance(actions, Mapping):
                raise ValidationError(f"Permissions for {module_key} must be an object")
            for action_key, value in actions.items():
                if not is_defined(module_key, action_key):
                    raise ValidationError(
                        f"Action {action_key} is not defined for module {module_key}"
                    )
                if not isinstance(value, bool):
                    raise ValidationError(f"Flag {module_key}.{action_key} must be a boolean")
        return cls.from_raw(raw)
