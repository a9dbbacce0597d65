"""Identity - caller attributes needed for authorization."""

from dataclasses import dataclass

from opauthz.domain.value_objects import PlatformRole


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, immutable for the duration of a request."""

    user_id: str
    platform_role: PlatformRole = PlatformRole.NONE
