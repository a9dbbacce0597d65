"""Domain entities."""

from opauthz.domain.entities.access_grant import AccessGrant
from opauthz.domain.entities.identity import Identity

__all__ = [
    "AccessGrant",
    "Identity",
]
