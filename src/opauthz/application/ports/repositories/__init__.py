"""Repository ports."""

from opauthz.application.ports.repositories.access_grant_repository import (
    AccessGrantRepository,
)

__all__ = [
    "AccessGrantRepository",
]
