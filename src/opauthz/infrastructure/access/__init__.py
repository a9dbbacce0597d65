"""Access store adapters."""

from opauthz.infrastructure.access.caching_access_store import CachingAccessStore
from opauthz.infrastructure.access.grant_change_listener import GrantChangeListener
from opauthz.infrastructure.access.uow_access_store import UnitOfWorkAccessStore

__all__ = [
    "CachingAccessStore",
    "GrantChangeListener",
    "UnitOfWorkAccessStore",
]
