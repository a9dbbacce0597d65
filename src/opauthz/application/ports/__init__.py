"""Application ports - interfaces for external adapters."""

from opauthz.application.ports.access_store import AccessStore
from opauthz.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "AccessStore",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
