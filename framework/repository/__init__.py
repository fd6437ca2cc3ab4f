"""
Repository pattern: data access abstraction, decouples service layer from database session.
"""

from .base import BaseRepository, IRepository
from .paging import Page, PagedResult, paginate, paginate_sync
from .sync import SyncRepository
from .unit_of_work import SyncUnitOfWork, UnitOfWork

__all__ = [
    "BaseRepository",
    "IRepository",
    "Page",
    "PagedResult",
    "SyncRepository",
    "SyncUnitOfWork",
    "UnitOfWork",
    "paginate",
    "paginate_sync",
]
