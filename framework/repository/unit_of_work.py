"""
Unit of Work: manages repositories and transaction boundaries.
"""

from typing import Dict, Optional, Type
from sqlmodel import Session
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.exceptions.errors import InvalidArgumentException
from framework.logging.logger import get_logger

logger = get_logger("unit_of_work")


class _UnitOfWorkBase:
    def __init__(self, session, current_user: Optional[int] = None):
        if session is None:
            raise InvalidArgumentException(
                "Session must be provided. Use UnitOfWork.from_session() or pass session explicitly."
            )
        self.session = session
        self.current_user = current_user
        self._repositories: Dict[str, object] = {}

    def get_repository(self, repo_class: Type, model_class: Optional[Type] = None):
        """
        Get or create a repository instance (cached).

        Repositories handed out here never commit on their own; the unit of
        work commits them together. Pass `model_class` for generic
        repositories, omit it for model-specific subclasses.
        """
        model_name = model_class.__name__ if model_class is not None else ""
        cache_key = f"{repo_class.__name__}_{model_name}"
        if cache_key not in self._repositories:
            kwargs = {"current_user": self.current_user, "auto_commit": False}
            if model_class is not None:
                self._repositories[cache_key] = repo_class(self.session, model_class, **kwargs)
            else:
                self._repositories[cache_key] = repo_class(self.session, **kwargs)
        return self._repositories[cache_key]

    def _pending_count(self) -> int:
        dirty = sum(1 for obj in self.session.dirty if self.session.is_modified(obj))
        return len(self.session.new) + dirty + len(self.session.deleted)


class UnitOfWork(_UnitOfWorkBase):
    """Manages related repositories with a shared AsyncSession and one commit/rollback."""

    def __init__(self, session: Optional[AsyncSession] = None, current_user: Optional[int] = None):
        super().__init__(session, current_user=current_user)

    @classmethod
    async def from_session(cls, session: AsyncSession, current_user: Optional[int] = None) -> "UnitOfWork":
        """Create UnitOfWork from an existing session."""
        return cls(session=session, current_user=current_user)

    async def commit(self) -> None:
        """Commit all changes."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback all changes."""
        await self.session.rollback()

    async def flush(self) -> None:
        """Flush session (e.g. to get auto-increment IDs)."""
        await self.session.flush()

    async def save_changes(self) -> int:
        """Commit and return the number of instances that were pending."""
        count = self._pending_count()
        await self.commit()
        return count

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            logger.warning(f"Rolling back unit of work | Error: {exc_type.__name__}: {exc_val}")
            await self.rollback()
        else:
            await self.commit()


class SyncUnitOfWork(_UnitOfWorkBase):
    """Blocking counterpart of UnitOfWork over a Session."""

    def __init__(self, session: Optional[Session] = None, current_user: Optional[int] = None):
        super().__init__(session, current_user=current_user)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def flush(self) -> None:
        self.session.flush()

    def save_changes(self) -> int:
        count = self._pending_count()
        self.commit()
        return count

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            logger.warning(f"Rolling back unit of work | Error: {exc_type.__name__}: {exc_val}")
            self.rollback()
        else:
            self.commit()
