"""
Repository abstract base class and generic implementation.
"""

from abc import ABC, abstractmethod
from typing import Generic, Iterable, List, Optional, Type
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.config import settings
from framework.exceptions.errors import AmbiguousResultException, EntityNotFoundException
from .paging import PagedResult, paginate
from .query import OrderBy, Predicate, QueryPolicy, Relation, T, logger
from .tracking import untracked_async_session


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    async def get_by_id(self, id: int, tracked: bool = False, *relations: Relation) -> Optional[T]:
        """Get entity by ID."""
        pass

    @abstractmethod
    async def get_all(self, tracked: bool = False) -> List[T]:
        """Get all entities; untracked reads skip soft-deleted rows."""
        pass

    @abstractmethod
    async def add(self, entity: T) -> int:
        """Insert entity."""
        pass

    @abstractmethod
    async def update(self, entity: T) -> int:
        """Overwrite entity."""
        pass

    @abstractmethod
    async def delete(self, entity: T, hard: bool = False) -> int:
        """Delete entity (soft unless hard=True)."""
        pass

    @abstractmethod
    async def save_changes(self) -> int:
        """Flush pending changes."""
        pass


class BaseRepository(QueryPolicy[T], IRepository[T]):
    """Generic repository over a SQLModel AsyncSession; subclasses can add custom queries."""

    def __init__(
        self,
        session: AsyncSession,
        model: Type[T],
        current_user: Optional[int] = None,
        auto_commit: bool = True,
    ):
        """Initialize repository with session and model."""
        super().__init__(session, model, current_user=current_user, auto_commit=auto_commit)

    async def _save(self) -> int:
        count = self._pending_count()
        try:
            if self.auto_commit:
                await self.session.commit()
            else:
                await self.session.flush()
        except SQLAlchemyError as exc:
            logger.critical(f"DatabaseError | Model: {self.model_name} | {exc}")
            raise
        return count

    async def _execute_write(self, statement) -> int:
        try:
            result = await self.session.execute(statement)
            if self.auto_commit:
                await self.session.commit()
        except SQLAlchemyError as exc:
            logger.critical(f"DatabaseError | Model: {self.model_name} | {exc}")
            raise
        return result.rowcount

    async def _fetch(self, statement) -> List[T]:
        if not self._is_untracked(statement):
            return list((await self.session.exec(statement)).all())
        async with untracked_async_session(self.session) as scratch:
            return list((await scratch.exec(statement)).all())

    # --- create ---

    async def add(self, entity: T) -> int:
        """Insert one entity and save."""
        self.session.add(self._stamp_created(entity))
        return await self._save()

    async def add_range(self, entities: Iterable[T]) -> int:
        """Insert a batch; an empty batch never reaches the database."""
        entities = list(entities or [])
        if not entities:
            return 0
        self.session.add_all([self._stamp_created(entity) for entity in entities])
        return await self._save()

    # --- update ---

    async def update(self, entity: T) -> int:
        """
        Overwrite the whole row from `entity`.

        Every loaded column except the id and the write-once audit columns is
        written, whatever actually changed. A missing row surfaces as the
        session's StaleDataError.
        """
        self._mark_modified(entity)
        return await self._save()

    async def add_or_update(self, entity: T) -> int:
        """
        Insert or update by id.

        Resolved with Session.merge, which consults the identity map and then
        the database, so a row that exists only in storage is updated, never
        inserted twice.
        """
        merged = await self.session.merge(entity)
        if merged in self.session.new:
            self._stamp_created(merged)
        else:
            self._restore_write_once(merged)
            self._stamp_updated(merged)
        count = await self._save()
        if merged is not entity and entity.id is None:
            entity.id = merged.id
        return count

    # --- delete ---

    async def delete(self, entity: T, hard: bool = False) -> int:
        """Soft delete (flag + update) by default; hard=True removes the row."""
        if not hard:
            entity.is_deleted = True
            return await self.update(entity)

        await self.session.delete(self._attach(entity))
        return await self._save()

    async def delete_by_id(self, id: int, hard: bool = False) -> int:
        entity = await self.session.get(self.model, id)
        if entity is None:
            raise EntityNotFoundException(self.model_name, id)
        return await self.delete(entity, hard=hard)

    async def delete_range(self, predicate: Predicate) -> bool:
        """Hard-delete every row matching predicate; True when anything was removed."""
        return await self.bulk_delete(predicate) > 0

    # --- read ---

    async def first_or_default(self, predicate: Optional[Predicate] = None, tracked: bool = False, *relations: Relation) -> Optional[T]:
        rows = await self._fetch(self.query(predicate, tracked, *relations).limit(1))
        return rows[0] if rows else None

    async def get_single(self, predicate: Optional[Predicate] = None, tracked: bool = False, *relations: Relation) -> Optional[T]:
        """Exactly-one lookup: None on no match, AmbiguousResultException on several."""
        rows = await self._fetch(self.query(predicate, tracked, *relations).limit(2))
        if len(rows) > 1:
            raise AmbiguousResultException(self.model_name)
        return rows[0] if rows else None

    async def get_list(
        self,
        predicate: Optional[Predicate] = None,
        order_by: Optional[OrderBy] = None,
        *relations: Relation,
        tracked: bool = False,
    ) -> List[T]:
        statement = self._apply_order(self.query(predicate, tracked, *relations), order_by)
        return await self._fetch(statement)

    async def get_all(self, tracked: bool = False) -> List[T]:
        """Untracked reads hide soft-deleted rows; tracked reads (maintenance path) return everything."""
        if tracked:
            return await self._fetch(self.query(None, True))
        return await self._fetch(self.query(self._not_deleted(), False))

    async def get_by_id(self, id: int, tracked: bool = False, *relations: Relation) -> Optional[T]:
        """
        Get entity by ID, or None.

        Only single-valued relations are loaded, one explicit load per
        relation. An untracked result (and its loaded relations) is a
        detached copy, so later mutations of it are never flushed and an
        instance the session already tracks is left alone.
        """
        if tracked:
            return await self._load_by_id(self.session, id, relations)
        async with untracked_async_session(self.session) as scratch:
            return await self._load_by_id(scratch, id, relations)

    async def _load_by_id(self, session: AsyncSession, id: int, relations) -> Optional[T]:
        found = await session.get(self.model, id)
        if found is not None:
            for key in self._single_valued_relations(relations):
                await session.refresh(found, attribute_names=[key])
        return found

    async def get_paged(
        self,
        predicate: Optional[Predicate] = None,
        current_page: int = 1,
        page_size: int = settings.DEFAULT_PAGE_SIZE,
        order_by: Optional[OrderBy] = None,
        *relations: Relation,
        include_deleted: bool = False,
    ) -> PagedResult[T]:
        statement = self.query(predicate, False, *relations)
        if not include_deleted:
            statement = statement.where(self._not_deleted())
        statement = self._apply_order(statement, order_by)
        return await paginate(self.session, statement, current_page, page_size)

    async def count(self, predicate: Optional[Predicate] = None) -> int:
        """Count entities matching predicate."""
        result = await self.session.exec(self._count_statement(predicate))
        return result.one()

    async def exists(self, predicate: Predicate) -> bool:
        return await self.first_or_default(predicate) is not None

    # --- bulk ---

    async def bulk_add(self, entities: Iterable[T]) -> int:
        return await self.add_range(entities)

    async def bulk_update(self, entities: Iterable[T]) -> int:
        """Full-record update of many entities in one flush."""
        entities = list(entities or [])
        if not entities:
            return 0
        for entity in entities:
            self._mark_modified(entity)
        return await self._save()

    async def bulk_delete_by_id(self, ids: Iterable[int]) -> int:
        ids = list(ids or [])
        if not ids:
            return 0
        return await self._execute_write(self._delete_statement(self._ids_clause(ids)))

    async def bulk_delete(self, predicate: Predicate) -> int:
        """Hard-delete rows matching predicate in one statement."""
        return await self._execute_write(self._delete_statement(self._resolve_predicate(predicate)))

    async def bulk_delete_entities(self, entities: Iterable[T]) -> int:
        ids = [entity.id for entity in (entities or []) if entity.id is not None]
        return await self.bulk_delete_by_id(ids)

    # --- unit of work ---

    async def save_changes(self) -> int:
        """Flush everything pending on the session (commit when auto_commit)."""
        return await self._save()
