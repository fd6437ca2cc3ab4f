"""
Blocking mirror of BaseRepository for callers that cannot await.
"""

from typing import Iterable, List, Optional, Type
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from framework.config import settings
from framework.exceptions.errors import AmbiguousResultException, EntityNotFoundException
from .paging import PagedResult, paginate_sync
from .query import OrderBy, Predicate, QueryPolicy, Relation, T, logger
from .tracking import untracked_session


class SyncRepository(QueryPolicy[T]):
    """Generic repository over a SQLModel Session; same policy as BaseRepository."""

    def __init__(
        self,
        session: Session,
        model: Type[T],
        current_user: Optional[int] = None,
        auto_commit: bool = True,
    ):
        super().__init__(session, model, current_user=current_user, auto_commit=auto_commit)

    def _save(self) -> int:
        count = self._pending_count()
        try:
            if self.auto_commit:
                self.session.commit()
            else:
                self.session.flush()
        except SQLAlchemyError as exc:
            logger.critical(f"DatabaseError | Model: {self.model_name} | {exc}")
            raise
        return count

    def _execute_write(self, statement) -> int:
        try:
            result = self.session.execute(statement)
            if self.auto_commit:
                self.session.commit()
        except SQLAlchemyError as exc:
            logger.critical(f"DatabaseError | Model: {self.model_name} | {exc}")
            raise
        return result.rowcount

    def _fetch(self, statement) -> List[T]:
        if not self._is_untracked(statement):
            return list(self.session.exec(statement).all())
        with untracked_session(self.session) as scratch:
            return list(scratch.exec(statement).all())

    def add(self, entity: T) -> int:
        self.session.add(self._stamp_created(entity))
        return self._save()

    def add_range(self, entities: Iterable[T]) -> int:
        entities = list(entities or [])
        if not entities:
            return 0
        self.session.add_all([self._stamp_created(entity) for entity in entities])
        return self._save()

    def update(self, entity: T) -> int:
        self._mark_modified(entity)
        return self._save()

    def add_or_update(self, entity: T) -> int:
        merged = self.session.merge(entity)
        if merged in self.session.new:
            self._stamp_created(merged)
        else:
            self._restore_write_once(merged)
            self._stamp_updated(merged)
        count = self._save()
        if merged is not entity and entity.id is None:
            entity.id = merged.id
        return count

    def delete(self, entity: T, hard: bool = False) -> int:
        if not hard:
            entity.is_deleted = True
            return self.update(entity)

        self.session.delete(self._attach(entity))
        return self._save()

    def delete_by_id(self, id: int, hard: bool = False) -> int:
        entity = self.session.get(self.model, id)
        if entity is None:
            raise EntityNotFoundException(self.model_name, id)
        return self.delete(entity, hard=hard)

    def delete_range(self, predicate: Predicate) -> bool:
        return self.bulk_delete(predicate) > 0

    def first_or_default(self, predicate: Optional[Predicate] = None, tracked: bool = False, *relations: Relation) -> Optional[T]:
        rows = self._fetch(self.query(predicate, tracked, *relations).limit(1))
        return rows[0] if rows else None

    def get_single(self, predicate: Optional[Predicate] = None, tracked: bool = False, *relations: Relation) -> Optional[T]:
        rows = self._fetch(self.query(predicate, tracked, *relations).limit(2))
        if len(rows) > 1:
            raise AmbiguousResultException(self.model_name)
        return rows[0] if rows else None

    def get_list(
        self,
        predicate: Optional[Predicate] = None,
        order_by: Optional[OrderBy] = None,
        *relations: Relation,
        tracked: bool = False,
    ) -> List[T]:
        return self._fetch(self._apply_order(self.query(predicate, tracked, *relations), order_by))

    def get_all(self, tracked: bool = False) -> List[T]:
        if tracked:
            return self._fetch(self.query(None, True))
        return self._fetch(self.query(self._not_deleted(), False))

    def get_by_id(self, id: int, tracked: bool = False, *relations: Relation) -> Optional[T]:
        if tracked:
            return self._load_by_id(self.session, id, relations)
        with untracked_session(self.session) as scratch:
            return self._load_by_id(scratch, id, relations)

    def _load_by_id(self, session: Session, id: int, relations) -> Optional[T]:
        found = session.get(self.model, id)
        if found is not None:
            for key in self._single_valued_relations(relations):
                session.refresh(found, attribute_names=[key])
        return found

    def get_paged(
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
        return paginate_sync(self.session, self._apply_order(statement, order_by), current_page, page_size)

    def count(self, predicate: Optional[Predicate] = None) -> int:
        return self.session.exec(self._count_statement(predicate)).one()

    def exists(self, predicate: Predicate) -> bool:
        return self.first_or_default(predicate) is not None

    def bulk_add(self, entities: Iterable[T]) -> int:
        return self.add_range(entities)

    def bulk_update(self, entities: Iterable[T]) -> int:
        entities = list(entities or [])
        if not entities:
            return 0
        for entity in entities:
            self._mark_modified(entity)
        return self._save()

    def bulk_delete_by_id(self, ids: Iterable[int]) -> int:
        ids = list(ids or [])
        if not ids:
            return 0
        return self._execute_write(self._delete_statement(self._ids_clause(ids)))

    def bulk_delete(self, predicate: Predicate) -> int:
        return self._execute_write(self._delete_statement(self._resolve_predicate(predicate)))

    def bulk_delete_entities(self, entities: Iterable[T]) -> int:
        ids = [entity.id for entity in (entities or []) if entity.id is not None]
        return self.bulk_delete_by_id(ids)

    def save_changes(self) -> int:
        return self._save()
