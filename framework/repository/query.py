"""
Statement building and entity-state policy shared by the async and sync repositories.

Everything here is free of I/O so both BaseRepository and SyncRepository
apply exactly the same tracking, soft-delete and audit rules.
"""

from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, Type, TypeVar, Union
from sqlalchemy import delete, inspect as sa_inspect
from sqlalchemy.orm import QueryableAttribute, selectinload
from sqlalchemy.orm.attributes import flag_modified, set_committed_value
from sqlalchemy.orm.session import make_transient_to_detached
from sqlalchemy.sql import ClauseElement
from sqlmodel import SQLModel, func, select
from framework.database.entity import WRITE_ONCE_FIELDS, utcnow
from framework.exceptions.errors import InvalidArgumentException
from framework.logging.logger import get_logger

T = TypeVar("T", bound=SQLModel)

# Statement execution option recording the requested tracking mode
UNTRACKED_OPTION = "repository_untracked"

Predicate = Union[ClauseElement, Callable[[Type[Any]], ClauseElement]]
Relation = Union[str, QueryableAttribute]
OrderBy = Union[ClauseElement, QueryableAttribute, Sequence[Any], Callable[[Any], Any]]

logger = get_logger("repository")


class QueryPolicy(Generic[T]):
    """Session-independent half of a repository."""

    def __init__(self, session: Any, model: Type[T], current_user: Optional[int] = None, auto_commit: bool = True):
        if session is None:
            raise InvalidArgumentException(
                f"{type(self).__name__} requires a session", detail={"model": getattr(model, "__name__", model)}
            )
        if model is None:
            raise InvalidArgumentException(f"{type(self).__name__} requires a model class")
        self.session = session
        self.model = model
        self.current_user = current_user
        self.auto_commit = auto_commit

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # --- statement building ---

    def _resolve_predicate(self, predicate: Optional[Predicate]) -> Optional[ClauseElement]:
        if predicate is None or isinstance(predicate, ClauseElement):
            return predicate
        if callable(predicate):
            return predicate(self.model)
        raise InvalidArgumentException(f"Unsupported predicate type: {type(predicate).__name__}")

    def _relation_attribute(self, relation: Relation) -> QueryableAttribute:
        if isinstance(relation, str):
            mapper = sa_inspect(self.model)
            if relation not in mapper.relationships:
                raise InvalidArgumentException(f"{self.model_name} has no relation '{relation}'")
            return getattr(self.model, relation)
        return relation

    def _relation_key(self, relation: Relation) -> str:
        return relation if isinstance(relation, str) else relation.key

    def query(self, predicate: Optional[Predicate] = None, tracked: bool = False, *relations: Relation):
        """
        Build a composable, not yet executed SELECT over the model.

        The tracking mode is stored as an execution option and honoured by
        the repository executors; untracked statements run in a scratch
        session, so their rows and eager-loaded relations come back detached.
        """
        statement = select(self.model)

        clause = self._resolve_predicate(predicate)
        if clause is not None:
            statement = statement.where(clause)

        for relation in relations:
            statement = statement.options(selectinload(self._relation_attribute(relation)))

        return statement.execution_options(**{UNTRACKED_OPTION: not tracked})

    def _apply_order(self, statement, order_by: Optional[OrderBy]):
        if order_by is None:
            return statement
        if isinstance(order_by, (ClauseElement, QueryableAttribute)):
            return statement.order_by(order_by)
        if isinstance(order_by, (list, tuple)):
            return statement.order_by(*order_by)
        return order_by(statement)

    def _not_deleted(self):
        return self.model.is_deleted == False  # noqa: E712

    def _count_statement(self, predicate: Optional[Predicate] = None):
        statement = select(func.count()).select_from(self.model)
        clause = self._resolve_predicate(predicate)
        if clause is not None:
            statement = statement.where(clause)
        return statement

    def _delete_statement(self, clause: ClauseElement):
        return delete(self.model).where(clause)

    def _ids_clause(self, ids: Iterable[int]) -> ClauseElement:
        return self.model.id.in_(list(ids))

    # --- tracking ---

    @staticmethod
    def _is_untracked(statement) -> bool:
        return bool(statement.get_execution_options().get(UNTRACKED_OPTION, False))

    def _attach(self, entity: T) -> T:
        """
        Return the session instance that stands for `entity`'s row.

        A transient entity with an id is taken as an existing row. When the
        session already tracks another instance of that row (the entity came
        from an untracked read), the entity's loaded columns are copied onto
        the tracked instance and that instance is returned.
        """
        state = sa_inspect(entity)
        if state.transient and entity.id is not None:
            make_transient_to_detached(entity)
        if not state.detached:
            return entity

        current = self.session.identity_map.get(state.key)
        if current is None:
            self.session.add(entity)
            return entity

        primary_keys = {column.key for column in state.mapper.primary_key}
        for attr in state.mapper.column_attrs:
            if attr.key not in primary_keys and attr.key in state.dict:
                setattr(current, attr.key, state.dict[attr.key])
        return current

    def _single_valued_relations(self, relations: Sequence[Relation]) -> List[str]:
        mapper = sa_inspect(self.model)
        keys = []
        for relation in relations:
            key = self._relation_key(relation)
            if key not in mapper.relationships:
                raise InvalidArgumentException(f"{self.model_name} has no relation '{key}'")
            prop = mapper.relationships[key]
            if prop.uselist:
                logger.debug(f"Skipping collection relation {self.model_name}.{key} on id lookup")
                continue
            keys.append(key)
        return keys

    # --- audit policy ---

    def _stamp_created(self, entity: T) -> T:
        if entity.created_date is None:
            entity.created_date = utcnow()
        if self.current_user is not None:
            entity.created_user = self.current_user
        return entity

    def _stamp_updated(self, entity: T) -> T:
        entity.updated_date = utcnow()
        if self.current_user is not None:
            entity.updated_user = self.current_user
        return entity

    def _restore_write_once(self, entity: T) -> None:
        state = sa_inspect(entity)
        for key in WRITE_ONCE_FIELDS:
            history = state.attrs[key].history
            if history.deleted:
                set_committed_value(entity, key, history.deleted[0])

    def _mark_modified(self, entity: T) -> T:
        """Attach, stamp and flag every loaded column so the flush writes the full record."""
        target = self._attach(entity)
        if sa_inspect(target).transient:
            raise InvalidArgumentException(f"Cannot update a {self.model_name} that has no id")
        self._restore_write_once(target)
        self._stamp_updated(target)

        state = sa_inspect(target)
        primary_keys = {column.key for column in state.mapper.primary_key}
        for attr in state.mapper.column_attrs:
            if attr.key in primary_keys or attr.key in WRITE_ONCE_FIELDS:
                continue
            if attr.key in state.dict:
                flag_modified(target, attr.key)
        return target

    def _pending_count(self) -> int:
        """Number of instances the next flush will insert, update or delete."""
        dirty = sum(1 for obj in self.session.dirty if self.session.is_modified(obj))
        return len(self.session.new) + dirty + len(self.session.deleted)
