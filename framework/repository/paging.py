"""
Paging calculator: normalized page descriptor and paged result wrapper.
"""

import math
from typing import Any, Generic, Tuple, TypeVar
from pydantic import BaseModel, ConfigDict, computed_field, field_validator
from sqlmodel import Session, func, select
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.config import settings
from .tracking import untracked_async_session, untracked_session

T = TypeVar("T")


class Page(BaseModel):
    """
    Page descriptor.

    `current_page` and `page_size` are clamped to at least 1 and
    `total_count` to at least 0; `skip` and `total_pages` are always
    derived from them.
    """
    model_config = ConfigDict(frozen=True)

    current_page: int = 1
    page_size: int = settings.DEFAULT_PAGE_SIZE
    total_count: int = 0

    @field_validator("current_page", "page_size", mode="before")
    @classmethod
    def _at_least_one(cls, value: Any) -> int:
        return max(1, int(value))

    @field_validator("total_count", mode="before")
    @classmethod
    def _not_negative(cls, value: Any) -> int:
        return max(0, int(value))

    @computed_field  # type: ignore[misc]
    @property
    def skip(self) -> int:
        return (self.current_page - 1) * self.page_size

    @computed_field  # type: ignore[misc]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)


class PagedResult(BaseModel, Generic[T]):
    """One page of rows plus the descriptor it was fetched with."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: Tuple[T, ...] = ()
    page: Page


def _count_statement(statement):
    return select(func.count()).select_from(statement.order_by(None).subquery())


async def paginate(
    session: AsyncSession,
    statement,
    current_page: int = 1,
    page_size: int = settings.DEFAULT_PAGE_SIZE,
) -> PagedResult:
    """
    Run `statement` as one page.

    Issues a count over the full filtered statement, then fetches at most
    `page_size` rows starting at `skip`. Rows come back untracked.
    """
    total = (await session.exec(_count_statement(statement))).one()
    page = Page(current_page=current_page, page_size=page_size, total_count=total)

    async with untracked_async_session(session) as scratch:
        result = await scratch.exec(statement.offset(page.skip).limit(page.page_size))
        rows = result.all()
    return PagedResult(data=rows, page=page)


def paginate_sync(
    session: Session,
    statement,
    current_page: int = 1,
    page_size: int = settings.DEFAULT_PAGE_SIZE,
) -> PagedResult:
    """Blocking mirror of paginate()."""
    total = session.exec(_count_statement(statement)).one()
    page = Page(current_page=current_page, page_size=page_size, total_count=total)

    with untracked_session(session) as scratch:
        rows = scratch.exec(statement.offset(page.skip).limit(page.page_size)).all()
    return PagedResult(data=rows, page=page)
