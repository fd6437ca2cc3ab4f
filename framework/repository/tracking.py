"""
Untracked reads.

An untracked read runs in a scratch session bound to the caller's connection,
so it sees the caller's transaction but has its own identity map. Closing the
scratch session detaches everything it loaded, eager-loaded relations
included, and the caller's tracked instances are never touched.
"""

from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator
from sqlmodel import Session
from sqlmodel.ext.asyncio.session import AsyncSession

# The scratch session never commits or rolls back the caller's transaction
_JOIN_MODE = "rollback_only"


@contextmanager
def untracked_session(session: Session) -> Iterator[Session]:
    if session.autoflush:
        session.flush()
    scratch = Session(
        bind=session.connection(),
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode=_JOIN_MODE,
    )
    try:
        yield scratch
    finally:
        scratch.close()


@asynccontextmanager
async def untracked_async_session(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Async counterpart of untracked_session()."""
    if session.autoflush:
        await session.flush()
    scratch = AsyncSession(
        bind=await session.connection(),
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode=_JOIN_MODE,
    )
    try:
        yield scratch
    finally:
        await scratch.close()
