"""
Audit / soft-delete capability shared by every persisted entity.
"""

from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable
from sqlmodel import SQLModel, Field

# Columns stamped once on insert and never rewritten by an update
WRITE_ONCE_FIELDS = ("created_date", "created_user")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@runtime_checkable
class IEntity(Protocol):
    """Attributes the repositories rely on; any mapped class exposing them qualifies."""
    id: Optional[int]
    is_active: bool
    is_deleted: bool
    created_date: datetime
    created_user: int
    updated_date: Optional[datetime]
    updated_user: Optional[int]
    row_status: int


class BaseEntity(SQLModel):
    """Mixin providing the IEntity columns; concrete models add `table=True`."""
    id: Optional[int] = Field(default=None, primary_key=True)
    is_active: bool = Field(default=True, description="Soft lifecycle state")
    is_deleted: bool = Field(default=False, index=True, description="Soft-delete marker")
    created_date: datetime = Field(default_factory=utcnow, description="Created at (write-once)")
    created_user: int = Field(default=0, description="Creator user id (write-once)")
    updated_date: Optional[datetime] = Field(default=None, description="Last update time")
    updated_user: Optional[int] = Field(default=None, description="Last updater user id")
    row_status: int = Field(default=1, description="Free-form status code")
