"""
Simple test cases to verify test configuration.
"""
import pytest
from sqlalchemy import text
from sqlmodel import SQLModel, Session
from sqlmodel.ext.asyncio.session import AsyncSession

from apps.catalog.models import Product
from framework.database.entity import IEntity


class TestSetup:
    """Test the test database and model registration."""

    @pytest.mark.asyncio
    async def test_database_session(self, async_session: AsyncSession):
        """Test that database session works."""
        assert async_session is not None
        result = await async_session.execute(text("SELECT 1"))
        assert result.scalar() == 1

    def test_sync_database_session(self, sync_session: Session):
        """Test that the blocking session works."""
        assert sync_session.execute(text("SELECT 1")).scalar() == 1

    def test_models_registered(self):
        """Test that catalog tables are in the metadata."""
        assert {"categories", "products"} <= set(SQLModel.metadata.tables)


class TestEntity:
    """Test entity base defaults."""

    def test_entity_defaults(self):
        """Test audit and soft-delete defaults."""
        product = Product(sku="SKU-1", name="Hammer")
        assert isinstance(product, IEntity)
        assert product.id is None
        assert product.is_active is True
        assert product.is_deleted is False
        assert product.created_date is not None
        assert product.created_user == 0
        assert product.updated_date is None
        assert product.updated_user is None
        assert product.row_status == 1
