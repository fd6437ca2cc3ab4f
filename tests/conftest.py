"""Test config and shared fixtures."""
import pytest
from typing import AsyncGenerator, Generator, List
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session
from sqlmodel.ext.asyncio.session import AsyncSession

from apps.catalog.models import Category, Product


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SYNC_DATABASE_URL = "sqlite://"


def make_products(count: int, category_id: int = None, start: int = 1) -> List[Product]:
    """Build `count` unsaved products with distinct SKUs and prices."""
    return [
        Product(
            sku=f"SKU-{i:03d}",
            name=f"Product {i:03d}",
            price=float(i),
            stock=i * 10,
            category_id=category_id,
        )
        for i in range(start, start + count)
    ]


@pytest.fixture(scope="function")
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Create async test database session."""
    # Import all models so they are registered in metadata
    import apps.models  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async_session_maker = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def sync_session() -> Generator[Session, None, None]:
    """Create blocking test database session."""
    import apps.models  # noqa: F401

    engine = create_engine(
        TEST_SYNC_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    SQLModel.metadata.create_all(engine)

    session_maker = sessionmaker(engine, class_=Session, expire_on_commit=False)
    with session_maker() as session:
        yield session
        session.rollback()

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
async def sample_category(async_session: AsyncSession) -> Category:
    """Create sample category."""
    category = Category(name="Tools", description="Hand tools")
    async_session.add(category)
    await async_session.commit()
    await async_session.refresh(category)
    return category


@pytest.fixture
async def sample_products(async_session: AsyncSession, sample_category: Category) -> List[Product]:
    """Create five products (ids 1..5, prices 1.0..5.0) in the sample category."""
    products = make_products(5, category_id=sample_category.id)
    async_session.add_all(products)
    await async_session.commit()
    return products


@pytest.fixture
def product_factory():
    """Expose make_products() to test modules."""
    return make_products
