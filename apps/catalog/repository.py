"""Catalog module repository implementations."""

from typing import List, Optional
from framework.config import settings
from framework.repository.base import BaseRepository
from framework.repository.paging import PagedResult
from .models import Category, Product


class CategoryRepository(BaseRepository[Category]):
    """Category repository."""

    def __init__(self, session, **kwargs):
        super().__init__(session, Category, **kwargs)

    async def get_by_name(self, name: str) -> Optional[Category]:
        """Find category by name."""
        return await self.first_or_default(Category.name == name)


class ProductRepository(BaseRepository[Product]):
    """Product repository."""

    def __init__(self, session, **kwargs):
        super().__init__(session, Product, **kwargs)

    async def get_by_sku(self, sku: str) -> Optional[Product]:
        """Find product by SKU (SKUs are unique)."""
        return await self.get_single(Product.sku == sku)

    async def list_by_category(self, category_id: int, include_deleted: bool = False) -> List[Product]:
        """Products of a category, by name."""
        predicate = Product.category_id == category_id
        if not include_deleted:
            predicate = predicate & (Product.is_deleted == False)  # noqa: E712
        return await self.get_list(predicate, Product.name)

    async def page_by_category(
        self,
        category_id: int,
        current_page: int = 1,
        page_size: int = settings.DEFAULT_PAGE_SIZE,
    ) -> PagedResult[Product]:
        """
        One page of a category's live products, cheapest first.

        Args:
            category_id: Category ID
            current_page: 1-based page number
            page_size: Page size

        Returns:
            PagedResult with products and the page descriptor
        """
        return await self.get_paged(
            Product.category_id == category_id,
            current_page,
            page_size,
            (Product.price, Product.id),
        )
