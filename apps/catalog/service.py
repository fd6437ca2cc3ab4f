from framework.exceptions.errors import EntityNotFoundException
from framework.logging.logger import get_logger
from framework.repository.unit_of_work import UnitOfWork
from .models import Category, Product
from .repository import CategoryRepository, ProductRepository

logger = get_logger("catalog_service")


class CatalogService:
    def __init__(self, uow: UnitOfWork):
        """Initialize Catalog Service with UnitOfWork."""
        self.uow = uow

    async def create_category(self, name: str, products: list[Product] = None) -> Category:
        """Create a category together with its initial products in one transaction."""
        category_repo = self.uow.get_repository(CategoryRepository)
        product_repo = self.uow.get_repository(ProductRepository)

        category = Category(name=name)
        await category_repo.add(category)

        for product in products or []:
            product.category_id = category.id
        await product_repo.add_range(products or [])

        await self.uow.commit()
        logger.info(f"Category {name} created with {len(products or [])} product(s)")
        return category

    async def archive_category(self, category_id: int) -> int:
        """
        Soft-delete a category and all of its live products atomically.

        Returns the number of products archived.
        """
        category_repo = self.uow.get_repository(CategoryRepository)
        product_repo = self.uow.get_repository(ProductRepository)

        category = await category_repo.get_by_id(category_id, True)
        if category is None:
            raise EntityNotFoundException("Category", category_id)

        products = await product_repo.list_by_category(category_id)
        for product in products:
            product.is_deleted = True
        await product_repo.bulk_update(products)
        await category_repo.delete(category)

        await self.uow.commit()
        logger.info(f"Category {category.name} archived with {len(products)} product(s)")
        return len(products)
