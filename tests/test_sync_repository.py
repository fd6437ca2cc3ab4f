"""Blocking repository test cases: same policy as the async repository."""
import pytest
from sqlmodel import Session

from apps.catalog.models import Category, Product
from framework.exceptions.errors import AmbiguousResultException, EntityNotFoundException
from framework.repository.sync import SyncRepository


@pytest.fixture
def repo(sync_session: Session) -> SyncRepository[Product]:
    return SyncRepository(sync_session, Product, current_user=3)


@pytest.fixture
def garden(sync_session: Session) -> Category:
    category = Category(name="Garden", description="Outdoor")
    sync_session.add(category)
    sync_session.commit()
    return category


@pytest.fixture
def seeded(sync_session: Session, garden: Category, product_factory):
    products = product_factory(5, category_id=garden.id)
    sync_session.add_all(products)
    sync_session.commit()
    return products


def _reload(session: Session, model, entity_id: int):
    session.expunge_all()
    return session.get(model, entity_id)


class TestSyncRepositoryWrites:
    """Test inserts, updates and deletes."""

    def test_soft_delete_by_id(self, repo, seeded):
        """Test soft delete hides the row from untracked get_all() only."""
        assert repo.delete_by_id(5) == 1

        assert [p.id for p in repo.get_all()] == [1, 2, 3, 4]
        everything = repo.get_all(tracked=True)
        assert len(everything) == 5
        assert [p.is_deleted for p in everything if p.id == 5] == [True]

    def test_hard_delete_then_lookup_returns_none(self, repo, seeded):
        """Test hard delete then get_by_id() returns None."""
        repo.delete(seeded[1], hard=True)
        assert repo.get_by_id(2) is None

    def test_delete_by_missing_id_raises(self, repo, seeded):
        """Test delete_by_id() of an unknown id."""
        with pytest.raises(EntityNotFoundException):
            repo.delete_by_id(77, hard=True)

    def test_update_stamps_and_overwrites(self, repo, sync_session, seeded):
        """Test update() of an untracked copy writes through the tracked instance."""
        found = repo.get_by_id(3)
        found.price = 30.0

        assert repo.update(found) == 1

        assert seeded[2].price == 30.0
        reloaded = _reload(sync_session, Product, 3)
        assert reloaded.price == 30.0
        assert reloaded.updated_user == 3

    def test_add_or_update(self, repo, sync_session, seeded):
        """Test add_or_update() updates a stored row and inserts a new one."""
        sync_session.expunge_all()

        repo.add_or_update(Product(id=2, sku="SKU-002", name="Upserted", price=2.0))
        fresh = Product(sku="SKU-100", name="Fresh")
        repo.add_or_update(fresh)

        assert repo.count() == 6
        assert fresh.id is not None
        assert _reload(sync_session, Product, 2).name == "Upserted"


class TestSyncRepositoryReads:
    """Test lookups, lists and paging."""

    def test_get_by_id_loads_reference(self, repo, sync_session, seeded):
        """Test get_by_id() with a single-valued relation."""
        sync_session.expunge_all()
        found = repo.get_by_id(2, False, "category")
        assert found.category.name == "Garden"

    def test_get_single(self, repo, seeded):
        """Test get_single() for zero, one and several matches."""
        assert repo.get_single(Product.sku == "SKU-002").id == 2
        assert repo.get_single(Product.sku == "missing") is None
        with pytest.raises(AmbiguousResultException):
            repo.get_single(Product.price > 1)

    def test_get_paged_23_rows(self, repo, product_factory):
        """Test 23 rows, page 3 of 10."""
        repo.add_range(product_factory(23))

        result = repo.get_paged(None, 3, 10, Product.id)

        assert result.page.skip == 20
        assert result.page.total_pages == 3
        assert [p.sku for p in result.data] == ["SKU-021", "SKU-022", "SKU-023"]

    def test_get_list_with_relation(self, repo, sync_session, seeded):
        """Test get_list() ordering and eager loading."""
        sync_session.expunge_all()
        rows = repo.get_list(Product.price <= 2, [Product.price.desc()], Product.category)
        assert [p.id for p in rows] == [2, 1]
        assert rows[0].category.name == "Garden"


class TestSyncRepositoryTracking:
    """Test that untracked reads are read-only and never disturb tracked entities."""

    def test_untracked_get_by_id_is_not_saved(self, repo, sync_session, seeded):
        """Test mutating an untracked row is not saved."""
        found = repo.get_by_id(1)
        found.name = "Not saved"

        assert repo.save_changes() == 0

        assert _reload(sync_session, Product, 1).name == "Product 001"

    def test_eager_loaded_relations_are_untracked(self, repo, sync_session, garden, seeded):
        """Test relations loaded by untracked reads are not saved."""
        listed = repo.get_list(Product.id == 1, None, "category")[0].category
        by_id = repo.get_by_id(2, False, "category").category
        paged = repo.get_paged(None, 1, 1, Product.id, "category").data[0].category

        for category in (listed, by_id, paged):
            assert category not in sync_session
            assert category is not garden
            category.name = "Leaked"

        assert repo.save_changes() == 0
        assert _reload(sync_session, Category, garden.id).name == "Garden"

    def test_untracked_reads_keep_tracked_entity(self, repo, sync_session, seeded):
        """Test untracked reads of a row do not detach the tracked instance of it."""
        tracked = repo.get_by_id(1, True)

        repo.get_all()
        repo.get_by_id(1)
        repo.exists(Product.id == 1)
        repo.get_paged(None, 1, 10)

        assert tracked in sync_session
        tracked.name = "Persist me"
        assert repo.save_changes() == 1
        assert _reload(sync_session, Product, 1).name == "Persist me"


class TestSyncRepositoryBulk:
    """Test bulk operations."""

    def test_bulk_operations(self, repo, seeded):
        """Test the bulk operations end to end."""
        assert repo.bulk_add([]) == 0
        assert repo.bulk_delete_by_id([]) == 0

        assert repo.bulk_delete_by_id([1]) == 1
        assert repo.bulk_delete(Product.price >= 4) == 2
        assert repo.delete_range(Product.price > 50) is False
        assert repo.count() == 2

        remaining = repo.get_all()
        for product in remaining:
            product.is_active = False
        assert repo.bulk_update(remaining) == 2
        assert repo.count(Product.is_active == False) == 2  # noqa: E712

        assert repo.bulk_delete_entities(remaining) == 2
        assert repo.exists(Product.id > 0) is False
