"""Catalog listings and the paginated merge with live stock."""
import pytest

from apps.core.exceptions import InvalidInput, NotFound
from apps.catalog.listing import CatalogListingService, join_stock
from apps.catalog.models import Product
from apps.organizations.repository import BranchRepository

pytestmark = pytest.mark.django_db


@pytest.fixture
def service(repository, fake_inventory):
    return CatalogListingService(repository=repository, inventory=fake_inventory, branches=BranchRepository())


@pytest.fixture
def visible_catalog(make_product):
    for index in range(5):
        make_product(product_id=f"p{index}", visible=True, category_id="cat-a" if index % 2 == 0 else "cat-b")
    make_product(product_id="hidden", visible=False)


@pytest.mark.parametrize("stock,in_stock,low_stock", [
    (None, False, False),
    (0, False, False),
    (1, True, True),
    (5, True, True),
    (6, True, False),
])
def test_join_stock(stock, in_stock, low_stock):
    joined = join_stock(Product(product_id="p1"), stock, threshold=5)

    assert joined.stock_level == (stock or 0)
    assert joined.in_stock is in_stock
    assert joined.low_stock is low_stock


def test_pages_never_exceed_page_size(service, fake_inventory, branch, visible_catalog):
    fake_inventory.stock = {"p0": 3, "p1": 20}

    first = service.list_available_products("o1", page_size=2)

    assert [item.product.product_id for item in first.content] == ["p0", "p1"]
    assert first.has_next is True
    assert first.content[0].low_stock is True
    assert first.content[1].in_stock is True and first.content[1].low_stock is False

    second = service.list_available_products("o1", page_size=2, cursor=first.next_page_token)
    third = service.list_available_products("o1", page_size=2, cursor=second.next_page_token)

    assert [item.product.product_id for item in second.content] == ["p2", "p3"]
    assert [item.product.product_id for item in third.content] == ["p4"]
    assert third.has_next is False
    assert third.next_page_token is None
    assert third.content[0].stock_level == 0


def test_one_stock_call_per_page(service, fake_inventory, branch, visible_catalog):
    service.list_available_products("o1", page_size=3)

    assert fake_inventory.stock_calls == [("o1", "b1", ["p0", "p1", "p2"])]


def test_category_filter(service, branch, visible_catalog):
    page = service.list_available_products("o1", category_id="cat-b", page_size=10)

    assert [item.product.product_id for item in page.content] == ["p1", "p3"]


def test_empty_page_skips_inventory(service, fake_inventory):
    page = service.list_available_products("o1", page_size=10)

    assert page.content == []
    assert page.has_next is False
    assert fake_inventory.stock_calls == []


def test_invalid_page_size(service):
    with pytest.raises(InvalidInput):
        service.list_available_products("o1", page_size=0)


def test_page_size_is_capped(service, branch, settings, visible_catalog):
    settings.STOREFRONT = {**settings.STOREFRONT, "MAX_PAGE_SIZE": 3}

    page = service.list_available_products("o1", page_size=50)

    assert len(page.content) == 3
    assert page.has_next is True


def test_unreadable_cursor_starts_over(service, branch, visible_catalog):
    page = service.list_available_products("o1", page_size=2, cursor="%%%not-a-cursor")

    assert page.content[0].product.product_id == "p0"


def test_low_stock_threshold_is_configurable(service, fake_inventory, branch, settings, visible_catalog):
    settings.STOREFRONT = {**settings.STOREFRONT, "LOW_STOCK_THRESHOLD": 10}
    fake_inventory.stock = {"p0": 8}

    page = service.list_available_products("o1", page_size=1)

    assert page.content[0].low_stock is True


def test_no_branch_configured(service, visible_catalog):
    with pytest.raises(NotFound):
        service.list_available_products("o1", page_size=2)


def test_plain_listings(service, visible_catalog):
    assert len(service.list_products("o1")) == 6
    assert "hidden" not in [p.product_id for p in service.list_visible_products("o1")]


def test_products_by_ids_skips_missing(service, visible_catalog):
    products = service.products_by_ids("o1", ["p3", "nope", "p1"])

    assert [p.product_id for p in products] == ["p3", "p1"]


def test_get_product_not_found(service):
    with pytest.raises(NotFound):
        service.get_product("o1", "missing")


def test_public_detail(service, fake_inventory, make_product):
    make_product(visible=True)
    fake_inventory.detail = {"manufacturer": "Acme Pharma", "totalStock": 42}

    detail = service.get_public_product_detail("o1", "p1")

    assert detail["manufacturer"] == "Acme Pharma"
    assert detail["total_stock"] == 42
    assert detail["in_stock"] is True
    assert detail["category_name"] == "Uncategorized"


def test_public_detail_accepts_numeric_string_stock(service, fake_inventory, make_product):
    make_product(visible=True)
    fake_inventory.detail = {"manufacturer": "Acme Pharma", "totalStock": "7"}

    detail = service.get_public_product_detail("o1", "p1")

    assert detail["total_stock"] == 7
    assert detail["in_stock"] is True


def test_public_detail_ignores_unreadable_stock(service, fake_inventory, make_product):
    make_product(visible=True)
    fake_inventory.detail = {"totalStock": "lots"}

    detail = service.get_public_product_detail("o1", "p1")

    assert detail["total_stock"] == 0
    assert detail["in_stock"] is False


def test_public_detail_hides_invisible_products(service, make_product):
    make_product(visible=False)

    with pytest.raises(NotFound):
        service.get_public_product_detail("o1", "p1")
