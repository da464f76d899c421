"""Package profile folding and the order-details mapping."""
from decimal import Decimal

import pytest

from apps.core.exceptions import NotFound
from apps.catalog.models import Product
from apps.orders.details import OrderDetailsService, map_order_item, payment_method
from apps.orders.models import Order
from apps.orders.packaging import PackageProfile, calculate_package_profile

ZERO_PROFILE = PackageProfile(Decimal("0.00"), Decimal("0.00"), Decimal("0.00"), Decimal("0.00"))


def _product(product_id, weight=None, dimensions=None):
    return Product(organization_id="o1", product_id=product_id, weight=weight, dimensions=dimensions)


@pytest.fixture
def products():
    return {
        "p1": _product("p1", weight={"value": "0.5"}, dimensions={"length": "10", "width": "4", "height": "2"}),
        "p2": _product("p2", weight={"value": "1.25"}, dimensions={"length": "6", "width": "8", "height": "3"}),
        "p3": _product("p3"),
    }


def test_empty_order_has_zero_profile(products):
    assert calculate_package_profile([], products, "stacked") == ZERO_PROFILE


def test_unknown_products_contribute_nothing(products):
    items = [{"medicineId": "x", "quantity": 3}, {"medicineId": None, "quantity": 1}]

    assert calculate_package_profile(items, products, "stacked") == ZERO_PROFILE


def test_stacked_profile(products):
    items = [{"medicineId": "p1", "quantity": 2}, {"medicineId": "p2", "quantity": 1}, {"medicineId": "p3", "quantity": 5}]

    profile = calculate_package_profile(items, products, "stacked")

    assert profile == PackageProfile(Decimal("2.25"), Decimal("10.00"), Decimal("8.00"), Decimal("7.00"))


def test_bounding_box_profile(products):
    items = [{"medicineId": "p1", "quantity": 2}, {"medicineId": "p2", "quantity": 1}]

    profile = calculate_package_profile(items, products, "bounding-box")

    assert profile.height_cm == Decimal("3.00")
    assert profile.total_weight_kg == Decimal("2.25")


def test_weight_is_linear_in_quantity(products):
    single = calculate_package_profile([{"medicineId": "p2", "quantity": 1}], products, "stacked")
    double = calculate_package_profile([{"medicineId": "p2", "quantity": 2}], products, "stacked")

    assert double.total_weight_kg == single.total_weight_kg * 2


def test_profile_is_rounded_half_up():
    products = {"p1": _product("p1", weight={"value": "0.125"})}

    profile = calculate_package_profile([{"medicineId": "p1", "quantity": 1}], products, "stacked")

    assert profile.total_weight_kg == Decimal("0.13")


def test_unknown_packaging_model(products):
    with pytest.raises(ValueError):
        calculate_package_profile([], products, "pyramid")


def test_item_placeholders():
    item = map_order_item({"productName": "", "sku": None, "hsn": " ", "quantity": 2, "mrpPerItem": 10.005})

    assert item == {
        "name": "Product12345",
        "quantity": 2,
        "sku": "SKU12345",
        "hsn_code": 12345,
        "unit_price": Decimal("10.01"),
    }


def test_payment_method(settings):
    settings.STOREFRONT = {**settings.STOREFRONT, "COD_PAYMENT_ID": "COD_IDENTIFIER"}

    assert payment_method("COD_IDENTIFIER") == "COD"
    assert payment_method("pay_123") == "Prepaid"
    assert payment_method(None) == "Prepaid"


@pytest.mark.django_db
def test_get_order_details(make_product):
    make_product(product_id="p1", weight={"value": "0.5"}, dimensions={"length": "10", "width": "4", "height": "2"})
    Order.objects.create(
        order_id="ORD-1",
        organization_id="o1",
        customer_info={"name": "Asha"},
        shipping_address={"street": "1 Main St", "street1": "Flat 2", "city": "Pune", "zip": "411001", "state": "MH"},
        items=[
            {"medicineId": "p1", "productName": "Aspirin", "sku": "ASP-1", "hsn": "3004", "quantity": 3, "mrpPerItem": 12.5},
            {"medicineId": "gone", "productName": "Old", "quantity": 1, "mrpPerItem": 5},
        ],
        grand_total=Decimal("42.50"),
    )

    details = OrderDetailsService().get_order_details("o1", "ORD-1")

    assert details["customer_name"] == "Asha"
    assert details["customer_email"] == "N/A"
    assert details["customer_phone"] == ""
    assert details["payment_method"] == "Prepaid"
    assert details["total_order_value"] == Decimal("42.50")
    assert details["billing_address_line2"] == "Flat 2"
    assert details["billing_pincode"] == "411001"
    assert details["total_weight_kg"] == Decimal("1.50")
    assert details["package_height_cm"] == Decimal("6.00")
    assert details["items"][0]["hsn_code"] == 3004
    assert details["items"][1]["sku"] == "SKU12345"


@pytest.mark.django_db
def test_get_order_details_not_found():
    with pytest.raises(NotFound):
        OrderDetailsService().get_order_details("o1", "ORD-missing")
