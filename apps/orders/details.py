"""
Order details for the shipping integration: the stored order plus a package
estimate, with placeholder values wherever source fields are blank so the
output is always well-formed.
"""
import logging
from typing import Any, Dict, Optional

from apps.core.conf import storefront_setting
from apps.core.exceptions import NotFound
from apps.core.utils import is_blank, round_money
from apps.catalog.repository import CatalogRepository
from apps.orders.models import Order
from apps.orders.packaging import PackageProfile, calculate_package_profile
from apps.orders.repository import OrderRepository

logger = logging.getLogger(__name__)

PLACEHOLDER_PRODUCT_NAME = "Product12345"
PLACEHOLDER_SKU = "SKU12345"
PLACEHOLDER_HSN_CODE = 12345


def _or_default(value, default):
    return default if is_blank(value) else value


def payment_method(payment_id: Optional[str]) -> str:
    if payment_id is not None and payment_id == storefront_setting("COD_PAYMENT_ID"):
        return "COD"
    return "Prepaid"


def _hsn_code(value) -> int:
    if is_blank(value):
        return PLACEHOLDER_HSN_CODE
    try:
        return int(str(value).strip())
    except ValueError:
        logger.warning(f"Non-numeric HSN code {value!r}, using placeholder")
        return PLACEHOLDER_HSN_CODE


def map_order_item(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": _or_default(item.get("productName"), PLACEHOLDER_PRODUCT_NAME),
        "quantity": int(item.get("quantity") or 0),
        "sku": _or_default(item.get("sku"), PLACEHOLDER_SKU),
        "hsn_code": _hsn_code(item.get("hsn")),
        "unit_price": round_money(item.get("mrpPerItem")),
    }


def map_order_details(order: Order, package: PackageProfile) -> Dict[str, Any]:
    customer = order.customer_info or {}
    address = order.shipping_address or {}
    return {
        "order_id": order.order_id,
        "customer_name": customer.get("name") or "N/A",
        "customer_email": customer.get("email") or "N/A",
        "customer_phone": customer.get("phone") or "",
        "payment_method": payment_method(order.payment_id),
        "total_order_value": round_money(order.grand_total),
        "billing_address_line1": address.get("street") or "",
        "billing_address_line2": address.get("street1") or "",
        "billing_city": address.get("city") or "",
        "billing_pincode": address.get("zip") or "",
        "billing_state": address.get("state") or "",
        "total_weight_kg": package.total_weight_kg,
        "package_length_cm": package.length_cm,
        "package_breadth_cm": package.width_cm,
        "package_height_cm": package.height_cm,
        "items": [map_order_item(item) for item in order.items or []],
    }


class OrderDetailsService:

    def __init__(self, orders: OrderRepository = None, catalog: CatalogRepository = None):
        self.orders = orders or OrderRepository()
        self.catalog = catalog or CatalogRepository()

    def get_order_details(self, org_id: str, order_id: str) -> Dict[str, Any]:
        order = self.orders.get_by_id(org_id, order_id)
        if order is None:
            raise NotFound(f"Storefront order with ID {order_id} not found")

        items = list(order.items or [])
        product_ids = list(dict.fromkeys(
            item.get("medicineId") for item in items if item.get("medicineId")
        ))
        products = {p.product_id: p for p in self.catalog.batch_get_by_ids(org_id, product_ids)}

        package = calculate_package_profile(items, products)
        logger.debug(f"Mapping order {order_id} to order details")
        return map_order_details(order, package)
