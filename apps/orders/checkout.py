"""
Checkout pipeline.

The inventory sale is the authoritative price and stock check: totals, tax
and line items come from the sale response, never from the client's cart.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from apps.core.exceptions import InvalidInput, StorageError
from apps.core.utils import is_blank, new_id, round_money, to_decimal
from apps.catalog.payloads import parse_decimal, parse_int
from apps.integrations.inventory import InventoryGateway
from apps.integrations.payment import PaymentGateway
from apps.orders.models import Order
from apps.orders.repository import OrderRepository
from apps.organizations.repository import BranchRepository

logger = logging.getLogger(__name__)

SALE_TYPE = "E-COMMERCE"
GST_TYPES = ("INCLUSIVE", "EXCLUSIVE", "NON_GST")
DEFAULT_GST_TYPE = "NON_GST"


def parse_gst_type(value: Optional[str]) -> str:
    if is_blank(value):
        return DEFAULT_GST_TYPE
    normalized = str(value).strip().upper()
    return normalized if normalized in GST_TYPES else DEFAULT_GST_TYPE


@dataclass
class CartItem:
    product_id: str
    product_name: str
    quantity: int
    mrp_per_item: Decimal
    discount_percentage: Decimal = Decimal("0")
    sku: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        if not isinstance(data, dict):
            raise InvalidInput("each cart item must be an object")
        if is_blank(data.get("product_id")):
            raise InvalidInput("Product ID is required for a cart item")
        if is_blank(data.get("product_name")):
            raise InvalidInput("Product name is required for a cart item")
        mrp = parse_decimal(data.get("mrp_per_item"), "mrp_per_item")
        if mrp is None or mrp <= 0:
            raise InvalidInput("MRP per item must be positive")
        discount = parse_decimal(data.get("discount_percentage"), "discount_percentage") or Decimal("0")
        return cls(
            product_id=str(data["product_id"]),
            product_name=data["product_name"],
            quantity=parse_int(data.get("quantity"), "quantity", default=0),
            mrp_per_item=mrp,
            discount_percentage=discount,
            sku=data.get("sku"),
        )

    def as_sale_item(self) -> Dict[str, Any]:
        return {
            "medicineId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "discountPercentage": float(self.discount_percentage),
            "mrp": float(self.mrp_per_item),
            "sku": self.sku,
        }


@dataclass
class CheckoutRequest:
    customer_info: Dict[str, str]
    shipping_address: Dict[str, str]
    cart_items: List[CartItem] = field(default_factory=list)
    customer_id: Optional[str] = None
    gst_type: Optional[str] = None
    courier_id: Optional[str] = None
    shipping_cost: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckoutRequest":
        if not isinstance(data, dict):
            raise InvalidInput("request body must be an object")
        customer_info = data.get("customer_info")
        if not isinstance(customer_info, dict):
            raise InvalidInput("Customer information is required")
        shipping_address = data.get("shipping_address")
        if not isinstance(shipping_address, dict):
            raise InvalidInput("Shipping address is required")
        cart_items = data.get("cart_items")
        if not isinstance(cart_items, list) or not cart_items:
            raise InvalidInput("Cart cannot be empty")

        return cls(
            customer_info=customer_info,
            shipping_address=shipping_address,
            cart_items=[CartItem.from_dict(item) for item in cart_items],
            customer_id=data.get("customer_id"),
            gst_type=data.get("gst_type"),
            courier_id=data.get("courier_id"),
            shipping_cost=parse_decimal(data.get("shipping_cost"), "shipping_cost") or Decimal("0"),
        )


class CheckoutPipeline:

    def __init__(self, inventory: InventoryGateway = None, payment: PaymentGateway = None,
                 orders: OrderRepository = None, branches: BranchRepository = None):
        self.inventory = inventory or InventoryGateway()
        self.payment = payment or PaymentGateway()
        self.orders = orders or OrderRepository()
        self.branches = branches or BranchRepository()

    def build_sale_request(self, org_id: str, branch_id: str, request: CheckoutRequest) -> Dict[str, Any]:
        return {
            "orgId": org_id,
            "branchId": branch_id,
            "sale": {
                "saleType": SALE_TYPE,
                "organizationId": org_id,
                "branchId": branch_id,
                "gstType": parse_gst_type(request.gst_type),
            },
            "saleItemDtoList": [item.as_sale_item() for item in request.cart_items],
        }

    def create_pending_order(self, org_id: str, request: CheckoutRequest) -> Order:
        """
        Create the remote sale, then persist a PENDING_PAYMENT order built from it.
        A rejected sale raises InventoryConflict and persists nothing.
        """
        branch_id = self.branches.resolve_fulfilling_branch(org_id)
        sale_request = self.build_sale_request(org_id, branch_id, request)
        logger.info(
            f"Creating sale request | orgId={org_id} | branchId={branch_id} | customerId={request.customer_id} | "
            f"cartItemCount={len(request.cart_items)} | gstType={sale_request['sale']['gstType']} | "
            f"courierId={request.courier_id}"
        )

        sale = self.inventory.create_sale(sale_request)

        try:
            sale_total = to_decimal(sale.get("grandTotal"), Decimal("0"))
        except ValueError:
            sale_total = Decimal("0")
            logger.warning(f"Sale {sale.get('saleId')} returned a non-numeric grandTotal: {sale.get('grandTotal')!r}")

        order = Order(
            order_id=new_id("ORD"),
            organization_id=org_id,
            branch_id=branch_id,
            customer_id=request.customer_id,
            customer_info=request.customer_info,
            shipping_address=request.shipping_address,
            items=list(sale.get("items") or []),
            grand_total=round_money(sale_total + request.shipping_cost),
            sale_id=sale.get("saleId"),
            status=Order.STATUS_PENDING_PAYMENT,
        )

        logger.info(f"Saving new order {order.order_id} for org {org_id}")
        try:
            saved = self.orders.save(order)
        except StorageError:
            logger.error(
                f"Remote sale created without a local order | orgId={org_id} | saleId={sale.get('saleId')} | "
                f"orderId={order.order_id} | grandTotal={order.grand_total} | items={order.items}"
            )
            raise
        logger.info(f"Successfully created pending order: {saved.order_id}")
        return saved

    def create_payment_order(self, org_id: str, order_request: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(order_request, dict):
            raise InvalidInput("request body must be an object")
        return self.payment.create_payment_order(org_id, order_request)
