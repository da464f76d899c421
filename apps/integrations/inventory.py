"""
Client for the inventory service: authoritative sales, stock counts and
product master data.
"""
import logging
from typing import Any, Dict, List, Optional

from apps.core.conf import storefront_setting
from apps.core.exceptions import InventoryConflict, ServiceCommunication
from apps.integrations.http import ServiceClient

logger = logging.getLogger(__name__)


class InventoryGateway(ServiceClient):

    service_name = "Inventory Service"

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(base_url or storefront_setting("INVENTORY_SERVICE_URL"), **kwargs)

    def create_sale(self, sale_request: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create the authoritative sale. Any 4xx answer is a remote rejection and
        surfaces as InventoryConflict with the remote body verbatim.
        """
        sale = self._request(
            "POST",
            "/api/public/inventory/sale",
            org_id=sale_request.get("orgId"),
            branch_id=sale_request.get("branchId"),
            payload=sale_request,
            rejection=InventoryConflict,
        )
        if not isinstance(sale, dict):
            raise ServiceCommunication("Invalid sale response from the Inventory Service.")
        return sale

    def get_stock_batch(self, org_id: str, branch_id: str, product_ids: List[str]) -> Dict[str, int]:
        """Current stock counts for ``product_ids`` in one call; missing ids are absent."""
        body = self._request(
            "POST",
            "/api/public/inventory/medicines/stock-batch",
            org_id=org_id,
            branch_id=branch_id,
            payload={"orgId": org_id, "branchId": branch_id, "productIds": list(product_ids)},
        )
        stock: Dict[str, int] = {}
        for product_id, count in (body or {}).items():
            try:
                stock[str(product_id)] = int(count)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-numeric stock count for {product_id}: {count!r}")
        return stock

    def get_public_product_detail(self, org_id: str, product_id: str) -> Dict[str, Any]:
        """Manufacturer and total stock for one product."""
        return self._request(
            "GET",
            f"/api/public/inventory/medicines/{product_id}/stock-details",
            org_id=org_id,
        ) or {}
