"""
Read side of the catalog: admin and public listings, lookups by id, the public
product detail and the paginated catalog merged with live stock counts.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from apps.core.conf import storefront_setting
from apps.core.exceptions import InvalidInput, NotFound
from apps.catalog.models import Product
from apps.catalog.repository import CatalogRepository, CursorPage
from apps.integrations.inventory import InventoryGateway
from apps.organizations.repository import BranchRepository

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"


@dataclass
class ProductWithStock:
    product: Product
    stock_level: int
    in_stock: bool
    low_stock: bool

    def as_dict(self) -> Dict[str, Any]:
        data = self.product.as_dict()
        data.update({
            "stock_level": self.stock_level,
            "in_stock": self.in_stock,
            "low_stock": self.low_stock,
        })
        return data


def join_stock(product: Product, stock: Optional[int], threshold: int) -> ProductWithStock:
    count = stock or 0
    return ProductWithStock(
        product=product,
        stock_level=count,
        in_stock=count > 0,
        low_stock=0 < count <= threshold,
    )


class CatalogListingService:

    def __init__(self, repository: CatalogRepository = None, inventory: InventoryGateway = None,
                 branches: BranchRepository = None):
        self.repository = repository or CatalogRepository()
        self.inventory = inventory or InventoryGateway()
        self.branches = branches or BranchRepository()

    def list_products(self, org_id: str) -> List[Product]:
        return self.repository.list_by_org(org_id)

    def list_visible_products(self, org_id: str) -> List[Product]:
        return self.repository.list_visible(org_id)

    def get_product(self, org_id: str, product_id: str) -> Product:
        product = self.repository.get_by_id(org_id, product_id)
        if product is None:
            raise NotFound(f"Product {product_id} not found.")
        return product

    def products_by_ids(self, org_id: str, product_ids: List[str]) -> List[Product]:
        return self.repository.batch_get_by_ids(org_id, product_ids)

    def get_public_product_detail(self, org_id: str, product_id: str) -> Dict[str, Any]:
        """CMS fields of a visible product combined with inventory's manufacturer and total stock."""
        product = self.repository.get_by_id(org_id, product_id)
        if product is None or not product.is_visible:
            raise NotFound(f"Product {product_id} not found.")

        inventory_detail = self.inventory.get_public_product_detail(org_id, product_id)
        raw_stock = inventory_detail.get("totalStock")
        try:
            total_stock = int(raw_stock or 0)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric total stock for {product_id}: {raw_stock!r}")
            total_stock = 0

        return {
            "product_id": product.product_id,
            "product_name": product.product_name,
            "mrp": str(product.mrp) if product.mrp is not None else None,
            "category_id": product.category_id,
            "category_name": product.category_name or UNCATEGORIZED,
            "rich_description": product.rich_description,
            "highlights": product.highlights,
            "tags": list(product.tags or []),
            "slug": product.slug,
            "images": list(product.images or []),
            "dimensions": product.dimensions,
            "weight": product.weight,
            "manufacturer": inventory_detail.get("manufacturer"),
            "total_stock": total_stock,
            "in_stock": total_stock > 0,
        }

    def list_available_products(
        self,
        org_id: str,
        category_id: Optional[str] = None,
        page_size: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> CursorPage[ProductWithStock]:
        """
        One page of visible products joined with live stock. Pagination state comes
        from the catalog page only; the single stock batch call never changes it.
        """
        if page_size is None:
            page_size = storefront_setting("DEFAULT_PAGE_SIZE")
        if page_size < 1:
            raise InvalidInput("page_size must be at least 1.")
        page_size = min(page_size, storefront_setting("MAX_PAGE_SIZE"))

        page = self.repository.list_visible_page(org_id, category_id, page_size, cursor)
        if not page.content:
            return CursorPage(content=[], next_page_token=None, has_next=False)

        branch_id = self.branches.resolve_fulfilling_branch(org_id)
        product_ids = [p.product_id for p in page.content]
        stock = self.inventory.get_stock_batch(org_id, branch_id, product_ids)
        logger.debug(f"Fetched stock for {len(product_ids)} products (org {org_id}, branch {branch_id})")

        threshold = storefront_setting("LOW_STOCK_THRESHOLD")
        content = [join_stock(p, stock.get(p.product_id), threshold) for p in page.content]
        return CursorPage(content=content, next_page_token=page.next_page_token, has_next=page.has_next)
