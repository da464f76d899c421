"""
Catalog reconciliation: merges inventory stock events and admin enrichment
edits into storefront product records.

Stock events own name, price and stock fields; admin edits own the
presentation fields. Each call performs one full-record upsert.
"""
import logging
from typing import List, Optional

from apps.core.exceptions import NotFound, InvalidInput
from apps.core.utils import is_blank
from apps.catalog.images import ImageAssetManager, ImageUpload
from apps.catalog.models import Product
from apps.catalog.payloads import StockChangeEvent, EnrichmentEdits
from apps.catalog.repository import CatalogRepository

logger = logging.getLogger(__name__)


def derive_status(quantity: int) -> str:
    if quantity <= 0:
        return Product.STATUS_OUT_OF_STOCK
    return Product.STATUS_IN_STOCK


def apply_enrichment(product: Product, edits: EnrichmentEdits) -> Product:
    """
    Sparse patch of presentation fields. Blank optional fields leave the stored
    value alone; visibility is always overwritten; tags replace the whole list.
    """
    if not is_blank(edits.rich_description):
        product.rich_description = edits.rich_description
    if not is_blank(edits.highlights):
        product.highlights = edits.highlights
    product.is_visible = edits.is_visible
    if not is_blank(edits.category_id):
        product.category_id = edits.category_id
    if not is_blank(edits.slug):
        product.slug = edits.slug
    if edits.tags is not None:
        product.tags = list(edits.tags)
    return product


class CatalogReconciler:

    def __init__(self, repository: Optional[CatalogRepository] = None,
                 image_manager: Optional[ImageAssetManager] = None):
        self.repository = repository or CatalogRepository()
        self.image_manager = image_manager or ImageAssetManager(repository=self.repository)

    def apply_stock_event(self, event: StockChangeEvent) -> Product:
        """
        Upsert the product named by a stock-change event. Replaying the same
        event leaves the stored record unchanged.
        """
        if is_blank(event.product_id):
            raise InvalidInput("product_id is required")

        product = self.repository.get_by_id(event.organization_id, event.product_id)
        is_new = product is None
        if is_new:
            logger.info(
                f"Creating storefront product {event.product_id} (org {event.organization_id}, "
                f"branch {event.branch_id}) from stock event"
            )
            product = Product(
                organization_id=event.organization_id,
                product_id=event.product_id,
                category_name=event.category,
                tax_profile_id=event.tax_profile_id,
                gst_type=event.gst_type,
                is_visible=False,
                images=[],
                tags=[],
            )

        # Inventory-owned fields are always refreshed
        product.product_name = event.product_name
        product.mrp = event.mrp
        product.stock_level = event.new_stock
        product.current_status = derive_status(event.new_stock)

        saved = self.repository.save(product)
        action = "Created" if is_new else "Updated"
        logger.info(
            f"{action} stock for product {event.product_id}: "
            f"stock={saved.stock_level}, status={saved.current_status}"
        )
        return saved

    def _get_product(self, org_id: str, product_id: str) -> Product:
        product = self.repository.get_by_id(org_id, product_id)
        if product is None:
            raise NotFound(f"Storefront Product with ID {product_id} not found.")
        return product

    def enrich_product(self, org_id: str, product_id: str, edits: EnrichmentEdits) -> Product:
        """Apply admin edits to an existing product; never creates one."""
        product = self._get_product(org_id, product_id)
        apply_enrichment(product, edits)
        saved = self.repository.save(product)
        logger.info(f"Enriched product {product_id} (org {org_id}), visible={saved.is_visible}")
        return saved

    def update_product(
        self,
        org_id: str,
        product_id: str,
        edits: EnrichmentEdits,
        files: List[ImageUpload],
    ) -> Product:
        """
        Full product update: enrichment patch, shipping profile and image-set
        changes, persisted with a single save.
        """
        product = self._get_product(org_id, product_id)
        apply_enrichment(product, edits)
        if edits.dimensions is not None:
            product.dimensions = edits.dimensions
        if edits.weight is not None:
            product.weight = edits.weight
        self.image_manager.apply_image_instructions(product, edits.images, files)
        saved = self.repository.save(product)
        logger.info(f"Updated product {product_id} (org {org_id}) with {len(saved.images)} images")
        return saved

    def delete_product(self, org_id: str, product_id: str) -> None:
        if self.repository.delete_by_id(org_id, product_id):
            logger.info(f"Deleted storefront product {product_id} for org {org_id}")
        else:
            logger.warning(f"Delete requested for unknown product {product_id} (org {org_id})")
