"""
Document-style access to storefront products and categories.

Every save writes the whole record (last writer wins); there is no field-level
patching and no optimistic concurrency check at this layer.
"""
import logging
from dataclasses import dataclass, field
from typing import Generic, Iterable, List, Optional, TypeVar

from django.db import DatabaseError

from apps.core.cursors import encode_cursor, decode_cursor
from apps.core.exceptions import StorageError
from apps.catalog.models import Product, Category

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CursorPage(Generic[T]):
    content: List[T] = field(default_factory=list)
    next_page_token: Optional[str] = None
    has_next: bool = False


class CatalogRepository:

    # --- Products ---

    def get_by_id(self, org_id: str, product_id: str) -> Optional[Product]:
        try:
            return Product.objects.filter(organization_id=org_id, product_id=product_id).first()
        except DatabaseError as e:
            raise StorageError(f"Failed to load product {product_id}") from e

    def save(self, product: Product) -> Product:
        """Full overwrite of the product record."""
        try:
            product.save()
        except DatabaseError as e:
            logger.error(f"Failed to save product {product.product_id} (org {product.organization_id}): {str(e)}")
            raise StorageError(f"Failed to save product {product.product_id}") from e
        return product

    def list_by_org(self, org_id: str) -> List[Product]:
        try:
            return list(Product.objects.filter(organization_id=org_id).order_by("product_id"))
        except DatabaseError as e:
            raise StorageError("Failed to list products") from e

    def list_visible(self, org_id: str) -> List[Product]:
        try:
            return list(Product.objects.filter(organization_id=org_id, is_visible=True).order_by("product_id"))
        except DatabaseError as e:
            raise StorageError("Failed to list products") from e

    def list_visible_page(
        self,
        org_id: str,
        category_id: Optional[str],
        page_size: int,
        cursor: Optional[str],
    ) -> CursorPage[Product]:
        """
        One page of visible products ordered by product_id, continuing after the
        product named in ``cursor``. An unreadable cursor starts from the beginning.
        """
        qs = Product.objects.filter(organization_id=org_id, is_visible=True)
        if category_id:
            qs = qs.filter(category_id=category_id)

        cursor_data = decode_cursor(cursor)
        if cursor_data and cursor_data.get("product_id"):
            qs = qs.filter(product_id__gt=str(cursor_data["product_id"]))

        try:
            # One extra row tells whether another page exists
            rows = list(qs.order_by("product_id")[:page_size + 1])
        except DatabaseError as e:
            raise StorageError("Failed to list products") from e

        has_next = len(rows) > page_size
        content = rows[:page_size]
        next_token = encode_cursor({"product_id": content[-1].product_id}) if has_next and content else None
        return CursorPage(content=content, next_page_token=next_token, has_next=has_next)

    def batch_get_by_ids(self, org_id: str, product_ids: Iterable[str]) -> List[Product]:
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return []
        try:
            found = {
                p.product_id: p
                for p in Product.objects.filter(organization_id=org_id, product_id__in=ids)
            }
        except DatabaseError as e:
            raise StorageError("Failed to load products") from e
        return [found[pid] for pid in ids if pid in found]

    def delete_by_id(self, org_id: str, product_id: str) -> bool:
        try:
            deleted, _ = Product.objects.filter(organization_id=org_id, product_id=product_id).delete()
        except DatabaseError as e:
            raise StorageError(f"Failed to delete product {product_id}") from e
        return deleted > 0

    # --- Categories ---

    def get_category(self, org_id: str, category_id: str) -> Optional[Category]:
        try:
            return Category.objects.filter(organization_id=org_id, category_id=category_id).first()
        except DatabaseError as e:
            raise StorageError(f"Failed to load category {category_id}") from e

    def save_category(self, category: Category) -> Category:
        try:
            category.save()
        except DatabaseError as e:
            raise StorageError(f"Failed to save category {category.category_id}") from e
        return category

    def get_categories_by_org(self, org_id: str) -> List[Category]:
        try:
            return list(Category.objects.filter(organization_id=org_id).order_by("name"))
        except DatabaseError as e:
            raise StorageError("Failed to list categories") from e

    def delete_category(self, org_id: str, category_id: str) -> bool:
        try:
            deleted, _ = Category.objects.filter(organization_id=org_id, category_id=category_id).delete()
        except DatabaseError as e:
            raise StorageError(f"Failed to delete category {category_id}") from e
        return deleted > 0
