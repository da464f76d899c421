import logging
from typing import Any, Dict, List

from apps.core.exceptions import InvalidInput, NotFound
from apps.core.utils import is_blank, new_id, slugify_name
from apps.catalog.models import Category
from apps.catalog.repository import CatalogRepository

logger = logging.getLogger(__name__)


class CategoryService:
    """Storefront category CRUD. parent_category_id is stored as given."""

    def __init__(self, repository: CatalogRepository = None):
        self.repository = repository or CatalogRepository()

    def create_category(self, org_id: str, data: Dict[str, Any]) -> Category:
        name = data.get("name")
        if is_blank(name):
            raise InvalidInput("Category name is required.")

        category = Category(
            category_id=new_id("cat"),
            organization_id=org_id,
            name=name.strip(),
            slug=slugify_name(name.strip()),
            description=data.get("description"),
            image_url=data.get("image_url"),
            parent_category_id=data.get("parent_category_id"),
        )
        self.repository.save_category(category)
        logger.info(f"Created category {category.category_id} '{category.name}' for org {org_id}")
        return category

    def update_category(self, org_id: str, category_id: str, data: Dict[str, Any]) -> Category:
        category = self.repository.get_category(org_id, category_id)
        if category is None:
            raise NotFound(f"Category {category_id} not found.")

        name = data.get("name")
        if is_blank(name):
            raise InvalidInput("Category name is required.")

        category.name = name.strip()
        category.slug = slugify_name(category.name)
        category.description = data.get("description")
        category.image_url = data.get("image_url")
        category.parent_category_id = data.get("parent_category_id")
        self.repository.save_category(category)
        logger.info(f"Updated category {category_id} for org {org_id}")
        return category

    def list_categories(self, org_id: str) -> List[Category]:
        return self.repository.get_categories_by_org(org_id)

    def delete_category(self, org_id: str, category_id: str) -> None:
        if not self.repository.delete_category(org_id, category_id):
            logger.warning(f"Delete requested for unknown category {category_id} (org {org_id})")
            return
        logger.info(f"Deleted category {category_id} for org {org_id}")
