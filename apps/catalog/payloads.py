"""
Parsing of admin and event payloads into typed edit/instruction objects.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from apps.core.exceptions import InvalidInput
from apps.core.utils import to_decimal, is_blank


def parse_bool(value, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes", "on")


def parse_int(value, name: str, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be an integer")


def parse_decimal(value, name: str) -> Optional[Decimal]:
    try:
        return to_decimal(value)
    except ValueError:
        raise InvalidInput(f"{name} must be a number")


@dataclass
class StockChangeEvent:
    organization_id: str
    product_id: str
    new_stock: int
    product_name: str = ""
    mrp: Optional[Decimal] = None
    tax_profile_id: Optional[str] = None
    gst_type: Optional[str] = None
    category: Optional[str] = None
    branch_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], org_id: Optional[str] = None) -> "StockChangeEvent":
        organization_id = org_id or data.get("organization_id")
        if is_blank(organization_id):
            raise InvalidInput("organization_id is required")
        product_id = data.get("product_id")
        if is_blank(product_id):
            raise InvalidInput("product_id is required")
        new_stock = parse_int(data.get("new_stock"), "new_stock")
        if new_stock is None:
            raise InvalidInput("new_stock is required")
        return cls(
            organization_id=str(organization_id),
            product_id=str(product_id),
            new_stock=new_stock,
            product_name=data.get("product_name") or "",
            mrp=parse_decimal(data.get("mrp"), "mrp"),
            tax_profile_id=data.get("tax_profile_id"),
            gst_type=data.get("gst_type"),
            category=data.get("category"),
            branch_id=data.get("branch_id"),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "organization_id": self.organization_id,
            "product_id": self.product_id,
            "new_stock": self.new_stock,
            "product_name": self.product_name,
            "mrp": str(self.mrp) if self.mrp is not None else None,
            "tax_profile_id": self.tax_profile_id,
            "gst_type": self.gst_type,
            "category": self.category,
            "branch_id": self.branch_id,
        }


@dataclass
class ImageInstruction:
    """
    One entry of an image-set update. Entries without asset_id describe new
    uploads; client_id, when given, pairs the entry with an uploaded file.
    """
    asset_id: Optional[str] = None
    alt_text: Optional[str] = None
    display_order: Optional[int] = None
    delete: bool = False
    client_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageInstruction":
        if not isinstance(data, dict):
            raise InvalidInput("each image instruction must be an object")
        return cls(
            asset_id=data.get("asset_id") or None,
            alt_text=data.get("alt_text"),
            display_order=parse_int(data.get("display_order"), "display_order"),
            delete=parse_bool(data.get("delete")),
            client_id=data.get("client_id") or None,
        )


@dataclass
class EnrichmentEdits:
    is_visible: bool = False
    rich_description: Optional[str] = None
    highlights: Optional[str] = None
    category_id: Optional[str] = None
    slug: Optional[str] = None
    tags: Optional[List[str]] = None
    dimensions: Optional[Dict[str, Optional[Decimal]]] = None
    weight: Optional[Dict[str, Any]] = None
    images: List[ImageInstruction] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnrichmentEdits":
        if not isinstance(data, dict):
            raise InvalidInput("request body must be an object")

        tags = data.get("tags")
        if tags is not None:
            if not isinstance(tags, list):
                raise InvalidInput("tags must be a list of strings")
            tags = [str(tag) for tag in tags]

        dimensions = data.get("dimensions")
        if dimensions is not None:
            if not isinstance(dimensions, dict):
                raise InvalidInput("dimensions must be an object")
            dimensions = {
                axis: parse_decimal(dimensions.get(axis), f"dimensions.{axis}")
                for axis in ("length", "width", "height")
            }

        weight = data.get("weight")
        if weight is not None:
            if not isinstance(weight, dict):
                raise InvalidInput("weight must be an object")
            weight = {"value": parse_decimal(weight.get("value"), "weight.value"), "unit": weight.get("unit") or "kg"}

        images = data.get("images") or []
        if not isinstance(images, list):
            raise InvalidInput("images must be a list")

        return cls(
            is_visible=parse_bool(data.get("is_visible")),
            rich_description=data.get("rich_description"),
            highlights=data.get("highlights"),
            category_id=data.get("category_id"),
            slug=data.get("slug"),
            tags=tags,
            dimensions=dimensions,
            weight=weight,
            images=[ImageInstruction.from_dict(item) for item in images],
        )
