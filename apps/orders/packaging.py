"""
Shipping package estimate for an order, folded over its line items.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, Mapping

from apps.core.conf import PACKAGING_MODELS, storefront_setting
from apps.core.utils import round_money, to_decimal
from apps.catalog.models import Product

ZERO = Decimal("0")


@dataclass
class PackageProfile:
    total_weight_kg: Decimal = ZERO
    length_cm: Decimal = ZERO
    width_cm: Decimal = ZERO
    height_cm: Decimal = ZERO

    def rounded(self) -> "PackageProfile":
        return PackageProfile(
            total_weight_kg=round_money(self.total_weight_kg),
            length_cm=round_money(self.length_cm),
            width_cm=round_money(self.width_cm),
            height_cm=round_money(self.height_cm),
        )


def _measure(container, key: str) -> Decimal:
    if not container:
        return ZERO
    return to_decimal(container.get(key), ZERO)


def calculate_package_profile(
    items: Iterable[Dict],
    products: Mapping[str, Product],
    model: str = None,
) -> PackageProfile:
    """
    Weight adds up as weight x quantity; length and width take the largest item.
    Height adds up per unit for the "stacked" model and takes the tallest item
    for "bounding-box". Items without a known product contribute nothing.
    """
    model = model or storefront_setting("PACKAGING_MODEL")
    if model not in PACKAGING_MODELS:
        raise ValueError(f"unknown packaging model: {model}")

    profile = PackageProfile()
    for item in items or []:
        product = products.get(item.get("medicineId"))
        if product is None:
            continue
        quantity = Decimal(int(item.get("quantity") or 0))

        profile.total_weight_kg += _measure(product.weight, "value") * quantity

        if product.dimensions:
            height = _measure(product.dimensions, "height")
            profile.length_cm = max(profile.length_cm, _measure(product.dimensions, "length"))
            profile.width_cm = max(profile.width_cm, _measure(product.dimensions, "width"))
            if model == "stacked":
                profile.height_cm += height * quantity
            else:
                profile.height_cm = max(profile.height_cm, height)

    return profile.rounded()
