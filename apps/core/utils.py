import re
import uuid
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

TWO_PLACES = Decimal("0.01")


def new_id(prefix: str) -> str:
    """Generate an opaque identifier such as ``IMG-3f2a...``."""
    return f"{prefix}-{uuid.uuid4().hex}"


def slugify_name(name: str) -> str:
    """Lowercase, whitespace runs to hyphens, drop anything outside [a-z0-9-]."""
    slug = re.sub(r"\s+", "-", name.lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


def to_decimal(value, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"not a decimal value: {value!r}")


def round_money(value) -> Decimal:
    """Round to 2 decimal places, half-up; None becomes 0.00."""
    if value is None:
        return Decimal("0.00")
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
