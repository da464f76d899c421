from django.conf import settings

DEFAULTS = {
    "LOW_STOCK_THRESHOLD": 5,
    "PACKAGING_MODEL": "stacked",
    "IMAGE_RENDITIONS": (
        ("thumbnail", (200, 200)),
        ("medium", (600, 600)),
        ("large", (1200, 1200)),
    ),
    "INVENTORY_SERVICE_URL": "http://localhost:8081",
    "PAYMENT_SERVICE_URL": "http://localhost:8082",
    "REMOTE_TIMEOUT_SECONDS": 10.0,
    "DEFAULT_PAGE_SIZE": 20,
    "MAX_PAGE_SIZE": 100,
    "COD_PAYMENT_ID": "COD_IDENTIFIER",
    "ORPHAN_SWEEP_MIN_AGE": 3600,
}

PACKAGING_MODELS = ("stacked", "bounding-box")


def storefront_setting(name: str):
    """Read one value of the STOREFRONT settings dict, falling back to DEFAULTS."""
    configured = getattr(settings, "STOREFRONT", {}) or {}
    if name in configured:
        return configured[name]
    return DEFAULTS[name]
