"""
Test settings: SQLite, in-memory blob storage, eager Celery.
"""

from .base import *

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

STORAGES["default"] = {
    "BACKEND": "django.core.files.storage.InMemoryStorage",
}

CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

STOREFRONT = {
    **STOREFRONT,
    "INVENTORY_SERVICE_URL": "http://inventory.test",
    "PAYMENT_SERVICE_URL": "http://payment.test",
}

# No log files during tests
LOGGING["handlers"].pop("file")
LOGGING["loggers"]["django"]["handlers"] = ["console"]
LOGGING["loggers"]["apps"]["handlers"] = []
LOGGING["loggers"]["apps"]["propagate"] = True
LOGGING["loggers"]["apps"]["level"] = "DEBUG"
