"""
Error taxonomy shared by the catalog, image, checkout and listing services.

Every error carries a stable HTTP status and a short category title; the
message is always safe to show to an external caller.
"""
from rest_framework import status


class StorefrontError(Exception):
    """Base class for all storefront domain errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal Server Error"
    default_message = "Something went wrong. Please try again later."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(StorefrontError):
    """A referenced product, category, order or branch does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    error = "Resource Not Found"
    default_message = "Resource not found."


class InvalidInput(StorefrontError):
    """Empty upload, malformed request or payload that cannot be processed."""
    error = "Invalid Input"
    default_message = "The request could not be processed."


class InventoryConflict(StorefrontError):
    """
    The inventory service rejected a sale (insufficient stock, price mismatch).
    The remote body is kept verbatim so the storefront can show it.
    """
    status_code = status.HTTP_409_CONFLICT
    error = "Inventory Conflict"
    default_message = "Insufficient stock"


class ServiceCommunication(StorefrontError):
    """A downstream service was unreachable, timed out or answered with a 5xx."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "Service Unavailable"
    default_message = "A downstream service is currently unavailable."


class StorageError(StorefrontError):
    """The document store or blob store failed a read, write or delete."""
    default_message = "Storage operation failed."
