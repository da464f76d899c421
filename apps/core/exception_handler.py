"""
DRF exception handler translating storefront errors into API error bodies.
"""
import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.exceptions import StorefrontError, InventoryConflict, NotFound

logger = logging.getLogger(__name__)


def _error_body(status_code: int, error: str, message: str, context) -> dict:
    request = context.get("request") if context else None
    return {
        "status": status_code,
        "error": error,
        "message": message,
        "timestamp": timezone.now().isoformat(),
        "path": request.path if request is not None else "",
    }


def storefront_exception_handler(exc, context):
    """
    Map StorefrontError subclasses to their status/category pair, defer to DRF for
    its own exceptions and answer anything else with a generic 500.
    """
    if isinstance(exc, StorefrontError):
        if isinstance(exc, (NotFound, InventoryConflict)):
            logger.warning(f"{exc.error}: {exc.message}")
        else:
            logger.error(f"{exc.error}: {exc.message}", exc_info=exc.__cause__ is not None)
        body = _error_body(exc.status_code, exc.error, exc.message, context)
        return Response(body, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    logger.error(f"Unhandled exception: {str(exc)}", exc_info=exc)
    body = _error_body(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        StorefrontError.error,
        StorefrontError.default_message,
        context,
    )
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
