"""
Celery tasks for the stocks app.
"""
from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def process_stock_event(event_data):
    """
    Apply one stock-change event delivered through the broker.
    Redelivery is safe: the same event leaves the product unchanged.
    """
    from apps.catalog.payloads import StockChangeEvent
    from apps.catalog.reconciliation import CatalogReconciler

    try:
        event = StockChangeEvent.from_dict(event_data)
        product = CatalogReconciler().apply_stock_event(event)
        return {
            "product_id": product.product_id,
            "stock_level": product.stock_level,
            "current_status": product.current_status,
        }
    except Exception as e:
        logger.error(f"Stock event processing failed for {event_data.get('product_id')}: {str(e)}")
        raise
