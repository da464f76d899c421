import logging
from typing import Optional

from django.db import DatabaseError

from apps.core.exceptions import StorageError
from apps.orders.models import Order

logger = logging.getLogger(__name__)


class OrderRepository:

    def get_by_id(self, org_id: str, order_id: str) -> Optional[Order]:
        try:
            return Order.objects.filter(organization_id=org_id, order_id=order_id).first()
        except DatabaseError as e:
            raise StorageError(f"Failed to load order {order_id}") from e

    def save(self, order: Order) -> Order:
        try:
            order.save()
        except DatabaseError as e:
            raise StorageError(f"Failed to save order {order.order_id}") from e
        return order
