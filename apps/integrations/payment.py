import logging
from typing import Any, Dict, Optional

from apps.core.conf import storefront_setting
from apps.core.exceptions import ServiceCommunication
from apps.integrations.http import ServiceClient

logger = logging.getLogger(__name__)


class PaymentGateway(ServiceClient):

    service_name = "Payment Service"

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(base_url or storefront_setting("PAYMENT_SERVICE_URL"), **kwargs)

    def create_payment_order(self, org_id: str, order_request: Dict[str, Any]) -> Dict[str, Any]:
        response = self._request(
            "POST",
            "/api/internal/payments/create-order",
            org_id=org_id,
            payload=order_request,
        )
        if not isinstance(response, dict):
            raise ServiceCommunication("Invalid response from the Payment Service.")
        logger.info(f"Created payment order for org {org_id}")
        return response
