"""
Shared HTTP plumbing for calls to the inventory and payment services.

Failures are translated into the storefront error taxonomy here so callers
only ever see NotFound, InventoryConflict, InvalidInput or ServiceCommunication.
Nothing is retried; the session timeout bounds every call.
"""
import logging
from typing import Any, Dict, Optional, Type

import requests

from apps.core.conf import storefront_setting
from apps.core.exceptions import (
    StorefrontError,
    InvalidInput,
    InventoryConflict,
    NotFound,
    ServiceCommunication,
)

logger = logging.getLogger(__name__)

ORGANIZATION_HEADER = "X-Organization-Id"
BRANCH_HEADER = "X-Branch-Id"


class ServiceClient:
    """Base client: URL construction, context headers, error translation."""

    service_name = "remote service"

    def __init__(self, base_url: str, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout if timeout is not None else storefront_setting("REMOTE_TIMEOUT_SECONDS")
        self.session = session or requests.Session()

    def _headers(self, org_id: Optional[str], branch_id: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if org_id:
            headers[ORGANIZATION_HEADER] = org_id
        if branch_id:
            headers[BRANCH_HEADER] = branch_id
        return headers

    def _request(
        self,
        method: str,
        path: str,
        org_id: Optional[str] = None,
        branch_id: Optional[str] = None,
        payload: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        rejection: Type[StorefrontError] = InvalidInput,
    ) -> Any:
        """
        Perform one call and return the decoded JSON body. ``rejection`` is the
        error raised for 4xx answers other than 404 and 409.
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                params=params,
                headers=self._headers(org_id, branch_id),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{self.service_name} unreachable | {method} {url} | {str(e)}")
            raise ServiceCommunication(f"Could not communicate with the {self.service_name}.") from e

        if response.status_code >= 400:
            self._raise_for_status(method, url, response, rejection)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{self.service_name} returned invalid JSON | {method} {url}")
            raise ServiceCommunication(f"Invalid response from the {self.service_name}.") from e

    def _raise_for_status(self, method: str, url: str, response, rejection: Type[StorefrontError]) -> None:
        body = response.text or ""
        logger.error(f"{self.service_name} error | {method} {url} | status={response.status_code} | body={body}")

        if response.status_code == 409:
            raise InventoryConflict(body if body.strip() else None)
        if response.status_code == 404:
            raise NotFound(f"Resource not found in the {self.service_name}.")
        if response.status_code >= 500:
            raise ServiceCommunication(f"The {self.service_name} failed to process the request.")
        if rejection is InventoryConflict:
            raise InventoryConflict(body if body.strip() else None)
        raise rejection(f"The {self.service_name} rejected the request.")
