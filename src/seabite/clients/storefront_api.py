"""HTTP client for the storefront backend's notification and order endpoints.

Every call carries the customer's bearer token. Failures are logged and
turned into an empty result; nothing is retried.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from seabite.services.local_storage import BrowsingContext

logger = logging.getLogger(__name__)


class StorefrontAPIClient:
    """Thin wrapper over the /api/notifications and /api/orders endpoints."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        context: Optional[BrowsingContext] = None,
        token_storage_key: str = "token",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._context = context
        self._token_storage_key = token_storage_key
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        token = self._token
        if token is None and self._context is not None:
            token = self._context.get_item(self._token_storage_key)
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self._timeout,
            headers=self._headers(),
            transport=self._transport,
        )

    def _request(self, method: str, path: str) -> Optional[httpx.Response]:
        try:
            with self._get_client() as client:
                response = client.request(method, path)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            logger.error("%s %s failed with status %s", method, path, e.response.status_code)
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, path, e)
        return None

    def _fetch_list(self, path: str) -> List[Dict[str, Any]]:
        response = self._request("GET", path)
        if response is None:
            return []
        try:
            data = response.json()
        except ValueError:
            logger.error("GET %s returned a non-JSON body", path)
            return []
        if not isinstance(data, list):
            logger.error("GET %s returned %s, expected a list", path, type(data).__name__)
            return []
        return data

    def list_notifications(self) -> List[Dict[str, Any]]:
        """Latest notifications of the signed-in customer."""
        return self._fetch_list("/api/notifications")

    def mark_all_read(self) -> bool:
        return self._request("PUT", "/api/notifications/read-all") is not None

    def delete_notification(self, notification_id: str) -> bool:
        return self._request("DELETE", f"/api/notifications/{notification_id}") is not None

    def clear_notifications(self) -> bool:
        return self._request("DELETE", "/api/notifications/clear/all") is not None

    def list_my_orders(self) -> List[Dict[str, Any]]:
        """Order history of the signed-in customer."""
        return self._fetch_list("/api/orders/myorders")
