"""
Nominatim lookups for the delivery address picker.

Forward search and reverse lookup. Errors are logged and produce None; the
picker keeps whatever address it had.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"


def _pick_first(address: Dict[str, Any], keys) -> str:
    for key in keys:
        value = address.get(key)
        if value:
            return str(value).strip()
    return ""


@dataclass
class DeliveryAddress:
    street: str
    city: str
    state: str
    zip: str
    lat: Optional[float] = None
    lon: Optional[float] = None


def parse_address(payload: Dict[str, Any]) -> DeliveryAddress:
    """Map a Nominatim result onto the fields of the address form."""
    address = payload.get("address") or {}

    def _coord(name: str) -> Optional[float]:
        try:
            return float(payload[name])
        except (KeyError, TypeError, ValueError):
            return None

    return DeliveryAddress(
        street=payload.get("display_name") or "",
        city=_pick_first(address, ("city", "town", "village")),
        state=_pick_first(address, ("state",)),
        zip=_pick_first(address, ("postcode",)),
        lat=_coord("lat"),
        lon=_coord("lon"),
    )


class GeocodingClient:
    def __init__(
        self,
        user_agent: str = "seabite-storefront/1.0",
        timeout: float = 10.0,
        country_suffix: Optional[str] = "India",
        search_url: str = NOMINATIM_SEARCH_URL,
        reverse_url: str = NOMINATIM_REVERSE_URL,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._user_agent = user_agent
        self._timeout = timeout
        self._country_suffix = country_suffix
        self._search_url = search_url
        self._reverse_url = reverse_url
        self._transport = transport

    def _request_json(self, url: str, params: Dict[str, Any]) -> Optional[Any]:
        headers = {"User-Agent": self._user_agent}
        try:
            with httpx.Client(headers=headers, timeout=self._timeout, transport=self._transport) as client:
                response = client.get(url, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            logger.error("Geocoding request to %s failed: %s", url, e)
        except ValueError:
            logger.error("Geocoding response from %s was not JSON", url)
        return None

    def search(self, query: str) -> Optional[DeliveryAddress]:
        query = " ".join((query or "").split())
        if not query:
            return None
        if self._country_suffix:
            query = f"{query}, {self._country_suffix}"
        data = self._request_json(
            self._search_url,
            {"format": "json", "q": query, "addressdetails": 1, "limit": 1},
        )
        if not data or not isinstance(data, list):
            return None
        return parse_address(data[0])

    def reverse(self, lat: float, lon: float) -> Optional[DeliveryAddress]:
        data = self._request_json(
            self._reverse_url,
            {"format": "json", "lat": lat, "lon": lon, "addressdetails": 1},
        )
        if not data or not isinstance(data, dict) or "error" in data:
            return None
        return parse_address(data)
