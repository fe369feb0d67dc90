from dataclasses import dataclass
from typing import Optional
import logging

from seabite.clients.geocoding import DeliveryAddress, GeocodingClient

logger = logging.getLogger(__name__)

# Delivery only operates in these states; abbreviations are matched too
ALLOWED_STATES = ("Andhra Pradesh", "Telangana", "AP", "TS")


def is_deliverable(state: Optional[str]) -> bool:
    """Case-insensitive substring match of the state against ALLOWED_STATES."""
    if not state:
        return False
    lowered = state.lower()
    return any(allowed.lower() in lowered for allowed in ALLOWED_STATES)


@dataclass
class LocationLookup:
    address: Optional[DeliveryAddress]
    deliverable: bool

    @property
    def found(self) -> bool:
        return self.address is not None


class LocationService:
    """Resolve a picked location and decide whether it can be delivered to"""

    def __init__(self, geocoder: GeocodingClient):
        self.geocoder = geocoder

    def locate(self, lat: float, lon: float) -> LocationLookup:
        return self._check(self.geocoder.reverse(lat, lon), f"{lat},{lon}")

    def search(self, query: str) -> LocationLookup:
        return self._check(self.geocoder.search(query), query)

    def _check(self, address: Optional[DeliveryAddress], label: str) -> LocationLookup:
        if address is None:
            logger.info(f"No address found for {label!r}")
            return LocationLookup(address=None, deliverable=False)

        deliverable = is_deliverable(address.state)
        logger.info(f"Resolved {label!r} to state {address.state!r} (deliverable={deliverable})")
        return LocationLookup(address=address, deliverable=deliverable)
