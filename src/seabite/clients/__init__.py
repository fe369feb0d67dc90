from seabite.clients.geocoding import DeliveryAddress, GeocodingClient
from seabite.clients.storefront_api import StorefrontAPIClient

__all__ = ["DeliveryAddress", "GeocodingClient", "StorefrontAPIClient"]
