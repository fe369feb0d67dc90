from seabite.services.cart_service import CartService
from seabite.services.cart_sync import CartStateSynchronizer, RefreshResult
from seabite.services.local_storage import BrowsingContext, LocalStorage, StorageEvent
from seabite.services.location_service import LocationService, is_deliverable
from seabite.services.session_registry import CartSession, CartSessionRegistry

__all__ = [
    "BrowsingContext",
    "CartService",
    "CartSession",
    "CartSessionRegistry",
    "CartStateSynchronizer",
    "LocalStorage",
    "LocationService",
    "RefreshResult",
    "StorageEvent",
    "is_deliverable",
]
