# Re-export the models from a single entry point:
#   from seabite.models import CartSummary, StorageEntry
#
# Importing StorageEntry here also registers it with Base.metadata before
# init_db() calls Base.metadata.create_all().

from seabite.models.cart import (
    CartLineItem,
    CartPolicy,
    CartSummary,
    CartTotals,
    DEFAULT_POLICY,
)
from seabite.models.storage import StorageEntry

__all__ = [
    "CartLineItem",
    "CartPolicy",
    "CartSummary",
    "CartTotals",
    "DEFAULT_POLICY",
    "StorageEntry",
]
