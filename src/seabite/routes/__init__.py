from seabite.routes.cart import cart_bp
from seabite.routes.location import location_bp

__all__ = ["cart_bp", "location_bp"]
