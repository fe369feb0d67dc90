"""SeaBite storefront cart core."""

__version__ = "1.0.0"
