import json
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from seabite.core.exceptions import CartParseError, ValidationError
from seabite.models.cart import CartTotals, MAX_QUANTITY, MAX_UNIT_PRICE, to_money
from seabite.services.cart_totals import decode_cart, line_item_from_entry

# Coupon totals price entries by their stored unit price first
TOTALS_PRICE_FIELDS = ("unitPrice", "price", "basePrice")
from seabite.services.local_storage import BrowsingContext, StorageEvent

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class CartService:
    """
    Shopping cart mutations on one browsing context's storage

    Responsibilities:
    - Keep the persisted cart a clean list of unit-priced entries
    - Recover from a corrupted cart by dropping it
    - Notify the own context after every write (other contexts are told by
      the storage layer)
    """

    def __init__(self, context: BrowsingContext, storage_key: str = "cart"):
        self.context = context
        self.storage_key = storage_key

    def get_cart(self) -> List[Dict[str, Any]]:
        """
        Read the persisted cart entries

        Business Rules:
        - A missing cart is empty
        - A corrupted cart is removed from storage and treated as empty
        """
        try:
            return decode_cart(self.context.get_item(self.storage_key))
        except CartParseError as e:
            logger.warning(f"Cart corruption detected in context {self.context.context_id}, clearing: {e.message}")
            self.context.remove_item(self.storage_key)
            return []

    def save_cart(self, entries: List[Dict[str, Any]]) -> None:
        self.context.set_item(self.storage_key, json.dumps(entries, default=_json_default))
        self._notify()

    def add_to_cart(
        self,
        product_ref: str,
        price: Decimal,
        qty: Optional[int] = None,
        name: Optional[str] = None,
        image: Optional[str] = None,
        unit: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Add a product or increase its quantity

        Business Rules:
        - price is the total for qty units; the stored price is per unit
        - An existing entry keeps its original unit price
        - price on the entry always mirrors unitPrice
        - Prices above MAX_UNIT_PRICE and quantities above MAX_QUANTITY are rejected
        """
        logger.info(f"Adding {product_ref} to cart in context {self.context.context_id} (qty={qty})")

        price = Decimal(price)
        if not price.is_finite() or price < 0 or price > MAX_UNIT_PRICE:
            raise ValidationError(
                f"Price must be between 0 and {MAX_UNIT_PRICE}",
                field_errors=[{"field": "price", "message": "out of range"}],
            )

        quantity = qty or 1
        derived_unit_price = to_money(price / qty) if qty and qty > 0 else to_money(price)

        cart = self.get_cart()
        existing_index = self._find_index(cart, product_ref)
        existing = cart[existing_index] if existing_index is not None else None

        if existing is not None:
            try:
                current = line_item_from_entry(existing, existing_index)
            except CartParseError as e:
                logger.warning(f"Replacing unreadable cart entry for {product_ref}: {e.message}")
                existing = None
                del cart[existing_index]

        new_quantity = current.quantity + quantity if existing is not None else quantity
        if new_quantity > MAX_QUANTITY:
            raise ValidationError(
                f"Quantity cannot exceed {MAX_QUANTITY}",
                field_errors=[{"field": "qty", "message": "out of range"}],
            )

        if existing is not None:
            existing["qty"] = new_quantity
            existing["unitPrice"] = existing.get("unitPrice") or derived_unit_price
            existing["price"] = existing["unitPrice"]
            entry = existing
        else:
            entry = {
                "_id": product_ref,
                "name": name,
                "image": image,
                "unitPrice": derived_unit_price,
                "price": derived_unit_price,
                "qty": quantity,
                "unit": unit or "kg",
            }
            cart.append(entry)

        self.save_cart(cart)
        return entry

    def remove_from_cart(self, product_ref: str) -> bool:
        cart = self.get_cart()
        remaining = [entry for entry in cart if not self._matches(entry, product_ref)]
        if len(remaining) == len(cart):
            return False
        logger.info(f"Removed {product_ref} from cart in context {self.context.context_id}")
        self.save_cart(remaining)
        return True

    def update_quantity(self, product_ref: str, quantity: int) -> bool:
        """
        Set the quantity of an entry

        Business Rules:
        - Quantity 0 or less removes the entry
        - The unit price is pinned so repeated updates never scale it
        - Unknown products are ignored
        """
        cart = self.get_cart()
        index = self._find_index(cart, product_ref)
        if index is None:
            logger.info(f"Ignoring quantity update for {product_ref}: not in cart")
            return False

        if quantity <= 0:
            return self.remove_from_cart(product_ref)
        if quantity > MAX_QUANTITY:
            raise ValidationError(
                f"Quantity cannot exceed {MAX_QUANTITY}",
                field_errors=[{"field": "qty", "message": "out of range"}],
            )

        entry = cart[index]
        stable_price = entry.get("unitPrice") or entry.get("price")
        entry["qty"] = quantity
        entry["price"] = stable_price
        entry["unitPrice"] = stable_price

        self.save_cart(cart)
        return True

    def clear_cart(self) -> None:
        logger.info(f"Clearing cart in context {self.context.context_id}")
        self.context.remove_item(self.storage_key)
        self._notify()

    def get_cart_totals(self, coupon_discount: Decimal = Decimal("0")) -> CartTotals:
        """
        Totals with a percentage coupon applied

        Business Rules:
        - The discount is a percentage of the subtotal (0-100)
        - Entries are priced by unitPrice, falling back to price and basePrice
        - The total never goes below zero
        """
        coupon_discount = Decimal(coupon_discount)
        if coupon_discount < 0 or coupon_discount > 100:
            raise ValidationError(
                "Coupon discount must be between 0 and 100 percent",
                field_errors=[{"field": "coupon", "message": "out of range"}],
            )

        try:
            items = [
                line_item_from_entry(entry, i, TOTALS_PRICE_FIELDS)
                for i, entry in enumerate(self.get_cart())
            ]
        except CartParseError as e:
            logger.warning(f"Cart entries unreadable, totals computed as empty: {e.message}")
            items = []

        subtotal = to_money(sum((item.line_total for item in items), Decimal("0")))
        discount_amount = to_money(subtotal * coupon_discount / 100)
        total = subtotal - discount_amount

        return CartTotals(
            subtotal=subtotal,
            discount_amount=discount_amount,
            total=total if total > 0 else Decimal("0.00"),
            item_count=sum(item.quantity for item in items),
        )

    def _notify(self) -> None:
        self.context.dispatch(StorageEvent(self.storage_key, None, None, self.context.context_id))

    @staticmethod
    def _matches(entry: Any, product_ref: str) -> bool:
        return isinstance(entry, dict) and str(entry.get("_id")) == str(product_ref)

    def _find_index(self, cart: List[Any], product_ref: str) -> Optional[int]:
        return next((i for i, entry in enumerate(cart) if self._matches(entry, product_ref)), None)
