from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Tuple, Optional

CENTS = Decimal("0.01")

# Upper bounds for a stored unit price and quantity; anything larger is
# treated as a corrupt cart entry
MAX_UNIT_PRICE = Decimal("10000000")
MAX_QUANTITY = 10000


def to_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, halves away from zero"""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CartPolicy:
    """Tax and delivery constants every summary is computed with"""
    tax_rate: Decimal = Decimal("0.05")
    free_delivery_threshold: Decimal = Decimal("1000")
    delivery_fee: Decimal = Decimal("50")

    def delivery_fee_for(self, subtotal: Decimal) -> Decimal:
        # Strictly greater: a subtotal exactly at the threshold still pays
        if subtotal > self.free_delivery_threshold:
            return Decimal("0")
        return self.delivery_fee


DEFAULT_POLICY = CartPolicy()


@dataclass(frozen=True)
class CartLineItem:
    """Represents one product entry of the persisted cart"""
    product_ref: Optional[str]
    unit_price: Decimal
    quantity: int
    name: Optional[str] = None
    image: Optional[str] = None
    unit: str = "kg"

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartSummary:
    """
    Totals derived from the persisted line items.

    Never mutated: every refresh builds a new instance, so two summaries
    built from the same items compare equal.
    """
    line_items: Tuple[CartLineItem, ...] = field(default_factory=tuple)
    subtotal: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    delivery_fee: Decimal = Decimal("0.00")
    grand_total: Decimal = Decimal("0.00")
    total_item_count: int = 0

    @property
    def is_empty(self) -> bool:
        return len(self.line_items) == 0


@dataclass(frozen=True)
class CartTotals:
    """Checkout totals with an optional percentage coupon applied"""
    subtotal: Decimal
    discount_amount: Decimal
    total: Decimal
    item_count: int
