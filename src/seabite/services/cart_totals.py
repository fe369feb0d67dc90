"""
Pure cart arithmetic: decode the persisted cart and derive its summary.

Nothing in here touches storage; the synchronizer and the cart service feed
it raw values and get immutable results back.
"""
import json
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional

from seabite.core.exceptions import CartParseError
from seabite.models.cart import (
    CartLineItem,
    CartPolicy,
    CartSummary,
    DEFAULT_POLICY,
    MAX_QUANTITY,
    MAX_UNIT_PRICE,
    to_money,
)

PRICE_FIELDS = ("price", "basePrice")


def _first_truthy(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def _to_decimal(value: Any, field_name: str, index: int, limit: Decimal = MAX_UNIT_PRICE) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise CartParseError(f"Cart entry {index}: {field_name} must be a number")
    try:
        # floats go through str() so 0.1 stays 0.1
        amount = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except (InvalidOperation, ValueError):
        raise CartParseError(f"Cart entry {index}: {field_name} {value!r} is not a number")
    if not amount.is_finite() or amount < 0 or amount > limit:
        raise CartParseError(f"Cart entry {index}: {field_name} {value!r} is out of range")
    return amount


def _to_quantity(value: Any, index: int) -> int:
    if isinstance(value, bool):
        raise CartParseError(f"Cart entry {index}: qty must be a number")
    amount = _to_decimal(value, "qty", index, Decimal(MAX_QUANTITY))
    if amount != amount.to_integral_value() or amount <= 0:
        raise CartParseError(f"Cart entry {index}: qty {value!r} is not a positive integer")
    return int(amount)


def line_item_from_entry(entry: Any, index: int = 0, price_fields=PRICE_FIELDS) -> CartLineItem:
    """
    Build a line item from one persisted cart entry.

    Price precedence follows price_fields (price, then basePrice), then 0;
    quantity is qty or 1.
    Falsy values (0, "", null) fall through to the next candidate.
    """
    if not isinstance(entry, dict):
        raise CartParseError(f"Cart entry {index} is not an object")

    price = _first_truthy(*(entry.get(name) for name in price_fields))
    qty = entry.get("qty") or 1
    product_ref = entry.get("_id")

    return CartLineItem(
        product_ref=str(product_ref) if product_ref is not None else None,
        unit_price=_to_decimal(price, "price", index),
        quantity=_to_quantity(qty, index),
        name=entry.get("name"),
        image=entry.get("image"),
        unit=entry.get("unit") or "kg",
    )


def decode_cart(raw: Optional[str]) -> List[Any]:
    """Decode the stored JSON array; absent means empty."""
    if raw is None or raw == "":
        return []
    try:
        entries = json.loads(raw, parse_float=Decimal)
    except ValueError as e:
        raise CartParseError(f"Cart is not valid JSON: {e}", raw_value=raw)
    if not isinstance(entries, list):
        raise CartParseError("Cart must be a JSON array", raw_value=raw)
    return entries


def parse_line_items(raw: Optional[str]) -> List[CartLineItem]:
    return [line_item_from_entry(entry, i) for i, entry in enumerate(decode_cart(raw))]


def compute_summary(
    line_items: Iterable[CartLineItem],
    policy: CartPolicy = DEFAULT_POLICY,
) -> CartSummary:
    """
    Derive the cart summary.

    subtotal and tax are rounded to cents first and the grand total is their
    exact sum with the delivery fee, so the parts always add up.
    """
    items = tuple(line_items)
    try:
        subtotal = to_money(sum((item.line_total for item in items), Decimal("0")))
        tax_amount = to_money(subtotal * policy.tax_rate)
        delivery_fee = to_money(policy.delivery_fee_for(subtotal))
    except InvalidOperation:
        raise CartParseError("Cart totals exceed the supported amount range")

    return CartSummary(
        line_items=items,
        subtotal=subtotal,
        tax_amount=tax_amount,
        delivery_fee=delivery_fee,
        grand_total=subtotal + tax_amount + delivery_fee,
        total_item_count=sum(item.quantity for item in items),
    )


def empty_summary(policy: CartPolicy = DEFAULT_POLICY) -> CartSummary:
    return compute_summary((), policy)
