from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from seabite.models.cart import CartLineItem, CartSummary, CartTotals, to_money


# Amounts are serialized as fixed 2-decimal strings ("155.00")
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: f"{to_money(v):.2f}", return_type=str, when_used="json"),
]


class CartLineItemResponse(BaseModel):
    """Cart line item in API responses"""
    product_ref: Optional[str] = Field(description="Product identifier")
    name: Optional[str] = Field(default=None, description="Display name")
    image: Optional[str] = Field(default=None, description="Image URL")
    unit: str = Field(default="kg", description="Sales unit")
    unit_price: Money = Field(ge=0, description="Price per unit")
    quantity: int = Field(ge=1, description="Quantity in cart")
    line_total: Money = Field(ge=0, description="unit_price x quantity")

    @classmethod
    def from_item(cls, item: CartLineItem) -> "CartLineItemResponse":
        return cls(
            product_ref=item.product_ref,
            name=item.name,
            image=item.image,
            unit=item.unit,
            unit_price=item.unit_price,
            quantity=item.quantity,
            line_total=item.line_total,
        )


class CartSummaryResponse(BaseModel):
    """Derived cart totals"""
    line_items: List[CartLineItemResponse] = Field(description="Cart line items")
    subtotal: Money = Field(ge=0)
    tax_amount: Money = Field(ge=0)
    delivery_fee: Money = Field(ge=0)
    grand_total: Money = Field(ge=0)
    total_item_count: int = Field(ge=0)
    is_empty: bool
    parse_error: Optional[str] = Field(default=None, description="Set when the stored cart was unreadable")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "line_items": [
                {
                    "product_ref": "prawn-tiger-1kg",
                    "name": "Tiger Prawns",
                    "image": None,
                    "unit": "kg",
                    "unit_price": "500.00",
                    "quantity": 2,
                    "line_total": "1000.00",
                }
            ],
            "subtotal": "1000.00",
            "tax_amount": "50.00",
            "delivery_fee": "50.00",
            "grand_total": "1100.00",
            "total_item_count": 2,
            "is_empty": False,
            "parse_error": None,
        }
    })

    @classmethod
    def from_summary(cls, summary: CartSummary, parse_error: Optional[str] = None) -> "CartSummaryResponse":
        return cls(
            line_items=[CartLineItemResponse.from_item(item) for item in summary.line_items],
            subtotal=summary.subtotal,
            tax_amount=summary.tax_amount,
            delivery_fee=summary.delivery_fee,
            grand_total=summary.grand_total,
            total_item_count=summary.total_item_count,
            is_empty=summary.is_empty,
            parse_error=parse_error,
        )


class CartTotalsResponse(BaseModel):
    """Totals with a coupon applied"""
    subtotal: Money
    discount_amount: Money
    total: Money
    item_count: int

    @classmethod
    def from_totals(cls, totals: CartTotals) -> "CartTotalsResponse":
        return cls(
            subtotal=totals.subtotal,
            discount_amount=totals.discount_amount,
            total=totals.total,
            item_count=totals.item_count,
        )
