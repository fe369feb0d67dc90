import logging

from flask import Blueprint, request

from seabite.core.exceptions import NotFoundError, ValidationError
from seabite.routes.schemas import AddCartItemSchema, CartTotalsQuerySchema, UpdateCartItemSchema
from seabite.routes.utils import get_container, get_current_profile_id, load_or_400, success_response
from seabite.schemas.cart_schemas import CartSummaryResponse, CartTotalsResponse
from seabite.services.session_registry import CartSession, CartSessionRegistry

logger = logging.getLogger(__name__)

cart_bp = Blueprint("cart", __name__)

_add_schema = AddCartItemSchema()
_update_schema = UpdateCartItemSchema()
_totals_schema = CartTotalsQuerySchema()


def _current_session() -> CartSession:
    profile_id = get_current_profile_id()
    return get_container().get(CartSessionRegistry).session_for(profile_id)


def _summary_payload(session: CartSession, parse_error=None):
    return CartSummaryResponse.from_summary(
        session.synchronizer.summary,
        parse_error=parse_error.message if parse_error else None,
    ).model_dump(mode="json")


def _json_body():
    if not request.is_json:
        raise ValidationError("Content-Type must be application/json.")
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be valid JSON.")
    return data


@cart_bp.route("", methods=["GET"])
def get_cart_summary():
    """Return the current cart summary of the caller's profile."""
    session = _current_session()
    return success_response(_summary_payload(session))


@cart_bp.route("/refresh", methods=["POST"])
def refresh_cart():
    """Re-read the stored cart; parse_error is set when it had to be reset."""
    session = _current_session()
    result = session.synchronizer.refresh()
    if not result.ok:
        logger.warning(f"Refresh for profile {session.context.profile_id} reset an unreadable cart")
    return success_response(_summary_payload(session, result.error))


@cart_bp.route("/items", methods=["POST"])
def add_cart_item():
    """Add a product, or increase its quantity if already in the cart."""
    session = _current_session()
    data = load_or_400(_add_schema, _json_body())

    entry = session.cart.add_to_cart(
        product_ref=data["product_ref"],
        price=data["price"],
        qty=data["qty"],
        name=data["name"],
        image=data["image"],
        unit=data["unit"],
    )
    logger.info(f"Profile {session.context.profile_id} cart now holds {entry['qty']} x {entry['_id']}")
    return success_response(_summary_payload(session), "Item added to cart.", 201)


@cart_bp.route("/items/<product_ref>", methods=["PATCH"])
def update_cart_item(product_ref: str):
    """Update the quantity of a cart item. Setting qty to 0 removes it."""
    session = _current_session()
    data = load_or_400(_update_schema, _json_body())

    if not session.cart.update_quantity(product_ref, data["qty"]):
        raise NotFoundError("Cart item", product_ref)

    message = "Item removed from cart." if data["qty"] == 0 else "Cart item updated."
    return success_response(_summary_payload(session), message)


@cart_bp.route("/items/<product_ref>", methods=["DELETE"])
def delete_cart_item(product_ref: str):
    """Remove an item from the cart."""
    session = _current_session()
    if not session.cart.remove_from_cart(product_ref):
        raise NotFoundError("Cart item", product_ref)
    return success_response(_summary_payload(session), "Item removed from cart.")


@cart_bp.route("", methods=["DELETE"])
def clear_cart():
    session = _current_session()
    session.cart.clear_cart()
    return success_response(_summary_payload(session), "Cart cleared.")


@cart_bp.route("/totals", methods=["GET"])
def get_cart_totals():
    """Totals with an optional percentage coupon (?coupon=10)."""
    session = _current_session()
    query = load_or_400(_totals_schema, request.args)
    totals = session.cart.get_cart_totals(query["coupon"])
    return success_response(CartTotalsResponse.from_totals(totals).model_dump(mode="json"))
