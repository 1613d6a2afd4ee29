from __future__ import annotations

from flask import Blueprint, jsonify

from ..auth.gate import current_identity, login_required
from ..errors import StoreError
from .helpers import components, error_response, payload


cart_bp = Blueprint("cart", __name__, url_prefix="/cart")


def _cart():
    return components()["cart"]


@cart_bp.get("/")
@login_required
def get_cart(identity):
    return jsonify(_cart().get_cart(user_id=identity.user_id))


@cart_bp.post("/add")
@login_required
def add_to_cart(identity):
    data = payload()
    try:
        result = _cart().add_item(
            user_id=identity.user_id,
            product_id=data.get("product_id"),
            quantity=data.get("quantity", 1),
        )
    except StoreError as exc:
        return error_response(exc)
    return jsonify(
        {
            "success": True,
            "message": "Item added to cart successfully",
            "cart_count": _cart().count_items(user_id=identity.user_id),
            **result,
        }
    )


@cart_bp.post("/update")
@login_required
def update_cart(identity):
    data = payload()
    try:
        result = _cart().update_item(user_id=identity.user_id, cart_id=data.get("cart_id"), quantity=data.get("quantity"))
    except StoreError as exc:
        return error_response(exc)
    return jsonify({"success": True, "message": "Cart updated successfully", **result})


@cart_bp.post("/remove")
@login_required
def remove_from_cart(identity):
    _cart().remove_item(user_id=identity.user_id, cart_id=payload().get("cart_id"))
    return jsonify({"success": True, "message": "Item removed from cart"})


@cart_bp.post("/clear")
@login_required
def clear_cart(identity):
    _cart().clear_cart(user_id=identity.user_id)
    return jsonify({"success": True, "message": "Cart cleared successfully"})


@cart_bp.get("/count")
def cart_count():
    # anonymous visitors get 0 rather than a login error
    identity = current_identity()
    if identity is None:
        return jsonify({"count": 0})
    return jsonify({"count": _cart().count_items(user_id=identity.user_id)})
