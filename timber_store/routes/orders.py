from __future__ import annotations

from flask import Blueprint, jsonify

from ..auth.gate import login_required
from ..services.order_service import ShippingDetails
from .helpers import components, payload, result_response


orders_bp = Blueprint("orders", __name__, url_prefix="/orders")


def _orders():
    return components()["orders"]


@orders_bp.get("/")
@login_required
def list_orders(identity):
    return jsonify({"orders": _orders().list_orders(identity.user_id, elevated=identity.is_elevated)})


@orders_bp.get("/<int:order_id>")
@login_required
def order_detail(order_id: int, identity):
    detail = _orders().get_order(order_id, identity.user_id, elevated=identity.is_elevated)
    if detail is None:
        return jsonify({"success": False, "error": "not_found", "message": "Order not found"}), 404
    return jsonify(detail)


@orders_bp.post("/create")
@login_required
def create_order(identity):
    shipping = ShippingDetails.from_mapping(payload())
    result = _orders().create_order_from_cart(identity.user_id, shipping)
    return result_response(result, success_status=201)


@orders_bp.post("/<int:order_id>/cancel")
@login_required
def cancel_order(order_id: int, identity):
    result = _orders().cancel_order(order_id, identity.user_id, elevated=identity.is_elevated)
    return result_response(result)
