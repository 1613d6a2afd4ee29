"""Back-office routes: product maintenance, fulfillment, customers, roles, settings."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..auth.gate import role_required
from ..auth.roles import Role
from ..config import refresh_non_sensitive, requires_restart
from ..errors import StoreError
from .helpers import components, config, error_response, payload, result_response


admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.post("/products")
@role_required(Role.MANAGER)
def create_product(identity):
    try:
        product = components()["catalog"].create_product(payload())
    except StoreError as exc:
        return error_response(exc)
    return jsonify({"success": True, "product": product}), 201


@admin_bp.post("/products/<int:product_id>")
@role_required(Role.MANAGER)
def update_product(product_id: int, identity):
    try:
        product = components()["catalog"].update_product(product_id, payload())
    except StoreError as exc:
        return error_response(exc)
    return jsonify({"success": True, "product": product})


@admin_bp.post("/products/<int:product_id>/deactivate")
@role_required(Role.MANAGER)
def deactivate_product(product_id: int, identity):
    try:
        components()["catalog"].deactivate_product(product_id)
    except StoreError as exc:
        return error_response(exc)
    return jsonify({"success": True})


@admin_bp.post("/products/<int:product_id>/stock")
@role_required(Role.EMPLOYEE)
def adjust_stock(product_id: int, identity):
    try:
        product = components()["catalog"].adjust_stock(product_id, payload().get("delta"))
    except StoreError as exc:
        return error_response(exc)
    return jsonify({"success": True, "product": product})


@admin_bp.post("/orders/<int:order_id>/status")
@role_required(Role.EMPLOYEE)
def update_order_status(order_id: int, identity):
    status = str(payload().get("order_status", "")).strip()
    return result_response(components()["orders"].update_order_status(order_id, status))


@admin_bp.get("/customers")
@role_required(Role.MANAGER)
def list_customers(identity):
    return jsonify({"customers": components()["customers"].list_customers()})


@admin_bp.post("/customers")
@role_required(Role.MANAGER)
def create_customer(identity):
    try:
        customer = components()["customers"].create_customer(payload())
    except StoreError as exc:
        return error_response(exc)
    return jsonify({"success": True, "customer": customer}), 201


@admin_bp.post("/users/<int:user_id>/role")
@role_required(Role.ADMIN)
def set_role(user_id: int, identity):
    role = str(payload().get("user_role", ""))
    accounts = components()["accounts"]
    target = accounts.get_user(user_id)
    if target is None:
        return jsonify({"success": False, "error": "not_found", "message": "User not found"}), 404
    try:
        if Role.parse(target["user_role"]) > identity.role:
            return jsonify({"success": False, "message": "Cannot change the role of a user above you."}), 403
        if Role.parse(role) > identity.role:
            return jsonify({"success": False, "message": "Cannot grant a role above your own."}), 403
        user = accounts.set_role(user_id, role)
    except ValueError as exc:
        return jsonify({"success": False, "error": "validation", "message": str(exc)}), 400
    except StoreError as exc:
        return error_response(exc)
    return jsonify({"success": True, "user": user})


@admin_bp.get("/settings")
@role_required(Role.ADMIN)
def get_settings(identity):
    cfg = config()
    return jsonify(
        {
            "settings": {
                "PAGE_SIZE": cfg.page_size,
                "FEATURED_LIMIT": cfg.featured_limit,
                "STORE_NAME": cfg.store_name,
            }
        }
    )


@admin_bp.post("/settings")
@role_required(Role.ADMIN)
def update_settings(identity):
    overrides = payload().get("settings") or {}
    if not isinstance(overrides, dict) or not overrides:
        return jsonify({"success": False, "message": "No settings supplied"}), 400
    try:
        updated = refresh_non_sensitive(overrides, config())
    except ValueError as exc:
        return jsonify({"success": False, "error": "validation", "message": str(exc)}), 400
    current_app.config["TIMBER_STORE_CONFIG"] = updated
    return jsonify(
        {
            "success": True,
            "restart_required": requires_restart(list(overrides)),
            "settings": {
                "PAGE_SIZE": updated.page_size,
                "FEATURED_LIMIT": updated.featured_limit,
                "STORE_NAME": updated.store_name,
            },
        }
    )
