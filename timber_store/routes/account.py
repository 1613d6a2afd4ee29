from __future__ import annotations

from flask import Blueprint, jsonify

from ..auth.gate import current_identity, forget_identity, login_required, remember_identity
from ..errors import StoreError
from .helpers import components, error_response, payload


account_bp = Blueprint("account", __name__, url_prefix="/account")


@account_bp.post("/register")
def register():
    data = payload()
    try:
        user = components()["accounts"].register_user(
            first_name=str(data.get("user_firstname", "")),
            last_name=str(data.get("user_lastname", "")),
            email=str(data.get("user_email", "")),
            password=str(data.get("user_password", "")),
        )
    except StoreError as exc:
        return error_response(exc)
    return jsonify({"success": True, "user": user}), 201


@account_bp.post("/login")
def login():
    data = payload()
    accounts = components()["accounts"]
    user = accounts.authenticate(str(data.get("user_email", "")), str(data.get("user_password", "")))
    if user is None:
        return jsonify({"success": False, "message": "Please check your credentials and try again."}), 400
    remember_identity(accounts.identity_for(user))
    return jsonify({"success": True, "message": f"Welcome back {user['user_firstname']}!", "user": user})


@account_bp.post("/logout")
def logout():
    forget_identity()
    return jsonify({"success": True})


@account_bp.get("/")
@login_required
def management(identity):
    user = components()["accounts"].get_user(identity.user_id)
    if user is None:
        forget_identity()
        return jsonify({"success": False, "message": "Please log in to access this page."}), 401
    return jsonify({"success": True, "user": user, "is_elevated": identity.is_elevated})


@account_bp.get("/status")
def status():
    identity = current_identity()
    if identity is None:
        return jsonify({"logged_in": False})
    return jsonify({"logged_in": True, "user_id": identity.user_id, "role": identity.role.label})
