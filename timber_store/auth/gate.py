"""Login and role checks for blueprint handlers.

The identity is read from the Flask session once, here, and handed to
services as an explicit argument.
"""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, jsonify, session

from .roles import Identity, Role


SESSION_USER_KEY = "user_id"
SESSION_ROLE_KEY = "user_role"


def current_identity() -> Optional[Identity]:
    if "identity" in g:
        return g.identity
    identity = None
    user_id = session.get(SESSION_USER_KEY)
    if user_id is not None:
        try:
            identity = Identity(user_id=int(user_id), role=Role.parse(session.get(SESSION_ROLE_KEY)))
        except ValueError:
            session.clear()
    g.identity = identity
    return identity


def remember_identity(identity: Identity) -> None:
    session[SESSION_USER_KEY] = identity.user_id
    session[SESSION_ROLE_KEY] = identity.role.label
    g.identity = identity


def forget_identity() -> None:
    session.clear()
    g.identity = None


def role_required(minimum: Role):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            identity = current_identity()
            if identity is None:
                return jsonify({"success": False, "message": "Please log in to access this page."}), 401
            if not identity.has(minimum):
                return jsonify({"success": False, "message": f"Access denied. {minimum.label} privileges required."}), 403
            return view(*args, identity=identity, **kwargs)

        return wrapped

    return decorator


login_required = role_required(Role.CLIENT)
