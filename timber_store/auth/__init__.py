from .roles import Identity, Role
from .gate import current_identity, login_required, role_required

__all__ = ["Identity", "Role", "current_identity", "login_required", "role_required"]
