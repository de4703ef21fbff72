"""
Shared permission catalogue for role-based access decisions.

Project membership roles and share roles both map onto the same set of
ambient permissions, which sharing strategies consult to decide what the
acting principal may see and change.

Usage:
    from sharing_api.shared.permissions import Permission, Role, permissions_for

    granted = permissions_for([project_role, share_role])
    if Permission.SHARE_WORK_ITEMS in granted:
        ...
"""

from .models import ROLE_PERMISSIONS, Permission, Role
from .services import has_permission, permissions_for

__all__ = [
    "Permission",
    "ROLE_PERMISSIONS",
    "Role",
    "has_permission",
    "permissions_for",
]
