from typing import Iterable, Optional

from .models import ROLE_PERMISSIONS, Permission, Role


def has_permission(role: Role, permission: Permission) -> bool:
    """
    Check if a role has a specific permission.

    Args:
        role: The role to check
        permission: The permission to validate

    Returns:
        True if the role has the permission, False otherwise
    """
    return permission in ROLE_PERMISSIONS.get(role, set())


def permissions_for(roles: Iterable[Optional[Role]]) -> frozenset[Permission]:
    """
    Union the permissions granted by several roles.

    Missing roles (``None``) contribute nothing, so callers can pass lookups
    that may not have found a membership.
    """
    granted: set[Permission] = set()
    for role in roles:
        if role is not None:
            granted |= ROLE_PERMISSIONS.get(role, set())
    return frozenset(granted)
