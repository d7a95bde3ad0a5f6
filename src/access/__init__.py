from .roles import (
    default_route,
    has_access,
    has_permission,
    is_admin_route,
    is_employee_route,
    is_public_route,
    navigation_for,
    permissions_for,
)
from .decorators import login_required, permission_required, roles_required

__all__ = [
    'default_route',
    'has_access',
    'has_permission',
    'is_admin_route',
    'is_employee_route',
    'is_public_route',
    'navigation_for',
    'permissions_for',
    'login_required',
    'permission_required',
    'roles_required'
]