"""
Role based DRF permission classes.
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission

from .models import Role
from .services import ADMIN_ROLES, has_role


class HasAnyRole(BasePermission):
    """
    Allow users holding any role in the view's ``allowed_roles``.

    Views may also set ``write_roles`` to restrict unsafe methods further.
    """
    message = 'Insufficient permissions'

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False

        if request.method not in SAFE_METHODS and getattr(view, 'write_roles', None):
            return has_role(request.user, *view.write_roles)

        allowed = getattr(view, 'allowed_roles', None)
        if not allowed:
            return True
        return has_role(request.user, *allowed)


class IsAdminRole(BasePermission):
    message = 'Admin role required'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and has_role(request.user, *ADMIN_ROLES))


class IsSuperAdmin(BasePermission):
    message = 'Super admin role required'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and has_role(request.user, Role.SUPER_ADMIN))
