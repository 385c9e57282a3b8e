# core/permissions.py - Role based API permissions

from rest_framework.permissions import BasePermission, SAFE_METHODS


def is_admin_user(user):
    return bool(
        user and user.is_authenticated and (
            user.is_superuser or user.is_staff or getattr(user, 'role', None) == 'admin'
        )
    )


class IsAdminRole(BasePermission):
    """Only administrators may call this endpoint"""

    def has_permission(self, request, view):
        return is_admin_user(request.user)


class IsAdminOrReadOnly(BasePermission):
    """Teachers and admins can read; only admins can write"""

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return is_admin_user(user) or getattr(user, 'role', None) == 'teacher'
        return is_admin_user(user)
