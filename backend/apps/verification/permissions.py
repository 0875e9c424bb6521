"""
Custom permissions for the admin console.
"""
from rest_framework import permissions


class IsAdminOrSupport(permissions.BasePermission):
    """
    Permission for admin or support staff to review business applications.
    """

    message = "Admin or Support role required"

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        # Check if user is active and not banned
        if not request.user.is_active or request.user.is_banned:
            return False

        # Check if user is admin or support
        return request.user.is_reviewer
