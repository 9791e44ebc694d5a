# accounts/permissions.py
from rest_framework.permissions import BasePermission, SAFE_METHODS

from common.enums import Role


def _role(user):
    return getattr(user, "role", None)


class IsAdmin(BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and (_role(request.user) == Role.ADMIN or request.user.is_staff))


class IsInstructor(BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and _role(request.user) == Role.INSTRUCTOR)


class IsStudent(BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and _role(request.user) == Role.STUDENT)


class IsAdminOrReadOnly(BasePermission):
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return IsAdmin().has_permission(request, view)


class IsAdminOrInstructor(BasePermission):
    def has_permission(self, request, view):
        return IsAdmin().has_permission(request, view) or IsInstructor().has_permission(request, view)


class IsStaffOrReadOnly(BasePermission):
    """Admin/Instructor can write; any authenticated user can read."""
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return IsAdminOrInstructor().has_permission(request, view)
