"""
Permission classes for the three kinds of caller: patients (users),
hospitals and administrators.
"""
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Allow access only to users with the admin role."""
    message = 'Forbidden'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "is_admin", False))


class IsHospital(BasePermission):
    """Allow access only to an approved hospital session."""
    message = 'Forbidden'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "is_hospital", False))


class IsPatientUser(BasePermission):
    """Allow access only to user accounts (patients and admins), not hospitals."""
    message = 'Forbidden'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and not getattr(user, "is_hospital", False))
