"""Permission classes shared by the facility API."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class IsFacilityAdmin(permissions.BasePermission):
    """
    Permission class that only allows facility admins to access.

    A facility admin is a user with role='admin'; Django superusers and
    staff accounts are treated the same way.
    """

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False

        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return hasattr(user, "is_facility_admin") and user.is_facility_admin()


class IsActiveMember(permissions.BasePermission):
    """Authenticated users that have not been banned by an admin."""

    message = "This account is banned."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        return not getattr(user, "is_banned", False)
