# common/permissions.py
from rest_framework import permissions
from common.roles import StaffRole
from staff.models import StaffProfile


def active_profile(user):
    if not (user and user.is_authenticated):
        return None
    return StaffProfile.objects.filter(user=user, is_active=True).first()


class IsStaffMember(permissions.BasePermission):
    """
    Any active console account. Superusers always pass.
    """
    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if user.is_superuser:
            return True
        return active_profile(user) is not None


class IsConsoleAdmin(permissions.BasePermission):
    """
    Only System Administrators may manage staff accounts.
    """
    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if user.is_superuser:
            return True
        profile = active_profile(user)
        return bool(profile and profile.role == StaffRole.ADMIN)
