# amc/permissions.py

from rest_framework.permissions import BasePermission, SAFE_METHODS

from amc.models import User

WRITER_ROLES = (User.ADMIN, User.MANAGER, User.USER)
MANAGER_ROLES = (User.ADMIN, User.MANAGER)
ADMIN_ROLES = (User.ADMIN,)


def _role_of(request):
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return user.role


class HasRole(BasePermission):
    """Authenticated user whose role is in ``allowed_roles``."""

    allowed_roles = ()
    message = "Forbidden"

    def has_permission(self, request, view):
        role = _role_of(request)
        if role is None:
            return False
        return role in self.allowed_roles


class IsWriter(HasRole):
    allowed_roles = WRITER_ROLES


class IsManager(HasRole):
    allowed_roles = MANAGER_ROLES


class IsAdmin(HasRole):
    allowed_roles = ADMIN_ROLES


class ReadOrRole(BasePermission):
    """
    Anyone may read; unsafe methods need one of the roles mapped in
    ``write_roles`` (keyed by HTTP method, ``"*"`` as fallback).
    """

    message = "Forbidden"
    write_roles = {"*": WRITER_ROLES}

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        role = _role_of(request)
        if role is None:
            return False
        allowed = self.write_roles.get(request.method, self.write_roles.get("*", ()))
        return role in allowed


class ReadOrWriter(ReadOrRole):
    write_roles = {"*": WRITER_ROLES, "DELETE": MANAGER_ROLES}


class ReadOrManager(ReadOrRole):
    write_roles = {"*": MANAGER_ROLES}
