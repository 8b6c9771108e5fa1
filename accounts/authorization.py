"""
Permission resolution and the DRF permission class used by registry views.

Views declare the permission strings they need per HTTP method:

    class FarmerListView(APIView):
        permission_classes = [IsAuthenticated, HasRegistryPermission]
        required_permissions = {
            'GET': ['farmers.read'],
            'POST': ['farmers.create'],
        }

Holding ANY of the listed permissions grants access.
"""

import logging

from django.conf import settings
from rest_framework import permissions

from .permissions_config import ALL_PERMISSIONS, DEFAULT_ROLE_PERMISSIONS

logger = logging.getLogger(__name__)

_CACHE_ATTR = '_registry_permissions'


def get_user_permissions(user):
    """
    Return the set of permission strings held by ``user``.

    Superusers, SUPER_ADMIN users and the configured super-admin emails hold
    every permission; everyone else holds the union of their roles' lists.
    The result is memoized on the user instance for the current request.
    """
    if not user or not user.is_authenticated:
        return set()

    cached = getattr(user, _CACHE_ATTR, None)
    if cached is not None:
        return cached

    super_admin_emails = getattr(settings, 'SUPER_ADMIN_EMAILS', [])
    if (
        user.is_superuser
        or user.role == 'SUPER_ADMIN'
        or (user.email and user.email.lower() in super_admin_emails)
    ):
        granted = set(ALL_PERMISSIONS)
    else:
        granted = set()
        for role_permissions in user.roles.values_list('permissions', flat=True):
            if isinstance(role_permissions, list):
                granted.update(role_permissions)

    setattr(user, _CACHE_ATTR, granted)
    return granted


def user_has_permission(user, *codenames):
    """True when the user holds at least one of ``codenames``."""
    granted = get_user_permissions(user)
    return any(codename in granted for codename in codenames)


def sync_system_roles():
    """
    Create or refresh the default system roles.

    Returns:
        dict: counts of created and updated roles
    """
    from .models import Role

    created = updated = 0
    for name, role_permissions in DEFAULT_ROLE_PERMISSIONS.items():
        role, was_created = Role.objects.get_or_create(
            name=name,
            defaults={'permissions': list(role_permissions), 'is_system': True}
        )
        if was_created:
            created += 1
        elif sorted(role.permissions or []) != sorted(role_permissions) or not role.is_system:
            role.permissions = list(role_permissions)
            role.is_system = True
            role.save(update_fields=['permissions', 'is_system', 'updated_at'])
            updated += 1

    logger.info(f"System roles synced: {created} created, {updated} updated")
    return {'created': created, 'updated': updated, 'total': Role.objects.count()}


class HasRegistryPermission(permissions.BasePermission):
    """
    Checks the view's ``required_permissions`` for the request method.
    """
    message = 'Insufficient permissions'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        required = getattr(view, 'required_permissions', {}).get(request.method)
        if required is None and request.method in ('HEAD', 'OPTIONS'):
            required = getattr(view, 'required_permissions', {}).get('GET')
        if not required:
            return True

        allowed = user_has_permission(request.user, *required)
        if not allowed:
            logger.info(
                f"Permission denied for {request.user.email or request.user.pk}: "
                f"{request.method} {request.path} requires one of {required}"
            )
        return allowed


def require_permissions(*codenames):
    """
    Build a permission class requiring any of ``codenames`` for every method.

        permission_classes = [IsAuthenticated, require_permissions('analytics.read')]
    """

    class _RequiredPermissions(HasRegistryPermission):
        def has_permission(self, request, view):
            if not request.user or not request.user.is_authenticated:
                return False
            return user_has_permission(request.user, *codenames)

    _RequiredPermissions.__name__ = f"Require({', '.join(codenames)})"
    return _RequiredPermissions
