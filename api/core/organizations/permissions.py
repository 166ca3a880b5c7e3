"""
Organization Permissions
========================
DRF permission classes that resolve the organization context and check
the shared policy.
"""

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission

from core.permissions import can_perform

from .context import resolve_context

ORGANIZATION_HEADER = 'X-Organization-ID'


def get_organization_context(request):
    """Resolve (once per request) the caller's organization context."""
    context = getattr(request, 'organization_context', None)
    if context is None:
        context = resolve_context(request.user, request.headers.get(ORGANIZATION_HEADER))
        request.organization_context = context
    return context


def require_action(role, action, message='Insufficient permissions'):
    """Raise PermissionDenied unless ``role`` may perform ``action``."""
    if not can_perform(role, action):
        raise PermissionDenied(message)


class OrganizationContextPermission(BasePermission):
    """
    Requires the caller to belong to an organization. The resolved context
    is attached to the request as ``organization_context``.

    Usage in ViewSet:
        permission_classes = [IsAuthenticated, OrganizationContextPermission]
    """
    message = 'User is not part of an organization'

    def has_permission(self, request, view):
        return get_organization_context(request).is_ready
