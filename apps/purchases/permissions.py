"""
Custom permission classes for purchases app.

This module defines permission classes for controlling who may feed store
transactions into the ledger.
"""
import secrets

from django.conf import settings
from rest_framework.permissions import BasePermission


class IsStoreCollaborator(BasePermission):
    """
    Permission for endpoints that write store transactions.

    Allows access if:
    - The request carries the configured store token in ``X-Store-Token``
    - The user is authenticated staff

    Usage:
        @permission_classes([IsStoreCollaborator])
        def store_events(request):
            ...
    """

    message = 'Only the store integration may record purchases.'

    def has_permission(self, request, view):
        """Check store token or staff status."""
        expected = getattr(settings, 'STORE_WEBHOOK_TOKEN', '')
        provided = request.headers.get('X-Store-Token', '')
        if expected and provided and secrets.compare_digest(provided, expected):
            return True

        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)
