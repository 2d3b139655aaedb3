"""
Permission classes for the admin API.

Permission Hierarchy:
    PLATFORM_OWNER = PLATFORM_ADMIN > MEMBER

    PLATFORM_OWNER / PLATFORM_ADMIN can:
        - Create, update and soft delete API keys
        - Read and update system notification settings
        - Send system notifications and read their logs

    MEMBER can:
        - Log in (no admin endpoints)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsPlatformAdmin(permissions.BasePermission):
    """Allows access only to active platform owners and admins."""

    message = "Platform admin role required."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(getattr(user, "is_platform_admin", False))
