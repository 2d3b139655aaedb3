"""
Authentication models.

This module defines the platform operator account:
- User: Email-based user with a platform role

Only platform operators log in to this service. External systems that send
notifications authenticate with API keys (see api_keys.models.ApiKey), not
with user accounts.

Related files:
    - managers.py: Custom user manager for email-based creation
    - permissions.py: Role checks for admin endpoints
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class PlatformRole(models.TextChoices):
    """Roles that govern access to the admin API."""

    PLATFORM_OWNER = "PLATFORM_OWNER", "Platform owner"
    PLATFORM_ADMIN = "PLATFORM_ADMIN", "Platform admin"
    MEMBER = "MEMBER", "Member"


# Roles allowed to manage API keys and system notification settings
ADMIN_ROLES = frozenset({PlatformRole.PLATFORM_OWNER, PlatformRole.PLATFORM_ADMIN})


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        role: Platform role (owner, admin, member)
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        admin = User.objects.create_user(
            email="ops@example.com",
            password="securepassword",
            role=PlatformRole.PLATFORM_ADMIN,
        )
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    role = models.CharField(
        max_length=20,
        choices=PlatformRole.choices,
        default=PlatformRole.MEMBER,
        db_index=True,
        help_text="Platform role controlling access to admin endpoints",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    @property
    def effective_role(self) -> str:
        """Superusers always act as platform owners."""
        if self.is_superuser:
            return PlatformRole.PLATFORM_OWNER
        return self.role

    @property
    def is_platform_admin(self) -> bool:
        """Whether this user may manage API keys and system settings."""
        return self.is_active and self.effective_role in ADMIN_ROLES
