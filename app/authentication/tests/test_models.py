"""
Tests for the platform User model and admin permission.

Covers:
- Email-based creation through UserManager
- Role resolution (superusers act as owners)
- IsPlatformAdmin permission
"""

from unittest.mock import MagicMock

import pytest
from django.contrib.auth.models import AnonymousUser

from authentication.models import PlatformRole, User
from authentication.permissions import IsPlatformAdmin
from authentication.tests.factories import PlatformAdminFactory, UserFactory


@pytest.mark.django_db
class TestUserManager:
    def test_create_user_normalizes_email_domain(self):
        user = User.objects.create_user(email="ops@EXAMPLE.COM", password="pw-12345")

        assert user.email == "ops@example.com"
        assert user.check_password("pw-12345")
        assert user.role == PlatformRole.MEMBER

    def test_create_user_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email="", password="pw")

    def test_create_superuser_is_owner(self):
        user = User.objects.create_superuser(email="root@example.com", password="pw")

        assert user.is_staff
        assert user.is_superuser
        assert user.role == PlatformRole.PLATFORM_OWNER


@pytest.mark.django_db
class TestPlatformRole:
    def test_member_is_not_platform_admin(self):
        assert UserFactory().is_platform_admin is False

    @pytest.mark.parametrize(
        "role", [PlatformRole.PLATFORM_ADMIN, PlatformRole.PLATFORM_OWNER]
    )
    def test_admin_roles_are_platform_admin(self, role):
        assert UserFactory(role=role).is_platform_admin is True

    def test_inactive_admin_is_not_platform_admin(self):
        assert PlatformAdminFactory(is_active=False).is_platform_admin is False

    def test_superuser_member_role_still_owner(self):
        user = UserFactory(is_superuser=True, is_staff=True)

        assert user.effective_role == PlatformRole.PLATFORM_OWNER
        assert user.is_platform_admin is True


@pytest.mark.django_db
class TestIsPlatformAdmin:
    def _request(self, user):
        request = MagicMock()
        request.user = user
        return request

    def test_anonymous_denied(self):
        assert IsPlatformAdmin().has_permission(self._request(AnonymousUser()), None) is False

    def test_member_denied(self):
        assert IsPlatformAdmin().has_permission(self._request(UserFactory()), None) is False

    def test_admin_allowed(self):
        request = self._request(PlatformAdminFactory())
        assert IsPlatformAdmin().has_permission(request, None) is True
