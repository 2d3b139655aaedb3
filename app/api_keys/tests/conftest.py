"""
Test configuration and fixtures for API key tests.

Usage:
    def test_example(admin_client, api_key):
        response = admin_client.get(f"/api/v1/api-keys/{api_key.id}/")
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from api_keys.tests.factories import ApiKeyFactory
from authentication.tests.factories import PlatformAdminFactory, UserFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def platform_admin(db):
    return PlatformAdminFactory()


@pytest.fixture
def member(db):
    return UserFactory()


# =============================================================================
# API Key Fixtures
# =============================================================================


@pytest.fixture
def api_key(db):
    """Active, unlimited key."""
    return ApiKeyFactory()


@pytest.fixture
def limited_api_key(db):
    """Active key with 25 of 100 recipients used."""
    return ApiKeyFactory(monthly_limit=100, current_usage=25)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(platform_admin):
    """API client authenticated as a platform admin via JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(platform_admin)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def member_client(member):
    """API client authenticated as a user without an admin role."""
    client = APIClient()
    refresh = RefreshToken.for_user(member)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client
