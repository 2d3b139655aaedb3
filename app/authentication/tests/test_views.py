"""
Tests for the JWT token endpoints used by platform admins.
"""

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from authentication.tests.factories import PlatformAdminFactory

TOKEN_URL = "/api/v1/auth/token/"
REFRESH_URL = "/api/v1/auth/token/refresh/"


@pytest.fixture
def api_client():
    return APIClient()


@pytest.mark.django_db
class TestTokenObtain:
    def test_returns_token_pair(self, api_client):
        admin = PlatformAdminFactory()

        response = api_client.post(
            TOKEN_URL, {"email": admin.email, "password": "TestPass123!"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert "access" in response.data
        assert "refresh" in response.data

    def test_wrong_password(self, api_client):
        admin = PlatformAdminFactory()

        response = api_client.post(
            TOKEN_URL, {"email": admin.email, "password": "wrong"}, format="json"
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_access_token_opens_admin_endpoints(self, api_client):
        admin = PlatformAdminFactory()
        tokens = api_client.post(
            TOKEN_URL, {"email": admin.email, "password": "TestPass123!"}, format="json"
        ).data

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = api_client.get("/api/v1/api-keys/")

        assert response.status_code == status.HTTP_200_OK


@pytest.mark.django_db
class TestTokenRefresh:
    def test_refresh_issues_new_access_token(self, api_client):
        admin = PlatformAdminFactory()
        tokens = api_client.post(
            TOKEN_URL, {"email": admin.email, "password": "TestPass123!"}, format="json"
        ).data

        response = api_client.post(REFRESH_URL, {"refresh": tokens["refresh"]}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert "access" in response.data
