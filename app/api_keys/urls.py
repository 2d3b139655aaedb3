"""
URL configuration for the API key endpoints.

Routes:
    /                 - List / create keys (GET, POST)
    /{id}/            - Get / update / delete key (GET, PATCH, PUT, DELETE)
    /usage-stats/     - Usage statistics for X-API-Key holder (GET)
"""

from django.urls import path
from rest_framework.routers import DefaultRouter

from api_keys.views import ApiKeyViewSet, UsageStatsView

router = DefaultRouter()
router.register(r"", ApiKeyViewSet, basename="api-key")

app_name = "api_keys"
urlpatterns = [
    path("usage-stats/", UsageStatsView.as_view(), name="usage-stats"),
] + router.urls
