"""
URL configuration for the notification dispatch service.

URL Structure:
    /                                   - ReDoc API documentation
    /admin/                             - Django admin interface
    /health/                            - Health check endpoint (for load balancers, Docker)
    /schema/                            - OpenAPI schema (YAML)
    /api/v1/auth/                       - JWT authentication (platform admins)
        token/                          - Obtain access/refresh pair
        token/refresh/                  - Refresh access token
    /api/v1/api-keys/                   - API key admin CRUD
        usage-stats/                    - Usage for the X-API-Key holder
    /api/v1/notifications/              - Client notification endpoints (X-API-Key)
        send/                           - Queue a notification
        logs/                           - Key's logs
        logs/batch/{batch_id}/          - Logs of one batch
        logs/{log_id}/                  - Single log
    /api/v1/system-notifications/       - System notification endpoints (admins)
        settings/                       - Get / update settings
        send/                           - Queue a system notification
        logs/                           - System logs

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Authentication (simplejwt)
    path("auth/", include("authentication.urls")),
    # API keys
    path("api-keys/", include("api_keys.urls")),
    # Notifications
    path("notifications/", include("notifications.urls")),
    path("system-notifications/", include("notifications.system_urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Notification Dispatch Admin"
admin.site.site_title = "Notification Dispatch"
admin.site.index_title = "Platform administration"
