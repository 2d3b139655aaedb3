"""
URL configuration for system notification endpoints (platform admins).

Routes:
    /settings/  - Get / update settings (GET, PUT)
    /send/      - Queue a system notification (POST)
    /logs/      - System logs (GET)
"""

from django.urls import path

from notifications.views import (
    SystemNotificationLogListView,
    SystemSendNotificationView,
    SystemSettingsView,
)

app_name = "system_notifications"
urlpatterns = [
    path("settings/", SystemSettingsView.as_view(), name="settings"),
    path("send/", SystemSendNotificationView.as_view(), name="send"),
    path("logs/", SystemNotificationLogListView.as_view(), name="logs"),
]
