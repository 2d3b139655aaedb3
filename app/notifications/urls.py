"""
URL configuration for client notification endpoints.

Routes:
    /send/                   - Queue a notification (POST)
    /logs/                   - Key's logs (GET)
    /logs/batch/{batch_id}/  - Batch logs (GET)
    /logs/{log_id}/          - Single log (GET)
"""

from django.urls import path
from rest_framework.routers import DefaultRouter

from notifications.views import NotificationLogViewSet, SendNotificationView

router = DefaultRouter()
router.register(r"logs", NotificationLogViewSet, basename="notification-log")

app_name = "notifications"
urlpatterns = [
    path("send/", SendNotificationView.as_view(), name="send"),
] + router.urls
