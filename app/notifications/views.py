"""
Views for notification API.

Views:
    SendNotificationView: Client ingestion (X-API-Key)
    NotificationLogViewSet: Client log reads (X-API-Key)
    SystemSettingsView: Read / update system settings (platform admins)
    SystemSendNotificationView: System ingestion (platform admins)
    SystemNotificationLogListView: System log reads (platform admins)

Endpoints:
    Client:
        POST /api/v1/notifications/send/                   - Queue a notification
        GET  /api/v1/notifications/logs/                   - Key's logs (newest first)
        GET  /api/v1/notifications/logs/batch/{batch_id}/  - One batch (oldest first)
        GET  /api/v1/notifications/logs/{log_id}/          - One log

    System:
        GET  /api/v1/system-notifications/settings/        - Get settings
        PUT  /api/v1/system-notifications/settings/        - Update settings
        POST /api/v1/system-notifications/send/            - Queue a system notification
        GET  /api/v1/system-notifications/logs/            - System logs (newest first)

Client endpoints use no user authentication: the X-API-Key header
identifies the calling system.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import (
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import generics, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api_keys.services import ApiKeyService, get_request_api_key
from api_keys.views import API_KEY_HEADER_PARAMETER
from authentication.permissions import IsPlatformAdmin
from notifications.pagination import NotificationLogPagination
from notifications.serializers import (
    NotificationLogSerializer,
    SendNotificationResponseSerializer,
    SendNotificationSerializer,
    SystemSendNotificationSerializer,
    SystemSettingsSerializer,
    SystemSettingsUpdateSerializer,
)
from notifications.services import (
    NotificationLogService,
    NotificationService,
    SystemNotificationService,
    SystemSettingsService,
)

logger = logging.getLogger(__name__)


def _error(result) -> Response:
    return Response(result.to_response(), status=result.status_code)


# =============================================================================
# Client endpoints
# =============================================================================


class SendNotificationView(APIView):
    """Accept a notification and queue one delivery per recipient."""

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        operation_id="send_notification",
        summary="Send notification",
        description=(
            "Validate the API key, create one PENDING log per recipient and "
            "queue them for delivery. Poll the log endpoints for outcomes."
        ),
        parameters=[API_KEY_HEADER_PARAMETER],
        request=SendNotificationSerializer,
        responses={
            200: SendNotificationResponseSerializer,
            400: OpenApiResponse(description="Invalid request"),
            401: OpenApiResponse(description="Invalid, inactive, expired or exhausted key"),
        },
        tags=["Notifications - Client"],
    )
    def post(self, request):
        key_result = ApiKeyService.validate(get_request_api_key(request))
        if not key_result.success:
            return _error(key_result)

        serializer = SendNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = NotificationService.send(key_result.data, serializer.validated_data)
        if not result.success:
            return _error(result)
        return Response(result.data)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_notification_logs",
        summary="List notification logs",
        description="Logs created with the calling key, newest first.",
        parameters=[API_KEY_HEADER_PARAMETER],
        responses={200: NotificationLogSerializer(many=True)},
        tags=["Notifications - Client"],
    ),
    retrieve=extend_schema(
        operation_id="get_notification_log",
        summary="Get notification log",
        parameters=[API_KEY_HEADER_PARAMETER],
        responses={
            200: NotificationLogSerializer,
            404: OpenApiResponse(description="Not found for this key"),
        },
        tags=["Notifications - Client"],
    ),
    batch=extend_schema(
        operation_id="list_batch_notification_logs",
        summary="List batch logs",
        description="Logs of one ingestion batch, oldest first.",
        parameters=[API_KEY_HEADER_PARAMETER],
        responses={200: NotificationLogSerializer(many=True)},
        tags=["Notifications - Client"],
    ),
)
class NotificationLogViewSet(viewsets.GenericViewSet):
    """
    Read-only access to the calling key's logs.

    Exhausted and expired keys may still read; only unknown keys get 401.
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    serializer_class = NotificationLogSerializer
    pagination_class = NotificationLogPagination
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.api_key_result = ApiKeyService.identify(get_request_api_key(request))

    def list(self, request):
        if not self.api_key_result.success:
            return _error(self.api_key_result)
        queryset = NotificationLogService.logs_for_key(self.api_key_result.data)
        return self._paginated(queryset)

    def retrieve(self, request, pk=None):
        if not self.api_key_result.success:
            return _error(self.api_key_result)
        result = NotificationLogService.get_log(self.api_key_result.data, pk)
        if not result.success:
            return _error(result)
        return Response(NotificationLogSerializer(result.data).data)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"batch/(?P<batch_id>[0-9a-fA-F-]{36})",
    )
    def batch(self, request, batch_id=None):
        if not self.api_key_result.success:
            return _error(self.api_key_result)
        queryset = NotificationLogService.batch_logs(self.api_key_result.data, batch_id)
        return self._paginated(queryset)

    def _paginated(self, queryset) -> Response:
        page = self.paginate_queryset(queryset)
        serializer = NotificationLogSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)


# =============================================================================
# System endpoints
# =============================================================================


class SystemSettingsView(APIView):
    """Get or update the system notification settings singleton."""

    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(
        operation_id="get_system_notification_settings",
        summary="Get system notification settings",
        responses={200: SystemSettingsSerializer},
        tags=["Notifications - System"],
    )
    def get(self, request):
        return Response(SystemSettingsSerializer(SystemSettingsService.get_settings()).data)

    @extend_schema(
        operation_id="update_system_notification_settings",
        summary="Update system notification settings",
        description="Only provided, non-null fields are changed.",
        request=SystemSettingsUpdateSerializer,
        responses={
            200: SystemSettingsSerializer,
            400: OpenApiResponse(description="Invalid settings"),
        },
        tags=["Notifications - System"],
    )
    def put(self, request):
        serializer = SystemSettingsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = SystemSettingsService.update_settings(**serializer.validated_data)
        if not result.success:
            return _error(result)

        logger.info(
            f"System notification settings changed by user {request.user.pk}",
            extra={"user_id": request.user.pk},
        )
        return Response(SystemSettingsSerializer(result.data).data)


class SystemSendNotificationView(APIView):
    """Queue a notification using the system transport credentials."""

    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(
        operation_id="send_system_notification",
        summary="Send system notification",
        description=(
            "Queue a notification through the channel configured in system "
            "settings. Recipients default to the configured lists."
        ),
        request=SystemSendNotificationSerializer,
        responses={
            200: SendNotificationResponseSerializer,
            400: OpenApiResponse(description="Invalid request or channel disabled"),
        },
        tags=["Notifications - System"],
    )
    def post(self, request):
        serializer = SystemSendNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = SystemNotificationService.send(serializer.validated_data)
        if not result.success:
            return _error(result)
        return Response(result.data)


@extend_schema(
    operation_id="list_system_notification_logs",
    summary="List system notification logs",
    description="Logs created through system settings, newest first.",
    responses={200: NotificationLogSerializer(many=True)},
    tags=["Notifications - System"],
)
class SystemNotificationLogListView(generics.ListAPIView):
    """Paginated system logs."""

    permission_classes = [IsAuthenticated, IsPlatformAdmin]
    serializer_class = NotificationLogSerializer
    pagination_class = NotificationLogPagination

    def get_queryset(self):
        return NotificationLogService.system_logs()
