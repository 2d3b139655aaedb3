"""
Serializers for notification API.

This module provides DRF serializers for the notification endpoints.

Serializers:
    SendNotificationSerializer: Client ingestion request (with nested configs)
    SendNotificationResponseSerializer: Batch summary returned on ingestion
    NotificationLogSerializer: Read-only log details
    SystemSendNotificationSerializer: System ingestion request
    SystemSettingsSerializer: Settings response (secrets replaced by flags)
    SystemSettingsUpdateSerializer: Partial settings update

Serializers check request shape only. Channel-specific rules (missing
config, empty recipients, recipient limit) are enforced by the services so
every rejection carries the same error body.

Usage:
    serializer = SendNotificationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = NotificationService.send(api_key, serializer.validated_data)
"""

from __future__ import annotations

from rest_framework import serializers

from notifications.models import (
    Channel,
    NotificationLog,
    NotificationStatus,
    NotificationType,
    SystemNotificationSettings,
)


# =============================================================================
# Ingestion
# =============================================================================


class TelegramConfigSerializer(serializers.Serializer):
    """Bot credentials and chat ids supplied by the caller."""

    bot_token = serializers.CharField(required=False, allow_blank=True, default="")
    chat_ids = serializers.ListField(
        child=serializers.CharField(max_length=255, allow_blank=True),
        required=False,
        default=list,
    )


class EmailConfigSerializer(serializers.Serializer):
    """SMTP credentials and recipient addresses supplied by the caller."""

    from_email = serializers.EmailField()
    to = serializers.ListField(
        child=serializers.EmailField(),
        required=False,
        default=list,
    )
    smtp_host = serializers.CharField(max_length=255)
    smtp_port = serializers.IntegerField(min_value=1, max_value=65535, default=587)
    smtp_username = serializers.CharField(required=False, allow_blank=True, default="")
    smtp_password = serializers.CharField(
        required=False, allow_blank=True, default="", write_only=True
    )
    use_ssl = serializers.BooleanField(required=False, default=False)
    use_tls = serializers.BooleanField(required=False, default=True)


class SendNotificationSerializer(serializers.Serializer):
    """
    Request body for POST /notifications/send/.

    Example:
        {
            "channel": "TELEGRAM",
            "type": "ALERT",
            "subject": "Disk full",
            "message": "/var is at 98%",
            "telegram_config": {"bot_token": "123:abc", "chat_ids": ["42"]}
        }
    """

    channel = serializers.ChoiceField(choices=Channel.choices)
    type = serializers.ChoiceField(choices=NotificationType.choices)
    subject = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    message = serializers.CharField()
    telegram_config = TelegramConfigSerializer(required=False, allow_null=True)
    email_config = EmailConfigSerializer(required=False, allow_null=True)


class SendNotificationResponseSerializer(serializers.Serializer):
    """Batch summary returned by both ingestion endpoints."""

    batch_id = serializers.UUIDField()
    log_ids = serializers.ListField(child=serializers.UUIDField())
    channel = serializers.ChoiceField(choices=Channel.choices)
    status = serializers.ChoiceField(choices=NotificationStatus.choices)
    total_recipients = serializers.IntegerField()
    message = serializers.CharField()


class SystemSendNotificationSerializer(serializers.Serializer):
    """
    Request body for POST /system-notifications/send/.

    Recipients are optional; the defaults from system settings are used
    when none are given.
    """

    channel = serializers.ChoiceField(choices=Channel.choices)
    type = serializers.ChoiceField(choices=NotificationType.choices)
    subject = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    message = serializers.CharField()
    telegram_chat_ids = serializers.ListField(
        child=serializers.CharField(max_length=255, allow_blank=True),
        required=False,
        default=list,
    )
    email_recipients = serializers.ListField(
        child=serializers.EmailField(), required=False, default=list
    )


# =============================================================================
# Logs
# =============================================================================


class NotificationLogSerializer(serializers.ModelSerializer):
    """Read-only view of one delivery."""

    type = serializers.CharField(source="notification_type", read_only=True)

    class Meta:
        model = NotificationLog
        fields = [
            "id",
            "batch_id",
            "system_name",
            "channel",
            "type",
            "status",
            "recipient",
            "subject",
            "message",
            "response",
            "error_message",
            "sent_at",
            "retry_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# =============================================================================
# System settings
# =============================================================================


class SystemSettingsSerializer(serializers.ModelSerializer):
    """
    Settings as shown to admins.

    The bot token and SMTP password are never returned; the
    *_configured flags say whether the channel can send.
    """

    telegram_configured = serializers.BooleanField(read_only=True)
    email_configured = serializers.BooleanField(read_only=True)

    class Meta:
        model = SystemNotificationSettings
        fields = [
            "telegram_enabled",
            "telegram_configured",
            "telegram_chat_id",
            "email_enabled",
            "email_configured",
            "email_from",
            "email_to",
            "email_smtp_host",
            "email_smtp_port",
            "email_smtp_username",
            "email_use_ssl",
            "email_use_tls",
            "updated_at",
        ]
        read_only_fields = fields


class SystemSettingsUpdateSerializer(serializers.Serializer):
    """Input for PUT /system-notifications/settings/. Null fields are ignored."""

    telegram_enabled = serializers.BooleanField(required=False, allow_null=True)
    telegram_bot_token = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )
    telegram_chat_id = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=500
    )
    email_enabled = serializers.BooleanField(required=False, allow_null=True)
    email_from = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    email_to = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    email_smtp_host = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )
    email_smtp_port = serializers.IntegerField(
        required=False, allow_null=True, min_value=1, max_value=65535
    )
    email_smtp_username = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )
    email_smtp_password = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )
    email_use_ssl = serializers.BooleanField(required=False, allow_null=True)
    email_use_tls = serializers.BooleanField(required=False, allow_null=True)
