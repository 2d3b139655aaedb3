"""
Notification service layer.

This module provides the business logic for accepting notifications and
reading back their outcomes.

Services:
    NotificationService: Fan-out ingestion for API key holders
    SystemNotificationService: Ingestion with credentials from system settings
    NotificationLogService: Log queries scoped to a key (or to system sends)
    SystemSettingsService: Read and partially update the settings singleton

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure() with no side effects
    - Log rows and the usage increment share one transaction
    - Queue messages are published only after that transaction commits

Usage:
    from notifications.services import NotificationService

    result = NotificationService.send(api_key, serializer.validated_data)
    if result.success:
        batch_id = result.data["batch_id"]
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from django.conf import settings
from django.db import transaction

from api_keys.services import ApiKeyService
from core.services import BaseService, ErrorCode, ServiceResult
from notifications.models import (
    SYSTEM_SENDER_NAME,
    Channel,
    NotificationLog,
    NotificationStatus,
    SystemNotificationSettings,
)
from notifications.queue import (
    EmailTransport,
    NotificationPublisher,
    QueueMessage,
    TelegramTransport,
    Transport,
)

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from api_keys.models import ApiKey

logger = logging.getLogger(__name__)

QUEUED_MESSAGE = "Notifications queued successfully"


def _clean_recipients(values) -> list[str]:
    return [str(value).strip() for value in values or [] if str(value).strip()]


def smtp_security(use_tls: bool, use_ssl: bool) -> dict[str, bool]:
    """Implicit TLS wins over STARTTLS when both are requested."""
    use_ssl = bool(use_ssl)
    return {"use_tls": bool(use_tls) and not use_ssl, "use_ssl": use_ssl}


class NotificationService(BaseService):
    """
    Accept a notification from an API key holder.

    Methods:
        send: Validate, persist one PENDING log per recipient, count usage,
            publish after commit
    """

    @classmethod
    def send(cls, api_key: ApiKey, data: dict[str, Any]) -> ServiceResult[dict]:
        """
        Fan a request out into per-recipient logs.

        Args:
            api_key: Key already accepted by ApiKeyService.validate()
            data: Validated fields from SendNotificationSerializer

        Returns:
            ServiceResult with the batch summary, or VALIDATION_ERROR
        """
        plan = cls._resolve_delivery(data)
        if not plan.success:
            return plan

        transport, recipients = plan.data
        return ServiceResult.success(
            cls.dispatch(
                channel=data["channel"],
                data=data,
                recipients=recipients,
                transport=transport,
                api_key=api_key,
                system_name=api_key.system_name,
            )
        )

    @classmethod
    def dispatch(
        cls,
        *,
        channel: str,
        data: dict[str, Any],
        recipients: list[str],
        transport: Transport,
        system_name: str,
        api_key: ApiKey | None = None,
    ) -> dict[str, Any]:
        """
        Persist PENDING logs, count usage and schedule publication.

        Shared by the client and system variants. Callers validate first;
        nothing here can fail for input reasons.
        """
        batch_id = uuid.uuid4()

        with cls.atomic():
            logs = [
                NotificationLog.objects.create(
                    batch_id=batch_id,
                    api_key=api_key,
                    api_key_value=api_key.key if api_key else "",
                    system_name=system_name,
                    channel=channel,
                    notification_type=data["type"],
                    recipient=recipient,
                    subject=data.get("subject") or "",
                    message=data["message"],
                )
                for recipient in recipients
            ]
            if api_key is not None:
                ApiKeyService.increment_usage(api_key, amount=len(logs))

            messages = [
                QueueMessage(
                    log_id=str(log.id),
                    batch_id=str(batch_id),
                    recipient=log.recipient,
                    channel=channel,
                    transport=transport,
                )
                for log in logs
            ]
            transaction.on_commit(lambda: NotificationPublisher.publish_many(messages))

        cls.get_logger().info(
            f"Notification batch {batch_id} created with {len(logs)} recipient(s)",
            extra={
                "batch_id": str(batch_id),
                "channel": channel,
                "system_name": system_name,
            },
        )

        return {
            "batch_id": str(batch_id),
            "log_ids": [str(log.id) for log in logs],
            "channel": channel,
            "status": NotificationStatus.PENDING,
            "total_recipients": len(logs),
            "message": QUEUED_MESSAGE,
        }

    @classmethod
    def _resolve_delivery(
        cls, data: dict[str, Any]
    ) -> ServiceResult[tuple[Transport, list[str]]]:
        """Turn the channel config into a transport snapshot and recipients."""
        channel = data["channel"]

        if channel == Channel.TELEGRAM:
            config = data.get("telegram_config")
            if not config:
                return cls.validation_failure(
                    {"telegram_config": ["Telegram configuration is required"]}
                )
            token = (config.get("bot_token") or "").strip()
            if not token:
                return cls.validation_failure(
                    {"telegram_config": ["Telegram bot token is required"]}
                )
            recipients = _clean_recipients(config.get("chat_ids"))
            if not recipients:
                return cls.validation_failure(
                    {"telegram_config": ["At least one Telegram chat ID is required"]}
                )
            transport: Transport = TelegramTransport(bot_token=token)

        elif channel == Channel.EMAIL:
            config = data.get("email_config")
            if not config:
                return cls.validation_failure(
                    {"email_config": ["Email configuration is required"]}
                )
            recipients = _clean_recipients(config.get("to"))
            if not recipients:
                return cls.validation_failure(
                    {"email_config": ["At least one email recipient is required"]}
                )
            transport = EmailTransport(
                from_email=config["from_email"],
                smtp_host=config["smtp_host"],
                smtp_port=config.get("smtp_port") or 587,
                smtp_username=config.get("smtp_username") or "",
                smtp_password=config.get("smtp_password") or "",
                **smtp_security(config.get("use_tls", True), config.get("use_ssl", False)),
            )

        else:
            return cls.validation_failure({"channel": ["Unsupported notification channel"]})

        limit_error = cls._recipient_limit_error(recipients)
        if limit_error is not None:
            return limit_error
        return ServiceResult.success((transport, recipients))

    @classmethod
    def _recipient_limit_error(cls, recipients: list[str]) -> ServiceResult | None:
        max_recipients = settings.NOTIFICATION_MAX_RECIPIENTS
        if len(recipients) > max_recipients:
            return cls.validation_failure(
                {"recipients": [f"Maximum {max_recipients} recipients per request"]}
            )
        return None


class SystemNotificationService(BaseService):
    """
    Send notifications with credentials from SystemNotificationSettings.

    Logs carry system_name "SYSTEM", no API key and count against no quota.
    """

    @classmethod
    def send(cls, data: dict[str, Any]) -> ServiceResult[dict]:
        """
        Gate on the channel's settings, then reuse the ingestion pipeline.

        Recipients default to the comma-separated lists in the settings when
        the request names none.
        """
        channel = data["channel"]
        system_settings = SystemNotificationSettings.load()

        gate = cls._channel_gate(system_settings, channel)
        if gate is not None:
            return gate

        if channel == Channel.TELEGRAM:
            recipients = _clean_recipients(data.get("telegram_chat_ids"))
            recipients = recipients or system_settings.default_chat_ids
            if not recipients:
                return cls.validation_failure(
                    {"telegram_chat_ids": ["At least one Telegram chat ID is required"]}
                )
            transport: Transport = TelegramTransport(
                bot_token=system_settings.telegram_bot_token
            )
        else:
            recipients = _clean_recipients(data.get("email_recipients"))
            recipients = recipients or system_settings.default_email_recipients
            if not recipients:
                return cls.validation_failure(
                    {"email_recipients": ["At least one email recipient is required"]}
                )
            transport = EmailTransport(
                from_email=system_settings.email_from,
                smtp_host=system_settings.email_smtp_host,
                smtp_port=system_settings.email_smtp_port,
                smtp_username=system_settings.email_smtp_username,
                smtp_password=system_settings.email_smtp_password,
                **smtp_security(system_settings.email_use_tls, system_settings.email_use_ssl),
            )

        limit_error = NotificationService._recipient_limit_error(recipients)
        if limit_error is not None:
            return limit_error

        return ServiceResult.success(
            NotificationService.dispatch(
                channel=channel,
                data=data,
                recipients=recipients,
                transport=transport,
                system_name=SYSTEM_SENDER_NAME,
            )
        )

    @classmethod
    def _channel_gate(
        cls, system_settings: SystemNotificationSettings, channel: str
    ) -> ServiceResult | None:
        if channel == Channel.TELEGRAM:
            if not system_settings.telegram_enabled:
                return cls._disabled("Telegram notifications are disabled in system settings")
            if not system_settings.telegram_configured:
                return cls._disabled("Telegram bot token is not configured")
        elif channel == Channel.EMAIL:
            if not system_settings.email_enabled:
                return cls._disabled("Email notifications are disabled in system settings")
            if not system_settings.email_configured:
                return cls._disabled("Email is not fully configured")
        else:
            return cls.validation_failure({"channel": ["Unsupported notification channel"]})
        return None

    @classmethod
    def _disabled(cls, message: str) -> ServiceResult:
        cls.get_logger().info(f"System notification rejected: {message}")
        return ServiceResult.failure(message, error_code=ErrorCode.CHANNEL_DISABLED)


class NotificationLogService(BaseService):
    """Read-only log queries. Clients only ever see their own key's logs."""

    @classmethod
    def logs_for_key(cls, api_key: ApiKey) -> QuerySet[NotificationLog]:
        """All logs of a key, newest first."""
        return NotificationLog.objects.filter(api_key_value=api_key.key).order_by(
            "-created_at"
        )

    @classmethod
    def batch_logs(cls, api_key: ApiKey, batch_id) -> QuerySet[NotificationLog]:
        """One batch of a key, oldest first."""
        return NotificationLog.objects.filter(
            api_key_value=api_key.key, batch_id=batch_id
        ).order_by("created_at")

    @classmethod
    def get_log(cls, api_key: ApiKey, log_id) -> ServiceResult[NotificationLog]:
        log = NotificationLog.objects.filter(pk=log_id, api_key_value=api_key.key).first()
        if log is None:
            return ServiceResult.failure(
                "Notification log not found", error_code=ErrorCode.NOT_FOUND
            )
        return ServiceResult.success(log)

    @classmethod
    def system_logs(cls) -> QuerySet[NotificationLog]:
        """Logs sent through system settings, newest first."""
        return NotificationLog.objects.filter(
            api_key__isnull=True, system_name=SYSTEM_SENDER_NAME
        ).order_by("-created_at")


# Settings fields an admin may change
UPDATABLE_SETTINGS = (
    "telegram_enabled",
    "telegram_bot_token",
    "telegram_chat_id",
    "email_enabled",
    "email_from",
    "email_to",
    "email_smtp_host",
    "email_smtp_port",
    "email_smtp_username",
    "email_smtp_password",
    "email_use_ssl",
    "email_use_tls",
)


class SystemSettingsService(BaseService):
    """Read and update the SystemNotificationSettings singleton."""

    @classmethod
    def get_settings(cls) -> SystemNotificationSettings:
        return SystemNotificationSettings.load()

    @classmethod
    def update_settings(cls, **data: Any) -> ServiceResult[SystemNotificationSettings]:
        """
        Apply every provided, non-null field.

        Omitted and null fields keep their stored value, so secrets can be
        left out of a request without being cleared.
        """
        changes = {
            name: value
            for name, value in data.items()
            if name in UPDATABLE_SETTINGS and value is not None
        }

        with cls.atomic():
            system_settings = SystemNotificationSettings.objects.select_for_update().get(
                pk=SystemNotificationSettings.load().pk
            )
            use_tls = changes.get("email_use_tls", system_settings.email_use_tls)
            use_ssl = changes.get("email_use_ssl", system_settings.email_use_ssl)
            if smtp_security(use_tls, use_ssl)["use_tls"] != use_tls:
                changes["email_use_tls"] = False

            for name, value in changes.items():
                setattr(system_settings, name, value)
            if changes:
                system_settings.save(update_fields=[*changes.keys(), "updated_at"])

        cls.get_logger().info(
            f"System notification settings updated: {sorted(changes)}",
        )
        return ServiceResult.success(system_settings)
