"""
Notification dispatch models.

This module defines the persistent side of the dispatch pipeline:
- NotificationLog: One row per (ingestion call, recipient) with delivery status
- SystemNotificationSettings: Singleton holding transport credentials for
  system notifications

Design Decisions:
    - NotificationLog uses a UUID PK: log ids are returned to API clients
    - status is a django-fsm field; transitions are the only writers
    - version enables optimistic locking (see notifications.locks)
    - api_key uses SET_NULL plus value/system_name snapshots so logs stay
      readable after the key is retired
    - Logs are never physically deleted (SoftDeleteMixin)

State Flow:
    PENDING -> PROCESSING -> SENT
                          -> FAILED
    PENDING -> FAILED (conflict or stale sweep)

Usage:
    from notifications.models import NotificationLog, NotificationStatus

    log = NotificationLog.objects.get(pk=log_id)
    log.start_processing()
    save_with_version(log, ["status"])
"""

from __future__ import annotations

from django.db import models
from django.db.models import F
from django.utils import timezone
from django_fsm import FSMField, transition

from core.helpers import split_csv
from core.managers import SoftDeleteManager
from core.model_mixins import SoftDeleteMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel


# =============================================================================
# Enums
# =============================================================================


class Channel(models.TextChoices):
    """Delivery medium. Each channel has its own queue and sender."""

    EMAIL = "EMAIL", "Email"
    TELEGRAM = "TELEGRAM", "Telegram"


class NotificationType(models.TextChoices):
    """Informational classification shown in the rendered message."""

    ALERT = "ALERT", "Alert"
    INFO = "INFO", "Info"
    WARNING = "WARNING", "Warning"
    ERROR = "ERROR", "Error"
    SUCCESS = "SUCCESS", "Success"


class NotificationStatus(models.TextChoices):
    """
    Delivery status.

    PENDING and PROCESSING are non-terminal; SENT and FAILED are terminal.
    """

    PENDING = "PENDING", "Pending"
    PROCESSING = "PROCESSING", "Processing"
    SENT = "SENT", "Sent"
    FAILED = "FAILED", "Failed"


TERMINAL_STATUSES = frozenset({NotificationStatus.SENT, NotificationStatus.FAILED})

# system_name recorded on logs sent through SystemNotificationSettings
SYSTEM_SENDER_NAME = "SYSTEM"


# =============================================================================
# Notification Log
# =============================================================================


class NotificationLog(UUIDPrimaryKeyMixin, SoftDeleteMixin, BaseModel):
    """
    Durable record of one delivery to one recipient.

    Created PENDING by the ingestion service and mutated only by the
    matching delivery worker (or the stale-processing sweep).

    Fields:
        batch_id: Shared by every row from one ingestion call
        api_key: Owning key (NULL for system notifications)
        api_key_value / system_name: Snapshots taken at ingestion
        channel / notification_type: What and how
        status: FSM-managed delivery status
        recipient / subject / message: Content
        response: Provider response on success
        error_message: Failure reason
        sent_at: When the provider accepted the message
        retry_count: Number of failed attempts
        version: Optimistic locking counter
    """

    batch_id = models.UUIDField(
        db_index=True,
        help_text="Groups all rows created by one ingestion call",
    )

    # ==========================================================================
    # Owner
    # ==========================================================================

    api_key = models.ForeignKey(
        "api_keys.ApiKey",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notification_logs",
        help_text="Key that submitted the notification (NULL for system notifications)",
    )
    api_key_value = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
        help_text="Key value at ingestion time",
    )
    system_name = models.CharField(
        max_length=100,
        help_text="Sending system at ingestion time",
    )

    # ==========================================================================
    # Content
    # ==========================================================================

    channel = models.CharField(
        max_length=20,
        choices=Channel.choices,
        db_index=True,
        help_text="Delivery channel",
    )
    notification_type = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.INFO,
        help_text="Informational classification",
    )
    recipient = models.CharField(
        max_length=255,
        help_text="Email address or chat id",
    )
    subject = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Subject line (email) or heading (chat)",
    )
    message = models.TextField(
        help_text="Message body",
    )

    # ==========================================================================
    # Delivery state
    # ==========================================================================

    status = FSMField(
        default=NotificationStatus.PENDING,
        choices=NotificationStatus.choices,
        db_index=True,
        protected=False,
        help_text="Delivery status (managed by FSM transitions)",
    )
    response = models.TextField(
        blank=True,
        default="",
        help_text="Provider response on success",
    )
    error_message = models.TextField(
        blank=True,
        default="",
        help_text="Failure reason",
    )
    sent_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the provider accepted the message",
    )
    retry_count = models.PositiveIntegerField(
        default=0,
        help_text="Number of failed delivery attempts",
    )

    # ==========================================================================
    # Concurrency Control
    # ==========================================================================

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each write",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        db_table = "notification_logs"
        ordering = ["-created_at"]
        verbose_name = "notification log"
        verbose_name_plural = "notification logs"
        indexes = [
            models.Index(fields=["api_key_value", "-created_at"], name="notif_log_key_idx"),
            models.Index(fields=["channel"], name="notif_log_channel_idx"),
            models.Index(fields=["status", "updated_at"], name="notif_log_status_idx"),
            models.Index(fields=["batch_id", "created_at"], name="notif_log_batch_idx"),
        ]

    def __str__(self) -> str:
        return f"NotificationLog({self.id}, {self.channel}, {self.status})"

    def save(self, *args, **kwargs):
        """
        Save with version auto-increment for optimistic locking.

        Plain saves (admin edits) bump the version so an in-flight worker
        holding the old version sees a conflict instead of overwriting.
        """
        is_update = not self._state.adding and not kwargs.get("force_insert", False)
        if is_update:
            self.version = F("version") + 1
            update_fields = kwargs.get("update_fields")
            if update_fields is not None and "version" not in update_fields:
                kwargs["update_fields"] = [*update_fields, "version"]
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=NotificationStatus.PENDING,
        target=NotificationStatus.PROCESSING,
    )
    def start_processing(self):
        """
        Claim the row for delivery.

        Transition: PENDING -> PROCESSING
        """

    @transition(
        field=status,
        source=NotificationStatus.PROCESSING,
        target=NotificationStatus.SENT,
    )
    def mark_sent(self, response: str = ""):
        """
        Record provider acceptance.

        Transition: PROCESSING -> SENT
        """
        self.response = response
        self.error_message = ""
        self.sent_at = timezone.now()

    @transition(
        field=status,
        source=[NotificationStatus.PENDING, NotificationStatus.PROCESSING],
        target=NotificationStatus.FAILED,
    )
    def mark_failed(self, error_message: str):
        """
        Record a failed attempt.

        Transition: PENDING/PROCESSING -> FAILED

        retry_count counts failed attempts; nothing re-publishes the row.
        """
        self.error_message = error_message
        self.retry_count += 1


# Fields written by each transition, used for version-checked updates
TRANSITION_FIELDS = {
    "start_processing": ["status"],
    "mark_sent": ["status", "response", "error_message", "sent_at"],
    "mark_failed": ["status", "error_message", "retry_count"],
}


# =============================================================================
# System Notification Settings
# =============================================================================


class SystemNotificationSettings(BaseModel):
    """
    Singleton holding transport credentials for system notifications.

    System notifications are sent by platform admins rather than by API key
    holders, so their credentials live here instead of in the request.

    Usage:
        settings = SystemNotificationSettings.load()
        if settings.telegram_ready:
            ...
    """

    DEFAULT_KEY = "DEFAULT"

    settings_key = models.CharField(
        max_length=50,
        unique=True,
        default=DEFAULT_KEY,
        help_text="Singleton key (always DEFAULT)",
    )

    # ==========================================================================
    # Telegram
    # ==========================================================================

    telegram_enabled = models.BooleanField(
        default=False,
        help_text="Allow system notifications over Telegram",
    )
    telegram_bot_token = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Bot token used for system notifications",
    )
    telegram_chat_id = models.CharField(
        max_length=500,
        blank=True,
        default="",
        help_text="Default chat id(s), comma-separated",
    )

    # ==========================================================================
    # Email
    # ==========================================================================

    email_enabled = models.BooleanField(
        default=False,
        help_text="Allow system notifications over email",
    )
    email_from = models.EmailField(
        blank=True,
        default="",
        help_text="Sender address",
    )
    email_to = models.TextField(
        blank=True,
        default="",
        help_text="Default recipient address(es), comma-separated",
    )
    email_smtp_host = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="SMTP host",
    )
    email_smtp_port = models.PositiveIntegerField(
        null=True,
        blank=True,
        default=587,
        help_text="SMTP port",
    )
    email_smtp_username = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="SMTP username",
    )
    email_smtp_password = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="SMTP password",
    )
    email_use_ssl = models.BooleanField(
        default=False,
        help_text="Use implicit TLS (SMTPS)",
    )
    email_use_tls = models.BooleanField(
        default=True,
        help_text="Use STARTTLS",
    )

    class Meta:
        db_table = "system_notification_settings"
        verbose_name = "system notification settings"
        verbose_name_plural = "system notification settings"

    def __str__(self) -> str:
        return f"SystemNotificationSettings({self.settings_key})"

    @classmethod
    def load(cls) -> SystemNotificationSettings:
        """Get or create the singleton row."""
        instance, _ = cls.objects.get_or_create(settings_key=cls.DEFAULT_KEY)
        return instance

    @property
    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token)

    @property
    def email_configured(self) -> bool:
        return bool(self.email_from and self.email_smtp_host and self.email_smtp_port)

    @property
    def default_chat_ids(self) -> list[str]:
        return split_csv(self.telegram_chat_id)

    @property
    def default_email_recipients(self) -> list[str]:
        return split_csv(self.email_to)
