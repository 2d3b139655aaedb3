import uuid

import django.db.models.deletion
import django_fsm
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("api_keys", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="SystemNotificationSettings",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "settings_key",
                    models.CharField(
                        default="DEFAULT",
                        help_text="Singleton key (always DEFAULT)",
                        max_length=50,
                        unique=True,
                    ),
                ),
                (
                    "telegram_enabled",
                    models.BooleanField(
                        default=False,
                        help_text="Allow system notifications over Telegram",
                    ),
                ),
                (
                    "telegram_bot_token",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Bot token used for system notifications",
                        max_length=255,
                    ),
                ),
                (
                    "telegram_chat_id",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Default chat id(s), comma-separated",
                        max_length=500,
                    ),
                ),
                (
                    "email_enabled",
                    models.BooleanField(
                        default=False,
                        help_text="Allow system notifications over email",
                    ),
                ),
                (
                    "email_from",
                    models.EmailField(
                        blank=True,
                        default="",
                        help_text="Sender address",
                        max_length=254,
                    ),
                ),
                (
                    "email_to",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Default recipient address(es), comma-separated",
                    ),
                ),
                (
                    "email_smtp_host",
                    models.CharField(
                        blank=True, default="", help_text="SMTP host", max_length=255
                    ),
                ),
                (
                    "email_smtp_port",
                    models.PositiveIntegerField(
                        blank=True, default=587, help_text="SMTP port", null=True
                    ),
                ),
                (
                    "email_smtp_username",
                    models.CharField(
                        blank=True, default="", help_text="SMTP username", max_length=255
                    ),
                ),
                (
                    "email_smtp_password",
                    models.CharField(
                        blank=True, default="", help_text="SMTP password", max_length=255
                    ),
                ),
                (
                    "email_use_ssl",
                    models.BooleanField(
                        default=False, help_text="Use implicit TLS (SMTPS)"
                    ),
                ),
                (
                    "email_use_tls",
                    models.BooleanField(default=True, help_text="Use STARTTLS"),
                ),
            ],
            options={
                "verbose_name": "system notification settings",
                "verbose_name_plural": "system notification settings",
                "db_table": "system_notification_settings",
            },
        ),
        migrations.CreateModel(
            name="NotificationLog",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "is_deleted",
                    models.BooleanField(
                        db_index=True,
                        default=False,
                        help_text="Whether this record has been soft deleted",
                    ),
                ),
                (
                    "deleted_at",
                    models.DateTimeField(
                        blank=True,
                        null=True,
                        help_text="Timestamp when this record was soft deleted",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "batch_id",
                    models.UUIDField(
                        db_index=True,
                        help_text="Groups all rows created by one ingestion call",
                    ),
                ),
                (
                    "api_key_value",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        default="",
                        help_text="Key value at ingestion time",
                        max_length=64,
                    ),
                ),
                (
                    "system_name",
                    models.CharField(
                        help_text="Sending system at ingestion time", max_length=100
                    ),
                ),
                (
                    "channel",
                    models.CharField(
                        choices=[("EMAIL", "Email"), ("TELEGRAM", "Telegram")],
                        db_index=True,
                        help_text="Delivery channel",
                        max_length=20,
                    ),
                ),
                (
                    "notification_type",
                    models.CharField(
                        choices=[
                            ("ALERT", "Alert"),
                            ("INFO", "Info"),
                            ("WARNING", "Warning"),
                            ("ERROR", "Error"),
                            ("SUCCESS", "Success"),
                        ],
                        default="INFO",
                        help_text="Informational classification",
                        max_length=20,
                    ),
                ),
                (
                    "recipient",
                    models.CharField(help_text="Email address or chat id", max_length=255),
                ),
                (
                    "subject",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Subject line (email) or heading (chat)",
                        max_length=255,
                    ),
                ),
                ("message", models.TextField(help_text="Message body")),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("PROCESSING", "Processing"),
                            ("SENT", "Sent"),
                            ("FAILED", "Failed"),
                        ],
                        db_index=True,
                        default="PENDING",
                        help_text="Delivery status (managed by FSM transitions)",
                        max_length=50,
                    ),
                ),
                (
                    "response",
                    models.TextField(
                        blank=True, default="", help_text="Provider response on success"
                    ),
                ),
                (
                    "error_message",
                    models.TextField(blank=True, default="", help_text="Failure reason"),
                ),
                (
                    "sent_at",
                    models.DateTimeField(
                        blank=True,
                        null=True,
                        help_text="When the provider accepted the message",
                    ),
                ),
                (
                    "retry_count",
                    models.PositiveIntegerField(
                        default=0, help_text="Number of failed delivery attempts"
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Version for optimistic locking - incremented on each write",
                    ),
                ),
                (
                    "api_key",
                    models.ForeignKey(
                        blank=True,
                        help_text="Key that submitted the notification (NULL for system notifications)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="notification_logs",
                        to="api_keys.apikey",
                    ),
                ),
            ],
            options={
                "verbose_name": "notification log",
                "verbose_name_plural": "notification logs",
                "db_table": "notification_logs",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["api_key_value", "-created_at"], name="notif_log_key_idx"
                    ),
                    models.Index(fields=["channel"], name="notif_log_channel_idx"),
                    models.Index(
                        fields=["status", "updated_at"], name="notif_log_status_idx"
                    ),
                    models.Index(
                        fields=["batch_id", "created_at"], name="notif_log_batch_idx"
                    ),
                ],
            },
        ),
    ]
