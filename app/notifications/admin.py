"""
Django admin configuration for notification models.

Registers:
- NotificationLog (read-only: rows are written only by the pipeline)
- SystemNotificationSettings
"""

from django.contrib import admin

from notifications.models import NotificationLog, SystemNotificationSettings


@admin.register(NotificationLog)
class NotificationLogAdmin(admin.ModelAdmin):
    """
    Admin configuration for NotificationLog.

    Provides a read-only view of deliveries for debugging and support.
    """

    list_display = [
        "id",
        "system_name",
        "channel",
        "notification_type",
        "status",
        "recipient",
        "retry_count",
        "created_at",
    ]
    list_filter = ["status", "channel", "notification_type", "created_at"]
    search_fields = ["id", "batch_id", "recipient", "system_name"]
    ordering = ["-created_at"]
    readonly_fields = [
        field.name for field in NotificationLog._meta.fields
    ]

    def get_queryset(self, request):
        return NotificationLog.all_objects.all()

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SystemNotificationSettings)
class SystemNotificationSettingsAdmin(admin.ModelAdmin):
    list_display = ["settings_key", "telegram_enabled", "email_enabled", "updated_at"]
    readonly_fields = ["settings_key", "created_at", "updated_at"]
    fieldsets = (
        (None, {"fields": ("settings_key",)}),
        (
            "Telegram",
            {"fields": ("telegram_enabled", "telegram_bot_token", "telegram_chat_id")},
        ),
        (
            "Email",
            {
                "fields": (
                    "email_enabled",
                    "email_from",
                    "email_to",
                    "email_smtp_host",
                    "email_smtp_port",
                    "email_smtp_username",
                    "email_smtp_password",
                    "email_use_ssl",
                    "email_use_tls",
                ),
            },
        ),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )

    def has_add_permission(self, request):
        return not SystemNotificationSettings.objects.exists()
