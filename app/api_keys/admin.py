"""Django admin configuration for API keys."""

from django.contrib import admin

from api_keys.models import ApiKey


@admin.register(ApiKey)
class ApiKeyAdmin(admin.ModelAdmin):
    """
    Admin for API keys.

    Shows soft-deleted keys too (via all_objects) so support staff can
    trace logs that reference a retired key.
    """

    list_display = (
        "system_name",
        "company_name",
        "is_active",
        "never_expires",
        "end_date",
        "current_usage",
        "monthly_limit",
        "is_deleted",
        "created_at",
    )
    list_filter = ("is_active", "never_expires", "is_deleted")
    search_fields = ("system_name", "company_name", "contact_email")
    readonly_fields = (
        "id",
        "key",
        "current_usage",
        "usage_reset_at",
        "created_at",
        "updated_at",
        "deleted_at",
    )
    ordering = ("-created_at",)

    def get_queryset(self, request):
        return ApiKey.all_objects.all()
