"""Django app configuration for API keys."""

from django.apps import AppConfig


class ApiKeysConfig(AppConfig):
    """Configuration for the api_keys app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "api_keys"
    verbose_name = "API Keys"
