"""
Factory Boy factories for notification models.

Usage:
    from notifications.tests.factories import NotificationLogFactory

    log = NotificationLogFactory()                                  # PENDING Telegram log
    email_log = NotificationLogFactory(channel=Channel.EMAIL, recipient="ops@example.com")
    sent = NotificationLogFactory(status=NotificationStatus.SENT)
    system_log = NotificationLogFactory(api_key=None, system_name="SYSTEM")
"""

import uuid

import factory

from api_keys.tests.factories import ApiKeyFactory
from notifications.models import (
    Channel,
    NotificationLog,
    NotificationStatus,
    NotificationType,
    SystemNotificationSettings,
)


class NotificationLogFactory(factory.django.DjangoModelFactory):
    """
    Factory for NotificationLog model.

    api_key_value and system_name follow the owning key, and are blank /
    "SYSTEM" style values when api_key is None.
    """

    class Meta:
        model = NotificationLog

    batch_id = factory.LazyFunction(uuid.uuid4)
    api_key = factory.SubFactory(ApiKeyFactory)
    api_key_value = factory.LazyAttribute(lambda o: o.api_key.key if o.api_key else "")
    system_name = factory.LazyAttribute(
        lambda o: o.api_key.system_name if o.api_key else "SYSTEM"
    )
    channel = Channel.TELEGRAM
    notification_type = NotificationType.INFO
    recipient = factory.Sequence(lambda n: str(100000 + n))
    subject = "Disk usage"
    message = factory.Faker("sentence")
    status = NotificationStatus.PENDING


class SystemNotificationSettingsFactory(factory.django.DjangoModelFactory):
    """Singleton settings with both channels enabled and configured."""

    class Meta:
        model = SystemNotificationSettings
        django_get_or_create = ("settings_key",)

    settings_key = SystemNotificationSettings.DEFAULT_KEY
    telegram_enabled = True
    telegram_bot_token = "123456:system-token"
    telegram_chat_id = "-1001,-1002"
    email_enabled = True
    email_from = "alerts@example.com"
    email_to = "ops@example.com, oncall@example.com"
    email_smtp_host = "smtp.example.com"
    email_smtp_port = 587
    email_smtp_username = "alerts"
    email_smtp_password = "smtp-secret"
    email_use_tls = True
    email_use_ssl = False
