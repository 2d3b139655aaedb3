"""
API key models.

This module defines the credential that external systems present in the
X-API-Key header when submitting notifications.

Models:
    ApiKey: Opaque secret with a validity window and a monthly quota

Related files:
    - services.py: Quota guard, usage accounting, admin CRUD
    - tasks.py: Monthly usage reset

Quota semantics:
    - monthly_limit NULL or <= 0 means unlimited
    - current_usage counts recipients accepted this period
    - usage_reset_at is when current_usage next returns to 0
"""

from __future__ import annotations

from datetime import date

from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.managers import SoftDeleteManager
from core.model_mixins import SoftDeleteMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel

# Bytes of randomness in a generated key (43 url-safe characters)
API_KEY_BYTES = 32


class ApiKey(UUIDPrimaryKeyMixin, SoftDeleteMixin, BaseModel):
    """
    Credential issued to one external system.

    Fields:
        key: Opaque secret sent in the X-API-Key header
        system_name: Owning system, unique among non-deleted keys
        company_name / contact_email / contact_phone / description: Contact metadata
        is_active: Inactive keys are rejected
        start_date / end_date / never_expires: Validity window
        monthly_limit: Recipients allowed per period (NULL or <= 0 = unlimited)
        current_usage: Recipients accepted in the current period
        usage_reset_at: When the current period ends

    Usage:
        api_key.is_expired()           # validity window check for today
        api_key.has_reached_limit()    # quota check
    """

    key = models.CharField(
        max_length=64,
        unique=True,
        editable=False,
        help_text="Opaque secret presented in the X-API-Key header",
    )

    # ==========================================================================
    # Owner
    # ==========================================================================

    system_name = models.CharField(
        max_length=100,
        help_text="Name of the system using this key (unique among active keys)",
    )
    company_name = models.CharField(
        max_length=200,
        blank=True,
        default="",
        help_text="Company owning the system",
    )
    contact_email = models.EmailField(
        blank=True,
        default="",
        help_text="Technical contact email",
    )
    contact_phone = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Technical contact phone",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Free-form notes about the key",
    )

    # ==========================================================================
    # Validity
    # ==========================================================================

    is_active = models.BooleanField(
        default=True,
        help_text="Inactive keys are rejected by the quota guard",
    )
    start_date = models.DateField(
        null=True,
        blank=True,
        help_text="First day the key is valid (ignored when never_expires)",
    )
    end_date = models.DateField(
        null=True,
        blank=True,
        help_text="Last day the key is valid (required unless never_expires)",
    )
    never_expires = models.BooleanField(
        default=True,
        help_text="When true the validity window is ignored",
    )

    # ==========================================================================
    # Quota
    # ==========================================================================

    monthly_limit = models.IntegerField(
        null=True,
        blank=True,
        help_text="Recipients allowed per period; empty or <= 0 means unlimited",
    )
    current_usage = models.PositiveIntegerField(
        default=0,
        help_text="Recipients accepted in the current period",
    )
    usage_reset_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="When current_usage is next reset to zero",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        db_table = "api_keys"
        ordering = ["-created_at"]
        verbose_name = "API key"
        verbose_name_plural = "API keys"
        constraints = [
            models.UniqueConstraint(
                fields=["system_name"],
                condition=Q(is_deleted=False),
                name="api_keys_unique_active_system_name",
            ),
        ]

    def __str__(self) -> str:
        return f"ApiKey({self.system_name})"

    @property
    def masked_key(self) -> str:
        """Key with everything but the last four characters hidden."""
        if not self.key:
            return ""
        return f"{'*' * 8}{self.key[-4:]}"

    @property
    def is_unlimited(self) -> bool:
        return self.monthly_limit is None or self.monthly_limit <= 0

    def is_expired(self, today: date | None = None) -> bool:
        """
        Check the validity window against ``today`` (defaults to the current date).

        Both boundaries are inclusive: a key with end_date 2024-12-31 is
        still valid on 2024-12-31 and expired on 2025-01-01.
        """
        if self.never_expires:
            return False

        today = today or timezone.localdate()
        if self.end_date is not None and today > self.end_date:
            return True
        if self.start_date is not None and today < self.start_date:
            return True
        return False

    def has_reached_limit(self) -> bool:
        if self.is_unlimited:
            return False
        return self.current_usage >= self.monthly_limit

    @property
    def remaining_quota(self) -> int | None:
        if self.is_unlimited:
            return None
        return max(self.monthly_limit - self.current_usage, 0)

    @property
    def usage_percentage(self) -> float | None:
        if self.is_unlimited:
            return None
        return round(self.current_usage * 100.0 / self.monthly_limit, 2)
