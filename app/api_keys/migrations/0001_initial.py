import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ApiKey",
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
                    "key",
                    models.CharField(
                        editable=False,
                        help_text="Opaque secret presented in the X-API-Key header",
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "system_name",
                    models.CharField(
                        help_text="Name of the system using this key (unique among active keys)",
                        max_length=100,
                    ),
                ),
                (
                    "company_name",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Company owning the system",
                        max_length=200,
                    ),
                ),
                (
                    "contact_email",
                    models.EmailField(
                        blank=True,
                        default="",
                        help_text="Technical contact email",
                        max_length=254,
                    ),
                ),
                (
                    "contact_phone",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Technical contact phone",
                        max_length=50,
                    ),
                ),
                (
                    "description",
                    models.TextField(
                        blank=True, default="", help_text="Free-form notes about the key"
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Inactive keys are rejected by the quota guard",
                    ),
                ),
                (
                    "start_date",
                    models.DateField(
                        blank=True,
                        null=True,
                        help_text="First day the key is valid (ignored when never_expires)",
                    ),
                ),
                (
                    "end_date",
                    models.DateField(
                        blank=True,
                        null=True,
                        help_text="Last day the key is valid (required unless never_expires)",
                    ),
                ),
                (
                    "never_expires",
                    models.BooleanField(
                        default=True,
                        help_text="When true the validity window is ignored",
                    ),
                ),
                (
                    "monthly_limit",
                    models.IntegerField(
                        blank=True,
                        null=True,
                        help_text="Recipients allowed per period; empty or <= 0 means unlimited",
                    ),
                ),
                (
                    "current_usage",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Recipients accepted in the current period",
                    ),
                ),
                (
                    "usage_reset_at",
                    models.DateTimeField(
                        blank=True,
                        db_index=True,
                        null=True,
                        help_text="When current_usage is next reset to zero",
                    ),
                ),
            ],
            options={
                "verbose_name": "API key",
                "verbose_name_plural": "API keys",
                "db_table": "api_keys",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_deleted", False)),
                        fields=("system_name",),
                        name="api_keys_unique_active_system_name",
                    )
                ],
            },
        ),
    ]
