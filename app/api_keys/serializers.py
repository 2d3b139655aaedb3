"""
Serializers for the API key endpoints.

Serializers:
    ApiKeySerializer: Read-only admin view of a key (includes the secret)
    ApiKeyCreateSerializer: Input for creating a key
    ApiKeyUpdateSerializer: Partial update input (all fields optional)
    UsageStatsSerializer: Quota summary for key holders

Usage:
    serializer = ApiKeyCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = ApiKeyService.create_api_key(**serializer.validated_data)
"""

from __future__ import annotations

from rest_framework import serializers

from api_keys.models import ApiKey


class ApiKeySerializer(serializers.ModelSerializer):
    """
    Admin representation of an API key.

    The full secret is included: only platform admins can reach the
    endpoints that use this serializer.
    """

    is_expired = serializers.SerializerMethodField()
    is_unlimited = serializers.BooleanField(read_only=True)

    class Meta:
        model = ApiKey
        fields = [
            "id",
            "key",
            "system_name",
            "company_name",
            "contact_email",
            "contact_phone",
            "description",
            "is_active",
            "start_date",
            "end_date",
            "never_expires",
            "monthly_limit",
            "current_usage",
            "usage_reset_at",
            "is_expired",
            "is_unlimited",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_is_expired(self, obj: ApiKey) -> bool:
        return obj.is_expired()


class ApiKeyCreateSerializer(serializers.Serializer):
    """Input for POST /api-keys/. Window rules are checked by the service."""

    system_name = serializers.CharField(max_length=100)
    company_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    contact_email = serializers.EmailField(required=False, allow_blank=True)
    contact_phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    never_expires = serializers.BooleanField(required=False, default=True)
    monthly_limit = serializers.IntegerField(required=False, allow_null=True)


class ApiKeyUpdateSerializer(serializers.Serializer):
    """
    Input for PATCH/PUT /api-keys/{id}/.

    Every field is optional. Null values are ignored, so clients can send
    a full document with only some fields filled in.
    """

    system_name = serializers.CharField(max_length=100, required=False, allow_null=True)
    company_name = serializers.CharField(
        max_length=200, required=False, allow_blank=True, allow_null=True
    )
    contact_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    contact_phone = serializers.CharField(
        max_length=50, required=False, allow_blank=True, allow_null=True
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(required=False, allow_null=True)
    start_date = serializers.DateField(required=False, allow_null=True)
    end_date = serializers.DateField(required=False, allow_null=True)
    never_expires = serializers.BooleanField(required=False, allow_null=True)
    monthly_limit = serializers.IntegerField(required=False, allow_null=True)


class UsageStatsSerializer(serializers.Serializer):
    """Quota summary returned by GET /api-keys/usage-stats/."""

    current_usage = serializers.IntegerField()
    monthly_limit = serializers.IntegerField(allow_null=True)
    remaining_quota = serializers.IntegerField(allow_null=True)
    usage_percentage = serializers.FloatField(allow_null=True)
    is_unlimited = serializers.BooleanField()
    is_expired = serializers.BooleanField()
    usage_reset_at = serializers.DateTimeField(allow_null=True)
