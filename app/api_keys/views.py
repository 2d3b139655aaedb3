"""
Views for the API key endpoints.

ViewSets / Views:
    ApiKeyViewSet: Admin CRUD over API keys (platform admins only)
    UsageStatsView: Quota summary for the holder of an X-API-Key

Endpoints:
    GET    /api/v1/api-keys/                 - List keys (paginated, newest first)
    POST   /api/v1/api-keys/                 - Create key (secret generated)
    GET    /api/v1/api-keys/{id}/            - Get key
    PATCH  /api/v1/api-keys/{id}/            - Partial update
    PUT    /api/v1/api-keys/{id}/            - Partial update (null fields ignored)
    DELETE /api/v1/api-keys/{id}/            - Soft delete
    GET    /api/v1/api-keys/usage-stats/     - Usage for X-API-Key holder
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api_keys.serializers import (
    ApiKeySerializer,
    ApiKeyCreateSerializer,
    ApiKeyUpdateSerializer,
    UsageStatsSerializer,
)
from api_keys.services import API_KEY_HEADER, ApiKeyService, get_request_api_key
from authentication.permissions import IsPlatformAdmin

API_KEY_HEADER_PARAMETER = OpenApiParameter(
    name=API_KEY_HEADER,
    type=str,
    location=OpenApiParameter.HEADER,
    required=True,
    description="API key issued to the calling system",
)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_api_keys",
        summary="List API keys",
        description="Paginated list of non-deleted API keys, newest first.",
        responses={200: ApiKeySerializer(many=True)},
        tags=["API Keys - Admin"],
    ),
    retrieve=extend_schema(
        operation_id="get_api_key",
        summary="Get API key",
        responses={200: ApiKeySerializer, 404: OpenApiResponse(description="Not found")},
        tags=["API Keys - Admin"],
    ),
    create=extend_schema(
        operation_id="create_api_key",
        summary="Create API key",
        description=(
            "Create a key for an external system. The secret is generated by the "
            "server and the first usage period ends at the start of next month."
        ),
        request=ApiKeyCreateSerializer,
        responses={
            201: ApiKeySerializer,
            400: OpenApiResponse(description="Invalid validity window"),
            409: OpenApiResponse(description="System name already in use"),
        },
        tags=["API Keys - Admin"],
    ),
    partial_update=extend_schema(
        operation_id="update_api_key",
        summary="Update API key",
        description="Apply only the provided, non-null fields.",
        request=ApiKeyUpdateSerializer,
        responses={200: ApiKeySerializer},
        tags=["API Keys - Admin"],
    ),
    update=extend_schema(
        operation_id="replace_api_key",
        summary="Update API key (PUT)",
        description="Same semantics as PATCH: null fields are ignored.",
        request=ApiKeyUpdateSerializer,
        responses={200: ApiKeySerializer},
        tags=["API Keys - Admin"],
    ),
    destroy=extend_schema(
        operation_id="delete_api_key",
        summary="Delete API key",
        description="Soft delete. The key stops working; its logs are kept.",
        responses={204: None, 404: OpenApiResponse(description="Not found")},
        tags=["API Keys - Admin"],
    ),
)
class ApiKeyViewSet(viewsets.GenericViewSet):
    """
    Admin CRUD over API keys.

    Permissions:
    - Authenticated platform owner or admin
    """

    permission_classes = [IsAuthenticated, IsPlatformAdmin]
    serializer_class = ApiKeySerializer
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def get_queryset(self):
        return ApiKeyService.list_api_keys()

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        serializer = ApiKeySerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request):
        serializer = ApiKeyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ApiKeyService.create_api_key(**serializer.validated_data)
        if not result.success:
            return Response(result.to_response(), status=result.status_code)
        return Response(ApiKeySerializer(result.data).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        result = ApiKeyService.get_api_key(pk)
        if not result.success:
            return Response(result.to_response(), status=result.status_code)
        return Response(ApiKeySerializer(result.data).data)

    def partial_update(self, request, pk=None):
        serializer = ApiKeyUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = ApiKeyService.update_api_key(pk, **serializer.validated_data)
        if not result.success:
            return Response(result.to_response(), status=result.status_code)
        return Response(ApiKeySerializer(result.data).data)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def destroy(self, request, pk=None):
        result = ApiKeyService.delete_api_key(pk)
        if not result.success:
            return Response(result.to_response(), status=result.status_code)
        return Response(status=status.HTTP_204_NO_CONTENT)


class UsageStatsView(APIView):
    """
    Quota summary for the system calling with X-API-Key.

    No user authentication: the key itself identifies the caller.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        operation_id="get_api_key_usage_stats",
        summary="Get usage statistics",
        description=(
            "Current usage, limit and remaining quota for the calling key. "
            "Works for inactive or expired keys so callers can diagnose rejections."
        ),
        parameters=[API_KEY_HEADER_PARAMETER],
        responses={
            200: UsageStatsSerializer,
            404: OpenApiResponse(description="Unknown API key"),
        },
        tags=["API Keys - Client"],
    )
    def get(self, request):
        result = ApiKeyService.get_usage_stats(get_request_api_key(request))
        if not result.success:
            return Response(result.to_response(), status=result.status_code)
        return Response(UsageStatsSerializer(result.data).data)
