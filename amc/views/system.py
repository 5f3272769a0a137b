# amc/views/system.py
import json

from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponse
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import generics
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from amc.filters import AuditLogFilter, bool_param, int_param
from amc.models import AuditLog
from amc.permissions import IsAdmin
from amc.responses import success_response
from amc.serializers.AuditLogSerializer import AuditLogSerializer
from amc.services.export_service import export_filename
from amc.services.NotificationService import DEFAULT_LIMIT, NotificationService
from amc.services.SystemService import SystemService


class HealthView(APIView):
    authentication_classes = []

    @swagger_auto_schema(
        operation_summary="Health check",
        manual_parameters=[openapi.Parameter("detailed", openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN)],
        responses={200: "Healthy", 503: "Database unreachable"},
    )
    def get(self, request):
        data = SystemService.health(detailed=bool_param(request.query_params, "detailed"))
        return success_response(data)


class SystemStatsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return success_response(SystemService.stats())


class SystemBackupView(APIView):
    permission_classes = [IsAdmin]

    @swagger_auto_schema(
        operation_summary="Download a JSON backup",
        manual_parameters=[
            openapi.Parameter("format", openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=["json"]),
            openapi.Parameter("includeAuditLogs", openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN),
        ],
    )
    def get(self, request):
        params = request.query_params
        backup_format = (params.get("format") or "json").lower()
        if backup_format != "json":
            raise ValidationError({"format": "Only json backups are supported."})

        payload = SystemService.backup(
            request.user, include_audit_logs=bool_param(params, "includeAuditLogs")
        )
        response = HttpResponse(
            json.dumps(payload, cls=DjangoJSONEncoder, indent=2),
            content_type="application/json",
        )
        response["Content-Disposition"] = f'attachment; filename="{export_filename("amc-backup", "json")}"'
        return response


class SystemConfigView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return success_response(SystemService.config())


class AuditLogListView(generics.ListAPIView):
    """GET /api/audit-logs -> newest first, filterable by table, record, action and user."""

    serializer_class = AuditLogSerializer
    filterset_class = AuditLogFilter
    permission_classes = [IsAdmin]

    def get_queryset(self):
        return AuditLog.objects.select_related("user").order_by("-timestamp", "-id")


class NotificationListView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Notifications",
        manual_parameters=[
            openapi.Parameter("limit", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
            openapi.Parameter("financialYear", openapi.IN_QUERY, type=openapi.TYPE_STRING),
        ],
    )
    def get(self, request):
        params = request.query_params
        limit = min(int_param(params, "limit") or DEFAULT_LIMIT, 100)
        data = NotificationService.build(params.get("financialYear"), limit=limit)
        return success_response(data)
