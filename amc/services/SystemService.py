# amc/services/SystemService.py
import logging
import platform
import time
from datetime import timedelta

import django
from django.conf import settings
from django.db import DatabaseError, connection
from django.utils import timezone

from amc.exceptions import ServiceUnavailable
from amc.models import AuditLog, Checkpost, Committee, Receipt, SystemConfig, Target, User
from amc.services.AuditService import AuditService

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


def uptime_seconds():
    return round(time.monotonic() - STARTED_AT, 2)


class SystemService:
    @staticmethod
    def check_database():
        """Round-trip to the database; returns the latency in milliseconds."""
        started = time.monotonic()
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
        except DatabaseError as exc:
            logger.error("Database health check failed: %s", exc)
            raise ServiceUnavailable(f"Database health check failed: {exc}")
        return round((time.monotonic() - started) * 1000, 2)

    @staticmethod
    def health(detailed=False):
        latency = SystemService.check_database()
        data = {
            "status": "healthy",
            "timestamp": timezone.now().isoformat(),
            "database": "connected",
            "uptime": uptime_seconds(),
            "version": settings.AMC_VERSION,
        }
        if detailed:
            data["details"] = {
                "database": {
                    "vendor": connection.vendor,
                    "responseTimeMs": latency,
                },
                "counts": {
                    "committees": Committee.objects.active().count(),
                    "receipts": Receipt.objects.active().count(),
                    "users": User.objects.active().count(),
                },
                "runtime": {
                    "python": platform.python_version(),
                    "django": django.get_version(),
                    "platform": platform.platform(),
                },
                "debug": settings.DEBUG,
            }
        return data

    @staticmethod
    def stats():
        since = timezone.now() - timedelta(hours=24)
        return {
            "database": {
                "committees": Committee.objects.active().count(),
                "checkposts": Checkpost.objects.active().count(),
                "receipts": Receipt.objects.active().count(),
                "targets": Target.objects.active().count(),
                "users": User.objects.active().count(),
                "auditLogs": AuditLog.objects.count(),
            },
            "recentActivity": {
                "receiptsLast24h": Receipt.objects.active().filter(created_at__gte=since).count(),
                "auditEventsLast24h": AuditLog.objects.filter(timestamp__gte=since).count(),
                "loginsLast24h": AuditLog.objects.filter(
                    action=AuditLog.LOGIN, timestamp__gte=since
                ).count(),
            },
            "system": {
                "uptime": uptime_seconds(),
                "version": settings.AMC_VERSION,
                "python": platform.python_version(),
                "django": django.get_version(),
                "databaseVendor": connection.vendor,
                "timeZone": settings.TIME_ZONE,
            },
        }

    @staticmethod
    def backup(user, include_audit_logs=False):
        """Every active row of every table, plus export metadata."""

        def rows(queryset, exclude=None):
            return [AuditService.snapshot(obj, exclude=exclude) for obj in queryset]

        targets = Target.objects.active().prefetch_related("monthly_targets", "checkpost_targets")
        data = {
            "committees": rows(Committee.objects.active().order_by("id")),
            "checkposts": rows(Checkpost.objects.active().order_by("id")),
            "receipts": rows(Receipt.objects.active().order_by("id")),
            "targets": [
                dict(
                    AuditService.snapshot(target),
                    monthlyTargets=[
                        {"month": row.month, "amount": str(row.amount)}
                        for row in target.monthly_targets.all()
                    ],
                    checkpostTargets=[
                        {"checkpostId": row.checkpost_id, "month": row.month, "amount": str(row.amount)}
                        for row in target.checkpost_targets.all()
                    ],
                )
                for target in targets.order_by("id")
            ],
            "users": rows(User.objects.active().order_by("id")),
            "systemConfig": rows(SystemConfig.objects.filter(is_active=True)),
        }
        if include_audit_logs:
            data["auditLogs"] = rows(AuditLog.objects.order_by("id"))

        logger.info(
            "Backup generated by %s (audit logs: %s)", user.email if user else "anonymous", include_audit_logs
        )
        return {
            "metadata": {
                "createdBy": user.email if user else None,
                "createdAt": timezone.now().isoformat(),
                "version": settings.AMC_VERSION,
                "includeAuditLogs": include_audit_logs,
                "counts": {table: len(values) for table, values in data.items()},
            },
            "data": data,
        }

    @staticmethod
    def config():
        return [
            {
                "key": row.key,
                "value": row.typed_value,
                "dataType": row.data_type,
                "category": row.category,
                "description": row.description,
            }
            for row in SystemConfig.objects.filter(is_active=True)
        ]
