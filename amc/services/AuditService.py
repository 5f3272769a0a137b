# amc/services/AuditService.py
import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.forms.models import model_to_dict

from amc.models import AuditLog, SystemConfig

logger = logging.getLogger(__name__)


class AuditService:
    @staticmethod
    def snapshot(instance, exclude=None):
        """JSON-safe dict of a model row (dates, decimals and FKs flattened)."""
        if instance is None:
            return None
        data = model_to_dict(instance, exclude=exclude or [])
        for field in instance._meta.concrete_fields:
            if field.name in data or (exclude and field.name in exclude):
                continue
            data[field.name] = getattr(instance, field.attname)
        data.pop("password", None)
        return AuditService.clean(data)

    @staticmethod
    def clean(values):
        if values is None:
            return None
        return json.loads(json.dumps(values, cls=DjangoJSONEncoder))

    @staticmethod
    def is_enabled():
        row = SystemConfig.objects.filter(key="enable_audit_logging", is_active=True).first()
        return row is None or bool(row.typed_value)

    @staticmethod
    def record(table_name, record_id, action, old_values=None, new_values=None, user=None, request=None):
        """
        Append one audit row.

        ``request`` supplies the client IP and user agent captured by
        ``AuditContextMiddleware``; ``user`` defaults to ``request.user``.
        """
        if not AuditService.is_enabled():
            return None

        if user is None and request is not None:
            request_user = getattr(request, "user", None)
            if request_user is not None and request_user.is_authenticated:
                user = request_user

        entry = AuditLog.objects.create(
            table_name=table_name,
            record_id=str(record_id),
            action=action,
            old_values=AuditService.clean(old_values),
            new_values=AuditService.clean(new_values),
            user=user,
            ip_address=getattr(request, "audit_ip", None) if request is not None else None,
            user_agent=getattr(request, "audit_user_agent", None) if request is not None else None,
        )
        logger.debug("Audit %s %s#%s", action, table_name, record_id)
        return entry
