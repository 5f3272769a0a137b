# amc/signals.py
import logging

from django.db.models.signals import post_migrate
from django.dispatch import receiver

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_CONFIG = [
    ("app_name", "AMC Market Fee Management System", "string", "application", "Application display name"),
    ("default_financial_year", "2025-26", "string", "application", "Financial year preselected in forms"),
    ("currency_symbol", "₹", "string", "application", "Currency symbol for amounts"),
    ("max_file_upload_size", "10485760", "number", "system", "Largest accepted import file in bytes"),
    ("enable_audit_logging", "true", "boolean", "security", "Write audit-log rows for mutations"),
    ("session_timeout", "3600", "number", "security", "Dashboard idle timeout in seconds"),
]


@receiver(post_migrate)
def create_default_system_config(sender, **kwargs):
    if sender.name != "amc":
        return

    from amc.models import SystemConfig

    created = 0
    for key, value, data_type, category, description in DEFAULT_SYSTEM_CONFIG:
        _, was_created = SystemConfig.objects.get_or_create(
            key=key,
            defaults={
                "value": value,
                "data_type": data_type,
                "category": category,
                "description": description,
            },
        )
        created += int(was_created)
    if created:
        logger.info("Seeded %s system config rows", created)
