# amc/services/NotificationService.py
import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from amc.models import Receipt, Target
from amc.services.financial_year import validate_financial_year
from amc.services.ReportService import ReportService, percentage, scale_amount

logger = logging.getLogger(__name__)

LOW_ACHIEVEMENT_THRESHOLD = 50
DEFAULT_LIMIT = 20


class NotificationService:
    """
    Notifications are derived on every call from recent receipts, target
    changes and committee progress; nothing is stored, so nothing is ever
    "read" and ``unreadCount`` is the number of items returned.
    """

    @staticmethod
    def build(financial_year=None, limit=DEFAULT_LIMIT):
        financial_year = validate_financial_year(financial_year or settings.AMC_DEFAULT_FINANCIAL_YEAR)
        now = timezone.now()
        items = []

        recent_receipts = Receipt.objects.active().filter(created_at__gte=now - timedelta(hours=24))
        recent_count = recent_receipts.count()
        if recent_count:
            latest = recent_receipts.order_by("-created_at").first()
            items.append(
                {
                    "id": f"receipts-{now.date().isoformat()}",
                    "type": "info",
                    "category": "receipts",
                    "title": "New receipts recorded",
                    "message": f"{recent_count} receipt(s) were recorded in the last 24 hours",
                    "timestamp": latest.created_at.isoformat(),
                    "read": False,
                }
            )

        for row in ReportService.build_rows("committee", financial_year, "APRIL"):
            if not row["yearlyTarget"]:
                continue
            achieved = percentage(row["progressiveCurrent"], row["yearlyTarget"], 2)
            if achieved < LOW_ACHIEVEMENT_THRESHOLD:
                items.append(
                    {
                        "id": f"low-achievement-{row['id']}-{financial_year}",
                        "type": "warning",
                        "category": "targets",
                        "title": f"{row['name']} is behind target",
                        "message": (
                            f"{row['code']} has achieved {achieved}% of its {financial_year} target "
                            f"({scale_amount(row['progressiveCurrent'])} of {scale_amount(row['yearlyTarget'])})"
                        ),
                        "timestamp": now.isoformat(),
                        "read": False,
                        "committeeId": row["id"],
                    }
                )

        updated_targets = (
            Target.objects.active()
            .filter(updated_at__gte=now - timedelta(days=7))
            .select_related("committee")
        )
        for target in updated_targets:
            items.append(
                {
                    "id": f"target-{target.pk}-{int(target.updated_at.timestamp())}",
                    "type": "info",
                    "category": "targets",
                    "title": "Target updated",
                    "message": f"Target for {target.committee.code} ({target.financial_year}) was updated",
                    "timestamp": target.updated_at.isoformat(),
                    "read": False,
                    "targetId": target.pk,
                }
            )

        if not Receipt.objects.active().exists():
            items.append(
                {
                    "id": "system-no-receipts",
                    "type": "alert",
                    "category": "system",
                    "title": "No receipts recorded",
                    "message": "No receipts have been recorded yet",
                    "timestamp": now.isoformat(),
                    "read": False,
                }
            )

        items.sort(key=lambda item: item["timestamp"], reverse=True)
        items = items[:limit]
        logger.debug("Built %s notifications for %s", len(items), financial_year)
        return {"notifications": items, "unreadCount": len(items)}
