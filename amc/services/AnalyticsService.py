# amc/services/AnalyticsService.py
import logging
from collections import defaultdict
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Sum
from django.db.models.functions import ExtractMonth, ExtractYear
from rest_framework.exceptions import ValidationError

from amc.models import Checkpost, Committee, Receipt, Target
from amc.services.financial_year import (
    FY_MONTHS,
    MONTH_BY_NUMBER,
    SEASONS,
    display_month,
    previous_financial_year,
    quarter_for_month,
    season_for_month,
    validate_financial_year,
)
from amc.services.ReportService import ReportService, growth_rate, percentage, scale_amount

logger = logging.getLogger(__name__)

PERIODS = ("monthly", "quarterly", "yearly")
ZERO = Decimal("0")


class AnalyticsService:
    @staticmethod
    def dashboard(financial_year=None):
        financial_year = validate_financial_year(financial_year or settings.AMC_DEFAULT_FINANCIAL_YEAR)
        previous_year = previous_financial_year(financial_year)

        receipts = Receipt.objects.active()
        market_fee = ReportService.market_fee_receipts()
        totals_by_year = ReportService.monthly_collections(financial_year, "financial_year")
        previous_by_year = ReportService.monthly_collections(previous_year, "financial_year")
        current_months = totals_by_year.get(financial_year) or {}
        previous_months = previous_by_year.get(previous_year) or {}

        def month_amount(buckets, month):
            return buckets.get(month, {}).get("amount", ZERO)

        current_total = sum((month_amount(current_months, m) for m in FY_MONTHS), ZERO)
        previous_total = sum((month_amount(previous_months, m) for m in FY_MONTHS), ZERO)

        committee_rows = ReportService.build_rows("committee", financial_year, "APRIL")
        performance = [
            {
                "id": row["id"],
                "name": row["name"],
                "code": row["code"],
                "totalCollected": scale_amount(row["progressiveCurrent"]),
                "yearlyTarget": scale_amount(row["yearlyTarget"]),
                "achievement": percentage(row["progressiveCurrent"], row["yearlyTarget"], 2),
                "receiptCount": row["receiptCount"],
            }
            for row in committee_rows
        ]
        top_performers = sorted(performance, key=lambda row: row["achievement"], reverse=True)[:5]

        recent = receipts.select_related("committee").order_by("-created_at", "-id")[:10]

        return {
            "financialYear": financial_year,
            "overview": {
                "totalCommittees": Committee.objects.active().count(),
                "totalCheckposts": Checkpost.objects.active().count(),
                "totalReceipts": receipts.count(),
                "totalTargets": Target.objects.active().count(),
                "totalMarketFee": scale_amount(market_fee.aggregate(total=Sum("market_fee"))["total"]),
                "currentYearCollection": scale_amount(current_total),
                "previousYearCollection": scale_amount(previous_total),
                "yearOverYearGrowth": growth_rate(current_total, previous_total),
            },
            "committeePerformance": performance,
            "monthlyTrends": {
                "months": [display_month(m)[:3] for m in FY_MONTHS],
                "currentYear": [scale_amount(month_amount(current_months, m)) for m in FY_MONTHS],
                "previousYear": [scale_amount(month_amount(previous_months, m)) for m in FY_MONTHS],
            },
            "topPerformers": top_performers,
            "recentReceipts": [
                {
                    "id": receipt.pk,
                    "bookNumber": receipt.book_number,
                    "receiptNumber": receipt.receipt_number,
                    "date": receipt.date.isoformat(),
                    "traderName": receipt.trader_name,
                    "marketFee": scale_amount(receipt.market_fee),
                    "committee": {"name": receipt.committee.name, "code": receipt.committee.code},
                    "createdAt": receipt.created_at.isoformat(),
                }
                for receipt in recent
            ],
        }

    @staticmethod
    def trends(period="monthly", financial_year=None, committee_id=None):
        period = (period or "monthly").lower()
        if period not in PERIODS:
            raise ValidationError({"period": f"Must be one of {', '.join(PERIODS)}."})
        if financial_year:
            validate_financial_year(financial_year)

        receipts = ReportService.market_fee_receipts(financial_year, committee_id)
        rows = (
            receipts.annotate(year=ExtractYear("date"), month_number=ExtractMonth("date"))
            .values("year", "month_number")
            .annotate(amount=Sum("market_fee"), count=Count("id"))
            .order_by("year", "month_number")
        )

        buckets = {}
        seasons = {season: {"season": season, "amount": ZERO, "count": 0} for season in SEASONS}
        for row in rows:
            year, month_number = row["year"], row["month_number"]
            if period == "monthly":
                key = (year, month_number)
                label = f"{display_month(MONTH_BY_NUMBER[month_number])} {year}"
            elif period == "quarterly":
                quarter = quarter_for_month(month_number)
                key = (year, quarter)
                label = f"Q{quarter} {year}"
            else:
                key = (year,)
                label = str(year)
            bucket = buckets.setdefault(key, {"period": label, "amount": ZERO, "count": 0})
            bucket["amount"] += row["amount"] or ZERO
            bucket["count"] += row["count"]

            season = seasons[season_for_month(month_number)]
            season["amount"] += row["amount"] or ZERO
            season["count"] += row["count"]

        # months without receipts get no bucket; growth compares consecutive non-empty buckets
        trend_rows = []
        previous_amount = None
        for key in sorted(buckets):
            bucket = buckets[key]
            trend_rows.append(
                {
                    "period": bucket["period"],
                    "amount": scale_amount(bucket["amount"]),
                    "count": bucket["count"],
                    "growthRate": growth_rate(bucket["amount"], previous_amount) if previous_amount is not None else 0.0,
                }
            )
            previous_amount = bucket["amount"]

        commodity_rows = (
            receipts.values("commodity")
            .annotate(amount=Sum("market_fee"), count=Count("id"))
            .order_by("-amount", "commodity")
        )
        total_amount = sum((row["amount"] or ZERO for row in commodity_rows), ZERO)
        total_count = sum(row["count"] for row in commodity_rows)

        return {
            "trends": trend_rows,
            "commodityTrends": [
                {
                    "commodity": row["commodity"],
                    "amount": scale_amount(row["amount"]),
                    "count": row["count"],
                    "percentage": percentage(row["amount"], total_amount, 2),
                }
                for row in commodity_rows
            ],
            "seasonalPatterns": [
                {"season": s["season"], "amount": scale_amount(s["amount"]), "count": s["count"]}
                for s in seasons.values()
            ],
            "summary": {
                "totalAmount": scale_amount(total_amount),
                "totalReceipts": total_count,
                "averageAmount": scale_amount(total_amount / total_count) if total_count else 0.0,
                "period": period,
                "financialYear": financial_year,
            },
        }

    @staticmethod
    def committee_performance(financial_year=None, committee_id=None):
        financial_year = validate_financial_year(financial_year or settings.AMC_DEFAULT_FINANCIAL_YEAR)

        committee_rows = ReportService.build_rows("committee", financial_year, "APRIL", committee_id)
        monthly = ReportService.monthly_collections(financial_year, "committee_id", committee_id)
        targets = ReportService.committee_targets(financial_year, committee_id)

        receipts = ReportService.market_fee_receipts(financial_year, committee_id)
        by_checkpost = {
            row["checkpost_id"]: row
            for row in receipts.exclude(checkpost__isnull=True)
            .values("checkpost_id")
            .annotate(amount=Sum("market_fee"), count=Count("id"))
            .order_by()
        }
        commodities = defaultdict(list)
        for row in (
            receipts.values("committee_id", "commodity")
            .annotate(amount=Sum("market_fee"), count=Count("id"))
            .order_by("committee_id", "-amount")
        ):
            commodities[row["committee_id"]].append(
                {"commodity": row["commodity"], "count": row["count"], "amount": scale_amount(row["amount"])}
            )

        checkposts = defaultdict(list)
        checkpost_qs = Checkpost.objects.active().order_by("name")
        if committee_id:
            checkpost_qs = checkpost_qs.filter(committee_id=committee_id)
        for checkpost in checkpost_qs:
            totals = by_checkpost.get(checkpost.pk, {})
            checkposts[checkpost.committee_id].append(
                {
                    "id": checkpost.pk,
                    "name": checkpost.name,
                    "collection": scale_amount(totals.get("amount")),
                    "receiptCount": totals.get("count", 0),
                }
            )

        results = []
        for row in committee_rows:
            target = targets.get(row["id"])
            monthly_targets = {mt.month: mt.amount for mt in target.monthly_targets.all()} if target else {}
            collections = monthly.get(row["id"]) or {}
            monthly_data = []
            for month in FY_MONTHS:
                collected = collections.get(month, {}).get("amount", ZERO)
                month_target = monthly_targets.get(month, ZERO)
                monthly_data.append(
                    {
                        "month": display_month(month),
                        "collection": scale_amount(collected),
                        "target": scale_amount(month_target),
                        "achievement": percentage(collected, month_target, 2),
                    }
                )
            results.append(
                {
                    "committee": {"id": row["id"], "name": row["name"], "code": row["code"]},
                    "performance": {
                        "totalCollection": scale_amount(row["progressiveCurrent"]),
                        "yearlyTarget": scale_amount(row["yearlyTarget"]),
                        "achievement": percentage(row["progressiveCurrent"], row["yearlyTarget"], 2),
                        "receiptCount": row["receiptCount"],
                    },
                    "monthlyData": monthly_data,
                    "checkpostPerformance": checkposts.get(row["id"], []),
                    "commodityBreakdown": commodities.get(row["id"], []),
                }
            )
        logger.debug("Committee performance for %s committees", len(results))
        return results
