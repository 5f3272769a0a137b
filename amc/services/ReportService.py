# amc/services/ReportService.py
"""
Statement generation: targets versus collections.

All three printable statements (committee-wise, checkpost-wise and
commodity-wise) come from ``ReportService.build_rows``; they differ only in
the grouping key and the columns rendered. Only ``MF`` receipts count as
collections, and every cumulative figure runs from May through the selected
month of the financial year.
"""
import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, Sum
from django.db.models.functions import ExtractMonth
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from amc.models import Checkpost, CheckpostTarget, Committee, Receipt, Target
from amc.services.financial_year import (
    MONTH_BY_NUMBER,
    cumulative_months,
    display_month,
    normalize_month,
    previous_financial_year,
    validate_financial_year,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
LAKH = Decimal("100000")

COMMITTEE = "committee"
CHECKPOST = "checkpost"
COMMODITY = "commodity"
GROUPINGS = (COMMITTEE, CHECKPOST, COMMODITY)

STATEMENT_TITLES = {
    COMMITTEE: "Market Fee Income Statement",
    CHECKPOST: "Checkpost-wise Progress Report",
    COMMODITY: "Commodity-wise Market Fee Report",
}

TARGET_COLUMNS = [
    ("yearlyTarget", "Yearly Target"),
    ("monthlyTarget", "Monthly Target"),
    ("currentMonthPrevious", "Current Month ({previous})"),
    ("currentMonthCurrent", "Current Month ({current})"),
    ("difference", "Difference"),
    ("cumulativeTarget", "Cumulative Target"),
    ("progressivePrevious", "Progressive Total ({previous})"),
    ("progressiveCurrent", "Progressive Total ({current})"),
    ("progressiveDifference", "Progressive Difference"),
    ("percentageAchieved", "% Achieved"),
]

STATEMENT_COLUMNS = {
    COMMITTEE: [("slNo", "Sl. No."), ("name", "Name of the AMC"), ("code", "AMC Code")] + TARGET_COLUMNS,
    CHECKPOST: [("slNo", "Sl. No."), ("committeeName", "Name of the AMC"), ("name", "Checkpost")]
    + TARGET_COLUMNS,
    COMMODITY: [
        ("slNo", "Sl. No."),
        ("name", "Commodity"),
        ("receiptCount", "Receipts"),
        ("currentMonthPrevious", "Current Month ({previous})"),
        ("currentMonthCurrent", "Current Month ({current})"),
        ("difference", "Difference"),
        ("progressivePrevious", "Progressive Total ({previous})"),
        ("progressiveCurrent", "Progressive Total ({current})"),
        ("progressiveDifference", "Progressive Difference"),
        ("share", "% Share"),
    ],
}

AMOUNT_FIELDS = (
    "yearlyTarget",
    "monthlyTarget",
    "currentMonthPrevious",
    "currentMonthCurrent",
    "difference",
    "cumulativeTarget",
    "progressivePrevious",
    "progressiveCurrent",
    "progressiveDifference",
)


def percentage(part, whole, places=2):
    """``part / whole * 100``; 0 when ``whole`` is zero or missing."""
    whole = Decimal(whole or 0)
    if whole <= 0:
        return 0 if places == 0 else 0.0
    value = (Decimal(part or 0) / whole * 100).quantize(
        Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP
    )
    return int(value) if places == 0 else float(value)


def growth_rate(current, previous):
    """Period-over-period growth in percent; 0 when the earlier period is 0."""
    return percentage(Decimal(current or 0) - Decimal(previous or 0), previous, places=2)


def scale_amount(value, scale=1):
    return float((Decimal(value or 0) / Decimal(scale)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class ReportService:
    @staticmethod
    def market_fee_receipts(financial_year=None, committee_id=None):
        queryset = Receipt.objects.active().filter(
            nature_of_receipt=Receipt.MF,
            committee__is_active=True,
            committee__deleted_at__isnull=True,
        )
        if financial_year:
            queryset = queryset.filter(financial_year=financial_year)
        if committee_id:
            queryset = queryset.filter(committee_id=committee_id)
        return queryset

    @staticmethod
    def monthly_collections(financial_year, group_field, committee_id=None):
        """
        ``{group_key: {"MAY": {"amount": Decimal, "count": int}, ...}}`` for one year.
        """
        rows = (
            ReportService.market_fee_receipts(financial_year, committee_id)
            .annotate(month_number=ExtractMonth("date"))
            .values(group_field, "month_number")
            .annotate(amount=Sum("market_fee"), count=Count("id"))
            .order_by()
        )
        result = defaultdict(lambda: defaultdict(lambda: {"amount": ZERO, "count": 0}))
        for row in rows:
            bucket = result[row[group_field]][MONTH_BY_NUMBER[row["month_number"]]]
            bucket["amount"] += row["amount"] or ZERO
            bucket["count"] += row["count"]
        return result

    @staticmethod
    def committee_targets(financial_year, committee_id=None):
        """Active target per committee; the most recently created one wins."""
        targets = (
            Target.objects.active()
            .filter(financial_year=financial_year)
            .prefetch_related("monthly_targets")
            .order_by("committee_id", "-created_at", "-id")
        )
        if committee_id:
            targets = targets.filter(committee_id=committee_id)
        chosen = {}
        for target in targets:
            chosen.setdefault(target.committee_id, target)
        return chosen

    @staticmethod
    def checkpost_targets(targets):
        """``{checkpost_id: {MONTH: amount}}`` from the chosen committee targets."""
        result = defaultdict(dict)
        rows = CheckpostTarget.objects.filter(target__in=list(targets.values())).values(
            "checkpost_id", "month", "amount"
        )
        for row in rows:
            result[row["checkpost_id"]][row["month"]] = row["amount"]
        return result

    @staticmethod
    def _compare(current, previous, month, window):
        current = current or {}
        previous = previous or {}

        def amount(buckets, m):
            return buckets.get(m, {}).get("amount", ZERO)

        current_month = amount(current, month)
        previous_month = amount(previous, month)
        progressive_current = sum((amount(current, m) for m in window), ZERO)
        progressive_previous = sum((amount(previous, m) for m in window), ZERO)
        receipt_count = sum(current.get(m, {}).get("count", 0) for m in window)
        return {
            "currentMonthPrevious": previous_month,
            "currentMonthCurrent": current_month,
            "difference": current_month - previous_month,
            "progressivePrevious": progressive_previous,
            "progressiveCurrent": progressive_current,
            "progressiveDifference": progressive_current - progressive_previous,
            "receiptCount": receipt_count,
        }

    @staticmethod
    def _with_targets(row, monthly_amounts, yearly, month, window):
        row["yearlyTarget"] = Decimal(yearly or 0)
        row["monthlyTarget"] = Decimal(monthly_amounts.get(month) or 0)
        row["cumulativeTarget"] = sum((Decimal(monthly_amounts.get(m) or 0) for m in window), ZERO)
        return row

    @staticmethod
    def build_rows(grouping, financial_year, month, committee_id=None):
        """
        Raw (unscaled, unrounded) comparison rows for one grouping.

        Each row carries the yearly/monthly/cumulative targets (not for
        commodities), the selected month in both years and the progressive
        totals from May through ``month`` in both years.
        """
        if grouping not in GROUPINGS:
            raise ValidationError({"statement": f"Unknown statement '{grouping}'."})
        validate_financial_year(financial_year)
        month = normalize_month(month)
        window = cumulative_months(month)
        previous_year = previous_financial_year(financial_year)

        if grouping == COMMITTEE:
            current = ReportService.monthly_collections(financial_year, "committee_id", committee_id)
            previous = ReportService.monthly_collections(previous_year, "committee_id", committee_id)
            targets = ReportService.committee_targets(financial_year, committee_id)
            committees = Committee.objects.active().order_by("name")
            if committee_id:
                committees = committees.filter(pk=committee_id)
            rows = []
            for committee in committees:
                target = targets.get(committee.pk)
                monthly_amounts = (
                    {mt.month: mt.amount for mt in target.monthly_targets.all()} if target else {}
                )
                row = {"id": committee.pk, "name": committee.name, "code": committee.code}
                row.update(ReportService._compare(current.get(committee.pk), previous.get(committee.pk), month, window))
                rows.append(
                    ReportService._with_targets(
                        row, monthly_amounts, target.yearly_target if target else 0, month, window
                    )
                )
            return rows

        if grouping == CHECKPOST:
            current = ReportService.monthly_collections(financial_year, "checkpost_id", committee_id)
            previous = ReportService.monthly_collections(previous_year, "checkpost_id", committee_id)
            targets = ReportService.committee_targets(financial_year, committee_id)
            checkpost_amounts = ReportService.checkpost_targets(targets)
            checkposts = (
                Checkpost.objects.active()
                .filter(committee__is_active=True, committee__deleted_at__isnull=True)
                .select_related("committee")
                .order_by("committee__name", "name")
            )
            if committee_id:
                checkposts = checkposts.filter(committee_id=committee_id)
            rows = []
            for checkpost in checkposts:
                monthly_amounts = checkpost_amounts.get(checkpost.pk, {})
                row = {
                    "id": checkpost.pk,
                    "name": checkpost.name,
                    "committeeName": checkpost.committee.name,
                    "committeeCode": checkpost.committee.code,
                }
                row.update(ReportService._compare(current.get(checkpost.pk), previous.get(checkpost.pk), month, window))
                yearly = sum((Decimal(amount) for amount in monthly_amounts.values()), ZERO)
                rows.append(ReportService._with_targets(row, monthly_amounts, yearly, month, window))
            return rows

        current = ReportService.monthly_collections(financial_year, "commodity", committee_id)
        previous = ReportService.monthly_collections(previous_year, "commodity", committee_id)
        rows = []
        for commodity in set(current) | set(previous):
            row = {"id": commodity, "name": commodity}
            row.update(ReportService._compare(current.get(commodity), previous.get(commodity), month, window))
            rows.append(row)
        rows.sort(key=lambda row: (-row["progressiveCurrent"], row["name"]))
        return rows

    @staticmethod
    def totals(rows):
        totals = {field: sum((row.get(field, ZERO) for row in rows), ZERO) for field in AMOUNT_FIELDS}
        totals["receiptCount"] = sum(row.get("receiptCount", 0) for row in rows)
        return totals

    @staticmethod
    def shape(row, grouping, scale, percent_places, share_total=ZERO):
        """Scale amounts, round, and add derived percentages."""
        shaped = {key: value for key, value in row.items() if key not in AMOUNT_FIELDS}
        for field in AMOUNT_FIELDS:
            if field in row:
                shaped[field] = scale_amount(row[field], scale)
        if grouping == COMMODITY:
            shaped["share"] = percentage(row["progressiveCurrent"], share_total, 2)
        else:
            shaped["percentageAchieved"] = percentage(row["progressiveCurrent"], row["yearlyTarget"], percent_places)
            shaped["cumulativeAchievement"] = percentage(row["progressiveCurrent"], row["cumulativeTarget"], 2)
        return shaped

    @staticmethod
    def columns(grouping, financial_year):
        labels = {"current": financial_year, "previous": previous_financial_year(financial_year)}
        return [
            {"key": key, "label": label.format(**labels)} for key, label in STATEMENT_COLUMNS[grouping]
        ]

    @staticmethod
    def statement(grouping, financial_year, month, committee_id=None, in_lakhs=True):
        """
        A complete statement: rows, totals row, column headings and metadata.

        Amounts are in lakhs and ``percentageAchieved`` is a whole percent
        unless ``in_lakhs`` is False.
        """
        raw_rows = ReportService.build_rows(grouping, financial_year, month, committee_id)
        scale = LAKH if in_lakhs else 1
        places = 0 if in_lakhs else 2
        month_name = display_month(normalize_month(month))

        totals_raw = ReportService.totals(raw_rows)
        share_total = totals_raw["progressiveCurrent"]

        report_rows = []
        for index, row in enumerate(raw_rows, start=1):
            shaped = ReportService.shape(row, grouping, scale, places, share_total)
            shaped["slNo"] = index
            report_rows.append(shaped)

        totals_raw["name"] = "Total"
        totals = ReportService.shape(totals_raw, grouping, scale, places, share_total)
        totals["slNo"] = ""

        logger.debug("Built %s statement with %s rows", grouping, len(report_rows))
        return {
            "reportData": report_rows,
            "totals": totals,
            "columns": ReportService.columns(grouping, financial_year),
            "metadata": {
                "title": f"{STATEMENT_TITLES[grouping]} - {month_name} {financial_year}",
                "statement": grouping,
                "financialYear": financial_year,
                "previousFinancialYear": previous_financial_year(financial_year),
                "selectedMonth": month_name,
                "cumulativeMonths": [display_month(m) for m in cumulative_months(month)],
                "unit": "lakhs" if in_lakhs else "rupees",
                "generatedAt": timezone.now().isoformat(),
                "totalRows": len(report_rows),
                "totalCommittees": Committee.objects.active().count()
                if not committee_id
                else 1,
            },
        }
