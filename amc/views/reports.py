# amc/views/reports.py
import logging

from django.conf import settings
from django.utils import timezone
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework.exceptions import ValidationError
from rest_framework.views import APIView

from amc.filters import bool_param, int_param
from amc.responses import success_response
from amc.services import export_service
from amc.services.financial_year import MONTH_BY_NUMBER, validate_financial_year
from amc.services.ReportService import GROUPINGS, ReportService

logger = logging.getLogger(__name__)

REPORT_FORMATS = ("json", "csv", "pdf")


class MarketFeeReportView(APIView):
    """
    GET /api/reports/market-fees

    Statement No.1 (committee), Statement No.2 (checkpost) or the commodity
    statement for one financial year up to the selected month.
    """

    @swagger_auto_schema(
        operation_summary="Market fee statements",
        manual_parameters=[
            openapi.Parameter("financialYear", openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter("month", openapi.IN_QUERY, type=openapi.TYPE_STRING, description="May..April"),
            openapi.Parameter("committeeId", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
            openapi.Parameter("statement", openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=list(GROUPINGS)),
            openapi.Parameter("format", openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=list(REPORT_FORMATS)),
            openapi.Parameter("columns", openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter("inLakhs", openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN),
        ],
    )
    def get(self, request):
        params = request.query_params
        report_format = (params.get("format") or "json").lower()
        if report_format not in REPORT_FORMATS:
            raise ValidationError({"format": f"Must be one of {', '.join(REPORT_FORMATS)}."})

        financial_year = validate_financial_year(
            params.get("financialYear") or settings.AMC_DEFAULT_FINANCIAL_YEAR
        )
        month = params.get("month") or MONTH_BY_NUMBER[timezone.localdate().month]
        grouping = (params.get("statement") or "committee").lower()

        report = ReportService.statement(
            grouping,
            financial_year,
            month,
            committee_id=int_param(params, "committeeId"),
            in_lakhs=bool_param(params, "inLakhs", default=True),
        )
        if report_format == "json":
            return success_response(report)

        available = [(column["key"], column["label"]) for column in report["columns"]]
        columns = export_service.select_columns(available, params.get("columns"))
        rows = report["reportData"] + [report["totals"]]
        base_name = f"market-fee-{grouping}-statement"
        logger.info("Market fee %s statement exported as %s", grouping, report_format)

        if report_format == "csv":
            return export_service.csv_response(
                rows, columns, export_service.export_filename(base_name, "csv")
            )
        content = export_service.render_pdf(
            rows,
            columns,
            title=report["metadata"]["title"],
            subtitle=f"Amounts in {report['metadata']['unit']}",
            orientation=params.get("orientation") or "landscape",
            paper_size=params.get("paperSize") or "a4",
        )
        return export_service.pdf_response(content, export_service.export_filename(base_name, "pdf"))
