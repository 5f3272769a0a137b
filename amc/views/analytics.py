# amc/views/analytics.py
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework.views import APIView

from amc.filters import int_param
from amc.responses import success_response
from amc.services.AnalyticsService import PERIODS, AnalyticsService

financial_year_param = openapi.Parameter(
    "financialYear", openapi.IN_QUERY, description='e.g. "2025-26"', type=openapi.TYPE_STRING
)
committee_param = openapi.Parameter("committeeId", openapi.IN_QUERY, type=openapi.TYPE_INTEGER)


class DashboardView(APIView):
    @swagger_auto_schema(
        operation_summary="Dashboard overview",
        manual_parameters=[financial_year_param],
    )
    def get(self, request):
        data = AnalyticsService.dashboard(request.query_params.get("financialYear"))
        return success_response(data)


class TrendsView(APIView):
    @swagger_auto_schema(
        operation_summary="Collection trends",
        operation_description="Market-fee collections bucketed by calendar month, quarter or year.",
        manual_parameters=[
            openapi.Parameter("period", openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=list(PERIODS)),
            financial_year_param,
            committee_param,
        ],
    )
    def get(self, request):
        params = request.query_params
        data = AnalyticsService.trends(
            period=params.get("period"),
            financial_year=params.get("financialYear"),
            committee_id=int_param(params, "committeeId"),
        )
        return success_response(data)


class CommitteePerformanceView(APIView):
    @swagger_auto_schema(
        operation_summary="Committee performance",
        manual_parameters=[financial_year_param, committee_param],
    )
    def get(self, request):
        params = request.query_params
        data = AnalyticsService.committee_performance(
            financial_year=params.get("financialYear"),
            committee_id=int_param(params, "committeeId"),
        )
        return success_response(data)
