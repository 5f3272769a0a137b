# amc/views/TargetViews.py
from drf_yasg.utils import swagger_auto_schema
from rest_framework import generics

from amc.filters import TargetFilter, apply_sort
from amc.permissions import ReadOrManager
from amc.responses import created_response, success_response
from amc.serializers.TargetSerializer import TargetSerializer
from amc.services.TargetService import TargetService

TARGET_SORT_FIELDS = {
    "financialYear": "financial_year",
    "yearlyTarget": "yearly_target",
    "committee": "committee__name",
    "createdAt": "created_at",
}


class TargetListCreateView(generics.ListCreateAPIView):
    """
    GET  /api/targets  -> active targets (committeeId / financialYear filters)
    POST /api/targets  -> yearly target with monthly and checkpost breakdowns
    """

    serializer_class = TargetSerializer
    filterset_class = TargetFilter
    permission_classes = [ReadOrManager]

    def get_queryset(self):
        return apply_sort(
            TargetService.active_queryset(),
            self.request.query_params,
            TARGET_SORT_FIELDS,
            "created_at",
        )

    @swagger_auto_schema(
        operation_summary="Create a target",
        operation_description="""
            monthlyTargets is optional; when omitted the yearly target is split evenly over
            May..April. checkpostTargets are accepted only for committees with checkposts.
        """,
        responses={201: TargetSerializer, 400: "Validation failed", 409: "Target already exists"},
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = TargetService.create_target(dict(serializer.validated_data), request)
        return created_response(TargetSerializer(target).data, "Target created successfully")


class TargetDetailView(generics.GenericAPIView):
    serializer_class = TargetSerializer
    permission_classes = [ReadOrManager]

    def get(self, request, pk):
        return success_response(TargetSerializer(TargetService.get_active(pk)).data)

    def put(self, request, pk):
        target = TargetService.get_active(pk)
        serializer = TargetSerializer(target, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        target = TargetService.update_target(target, dict(serializer.validated_data), request)
        return success_response(TargetSerializer(target).data, "Target updated successfully")

    def delete(self, request, pk):
        target = TargetService.get_active(pk)
        TargetService.delete_target(target, request)
        return success_response(message="Target deleted successfully")
