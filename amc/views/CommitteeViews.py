# amc/views/CommitteeViews.py
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import generics

from amc.filters import CheckpostFilter, CommitteeFilter, apply_sort
from amc.permissions import ReadOrManager
from amc.responses import created_response, success_response
from amc.serializers.CommitteeSerializer import (
    CheckpostSerializer,
    CommitteeDetailSerializer,
    CommitteeSerializer,
)
from amc.services.CommitteeService import CommitteeService

COMMITTEE_SORT_FIELDS = {
    "name": "name",
    "code": "code",
    "district": "district",
    "createdAt": "created_at",
}

CHECKPOST_SORT_FIELDS = {
    "name": "name",
    "location": "location",
    "createdAt": "created_at",
}

search_param = openapi.Parameter(
    "search", openapi.IN_QUERY, description="Matches name or code", type=openapi.TYPE_STRING
)


class CommitteeListCreateView(generics.ListCreateAPIView):
    """
    GET  /api/committees  -> paginated active committees
    POST /api/committees  -> create a committee (ADMIN, MANAGER)
    """

    serializer_class = CommitteeSerializer
    filterset_class = CommitteeFilter
    permission_classes = [ReadOrManager]

    def get_queryset(self):
        return apply_sort(
            CommitteeService.active_queryset(),
            self.request.query_params,
            COMMITTEE_SORT_FIELDS,
            "name",
        )

    @swagger_auto_schema(
        operation_summary="List committees",
        manual_parameters=[search_param],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @swagger_auto_schema(operation_summary="Create a committee")
    def post(self, request, *args, **kwargs):
        return self.create(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        committee = CommitteeService.create_committee(serializer.validated_data, request)
        return created_response(
            CommitteeSerializer(committee).data, "Committee created successfully"
        )


class CommitteeDetailView(generics.GenericAPIView):
    serializer_class = CommitteeSerializer
    permission_classes = [ReadOrManager]

    def get(self, request, pk):
        committee = CommitteeService.get_active(pk)
        return success_response(CommitteeDetailSerializer(committee).data)

    def put(self, request, pk):
        committee = CommitteeService.get_active(pk)
        serializer = CommitteeSerializer(committee, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        committee = CommitteeService.update_committee(committee, serializer.validated_data, request)
        return success_response(
            CommitteeSerializer(committee).data, "Committee updated successfully"
        )

    def delete(self, request, pk):
        committee = CommitteeService.get_active(pk)
        CommitteeService.delete_committee(committee, request)
        return success_response(message="Committee deleted successfully")


class CheckpostListCreateView(generics.ListCreateAPIView):
    serializer_class = CheckpostSerializer
    filterset_class = CheckpostFilter
    permission_classes = [ReadOrManager]

    def get_queryset(self):
        return apply_sort(
            CommitteeService.active_checkposts(),
            self.request.query_params,
            CHECKPOST_SORT_FIELDS,
            "name",
        )

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        checkpost = CommitteeService.create_checkpost(serializer.validated_data, request)
        return created_response(CheckpostSerializer(checkpost).data, "Checkpost created successfully")


class CheckpostDetailView(generics.GenericAPIView):
    serializer_class = CheckpostSerializer
    permission_classes = [ReadOrManager]

    def get(self, request, pk):
        return success_response(CheckpostSerializer(CommitteeService.get_checkpost(pk)).data)

    def put(self, request, pk):
        checkpost = CommitteeService.get_checkpost(pk)
        serializer = CheckpostSerializer(checkpost, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        checkpost = CommitteeService.update_checkpost(checkpost, serializer.validated_data, request)
        return success_response(CheckpostSerializer(checkpost).data, "Checkpost updated successfully")

    def delete(self, request, pk):
        checkpost = CommitteeService.get_checkpost(pk)
        CommitteeService.delete_checkpost(checkpost, request)
        return success_response(message="Checkpost deleted successfully")
