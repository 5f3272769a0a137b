# amc/views/ReceiptViews.py
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import generics

from amc.filters import ReceiptFilter, apply_sort
from amc.permissions import ReadOrWriter
from amc.responses import created_response, success_response
from amc.serializers.ReceiptSerializer import ReceiptSerializer
from amc.services.ReceiptService import ReceiptService

RECEIPT_SORT_FIELDS = {
    "date": "date",
    "receiptNumber": "receipt_number",
    "bookNumber": "book_number",
    "traderName": "trader_name",
    "commodity": "commodity",
    "marketFee": "market_fee",
    "transactionValue": "transaction_value",
    "financialYear": "financial_year",
    "createdAt": "created_at",
}

receipt_list_params = [
    openapi.Parameter("search", openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter("startDate", openapi.IN_QUERY, type=openapi.TYPE_STRING, format="date"),
    openapi.Parameter("endDate", openapi.IN_QUERY, type=openapi.TYPE_STRING, format="date"),
    openapi.Parameter("financialYear", openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter("committeeId", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
    openapi.Parameter("checkpostId", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
    openapi.Parameter("natureOfReceipt", openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter("sortBy", openapi.IN_QUERY, type=openapi.TYPE_STRING),
    openapi.Parameter("sortOrder", openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=["asc", "desc"]),
    openapi.Parameter("page", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
    openapi.Parameter("limit", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
]


class ReceiptListCreateView(generics.ListCreateAPIView):
    """
    GET  /api/receipts  -> filtered, sorted, paginated receipts
    POST /api/receipts  -> record one receipt
    """

    serializer_class = ReceiptSerializer
    filterset_class = ReceiptFilter
    permission_classes = [ReadOrWriter]

    def get_queryset(self):
        return apply_sort(
            ReceiptService.active_queryset(),
            self.request.query_params,
            RECEIPT_SORT_FIELDS,
            "date",
        )

    @swagger_auto_schema(operation_summary="List receipts", manual_parameters=receipt_list_params)
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @swagger_auto_schema(
        operation_summary="Create a receipt",
        operation_description="""
            checkpostName (or checkpostId) is required when collectionLocation is CHECKPOST,
            natureOfReceiptOther when natureOfReceipt is OTHERS and supervisorName when
            collectionLocation is SUPERVISOR. (bookNumber, receiptNumber) must be unique per
            committee among active receipts.
        """,
        responses={201: ReceiptSerializer, 400: "Validation failed", 409: "Duplicate receipt"},
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        receipt = ReceiptService.create_receipt(serializer.validated_data, request)
        return created_response(ReceiptSerializer(receipt).data, "Receipt created successfully")


class ReceiptDetailView(generics.GenericAPIView):
    serializer_class = ReceiptSerializer
    permission_classes = [ReadOrWriter]

    def get(self, request, pk):
        return success_response(ReceiptSerializer(ReceiptService.get_active(pk)).data)

    def put(self, request, pk):
        receipt = ReceiptService.get_active(pk)
        serializer = ReceiptSerializer(receipt, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        receipt = ReceiptService.update_receipt(receipt, serializer.validated_data, request)
        return success_response(ReceiptSerializer(receipt).data, "Receipt updated successfully")

    def delete(self, request, pk):
        receipt = ReceiptService.get_active(pk)
        ReceiptService.delete_receipt(receipt, request)
        return success_response(message="Receipt deleted successfully")
