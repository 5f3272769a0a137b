# amc/views/receipt_batch_views.py
import logging

from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.views import APIView

from amc.filters import ReceiptFilter, apply_sort, bool_param
from amc.permissions import IsWriter
from amc.responses import created_response, success_response
from amc.serializers.ReceiptSerializer import (
    ReceiptBulkCreateSerializer,
    ReceiptBulkUpdateSerializer,
    ReceiptImportRowSerializer,
    ReceiptImportSerializer,
    ReceiptSerializer,
)
from amc.services import export_service
from amc.services.ReceiptService import ReceiptService
from amc.views.ReceiptViews import RECEIPT_SORT_FIELDS

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv", "pdf")


class ReceiptBulkCreateView(APIView):
    """POST /api/receipts/bulk -> create up to 100 receipts, all or nothing."""

    permission_classes = [IsWriter]

    @swagger_auto_schema(
        operation_summary="Create receipts in bulk",
        request_body=ReceiptBulkCreateSerializer,
        responses={201: "Receipts created", 400: "Validation failed", 409: "Duplicate receipts"},
    )
    def post(self, request):
        serializer = ReceiptBulkCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        created = ReceiptService.bulk_create(serializer.validated_data["receipts"], request)
        return created_response(
            ReceiptSerializer(created, many=True).data,
            f"{len(created)} receipts created successfully",
        )


class ReceiptBulkUpdateView(APIView):
    """PUT /api/receipts/bulk/update -> apply up to 50 ``{id, data}`` partial updates."""

    permission_classes = [IsWriter]

    @swagger_auto_schema(
        operation_summary="Update receipts in bulk",
        request_body=ReceiptBulkUpdateSerializer,
    )
    def put(self, request):
        serializer = ReceiptBulkUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = ReceiptService.bulk_update(
            serializer.validated_data["updates"], request, serializer_class=ReceiptSerializer
        )
        return success_response(
            ReceiptSerializer(updated, many=True).data,
            f"{len(updated)} receipts updated successfully",
        )


class ReceiptImportView(APIView):
    """
    POST /api/receipts/import

    Rows name their committee by ``committeeCode`` and their checkpost by
    ``checkpostName``. With ``validateOnly`` nothing is written.
    """

    permission_classes = [IsWriter]

    @swagger_auto_schema(
        operation_summary="Import receipts",
        request_body=ReceiptImportSerializer,
        responses={
            200: "Validation successful (validateOnly)",
            201: "Receipts imported",
            400: "Line-numbered validation errors",
            409: "Receipts already exist",
        },
    )
    def post(self, request):
        serializer = ReceiptImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rows = serializer.validated_data["receipts"]
        validate_only = serializer.validated_data["validateOnly"]

        validated, created = ReceiptService.import_receipts(
            rows, ReceiptImportRowSerializer, validate_only=validate_only, request=request
        )
        if validate_only:
            return success_response(
                {"totalRows": len(rows), "validRows": len(validated), "errors": []},
                "Validation successful",
            )
        return success_response(
            {
                "totalRows": len(rows),
                "imported": len(created),
                "receipts": ReceiptSerializer(created, many=True).data,
            },
            f"{len(created)} receipts imported successfully",
            status_code=status.HTTP_201_CREATED,
        )


class ReceiptExportView(APIView):
    """GET /api/receipts/export?format=json|csv|pdf plus the list filters."""

    @swagger_auto_schema(
        operation_summary="Export receipts",
        manual_parameters=[
            openapi.Parameter("format", openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=list(EXPORT_FORMATS)),
            openapi.Parameter(
                "columns", openapi.IN_QUERY, type=openapi.TYPE_STRING, description="Comma separated column keys"
            ),
            openapi.Parameter("includeHeader", openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN),
            openapi.Parameter("orientation", openapi.IN_QUERY, type=openapi.TYPE_STRING),
            openapi.Parameter("paperSize", openapi.IN_QUERY, type=openapi.TYPE_STRING),
        ],
    )
    def get(self, request):
        params = request.query_params
        export_format = (params.get("format") or "json").lower()
        if export_format not in EXPORT_FORMATS:
            raise ValidationError({"format": f"Must be one of {', '.join(EXPORT_FORMATS)}."})

        filterset = ReceiptFilter(params, queryset=ReceiptService.active_queryset())
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        queryset = apply_sort(filterset.qs, params, RECEIPT_SORT_FIELDS, "date")
        columns = export_service.select_columns(export_service.RECEIPT_COLUMNS, params.get("columns"))
        rows = (export_service.receipt_export_row(receipt) for receipt in queryset.iterator(chunk_size=500))
        include_timestamp = bool_param(params, "includeTimestamp", default=True)
        logger.info("Receipt export requested (%s)", export_format)

        if export_format == "csv":
            return export_service.csv_response(
                rows,
                columns,
                export_service.export_filename("receipts-export", "csv", include_timestamp),
                include_header=bool_param(params, "includeHeader", default=True),
            )
        if export_format == "pdf":
            content = export_service.render_pdf(
                rows,
                columns,
                title=params.get("title") or "Receipts Export",
                orientation=params.get("orientation") or "landscape",
                paper_size=params.get("paperSize") or "a4",
                include_page_numbers=bool_param(params, "includePageNumbers", default=True),
                include_footer=bool_param(params, "includeFooter", default=True),
            )
            return export_service.pdf_response(
                content, export_service.export_filename("receipts-export", "pdf", include_timestamp)
            )

        data = [{key: row[key] for key, _ in columns} for row in rows]
        return success_response(
            data,
            columns=[{"key": key, "label": label} for key, label in columns],
            total=len(data),
        )
