# amc/serializers/ReceiptSerializer.py
from datetime import date, datetime
from decimal import Decimal

from dateutil import parser as date_parser
from rest_framework import serializers

from amc.models import Committee, Checkpost, Receipt
from amc.serializers.CommitteeSerializer import (
    CommitteeSummarySerializer,
    CheckpostSummarySerializer,
)
from amc.services.financial_year import is_valid_financial_year
from amc.services.receipt_validation import ReceiptValidationService

BULK_CREATE_LIMIT = 100
BULK_UPDATE_LIMIT = 50
IMPORT_LIMIT = 1000


class FlexibleDateField(serializers.DateField):
    """Accepts ``2025-05-10`` as well as full ISO datetimes from the dashboard."""

    def to_internal_value(self, value):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str) or not value.strip():
            self.fail("invalid", format="YYYY-MM-DD")
        try:
            return date_parser.isoparse(value.strip()).date()
        except (ValueError, OverflowError):
            self.fail("invalid", format="YYYY-MM-DD")


def positive_amount(label, source):
    return serializers.DecimalField(
        source=source,
        max_digits=15,
        decimal_places=2,
        min_value=Decimal("0.01"),
        error_messages={"min_value": f"{label} must be positive"},
    )


class ReceiptSerializer(serializers.ModelSerializer):
    bookNumber = serializers.CharField(source="book_number", max_length=50)
    receiptNumber = serializers.CharField(source="receipt_number", max_length=50)
    date = FlexibleDateField()
    traderName = serializers.CharField(source="trader_name", max_length=255)
    payeeName = serializers.CharField(source="payee_name", max_length=255)
    commodity = serializers.CharField(max_length=100)
    transactionValue = positive_amount("Transaction value", "transaction_value")
    marketFee = positive_amount("Market fee", "market_fee")
    natureOfReceipt = serializers.ChoiceField(source="nature_of_receipt", choices=Receipt.NATURE_CHOICES)
    natureOfReceiptOther = serializers.CharField(
        source="nature_of_receipt_other", required=False, allow_blank=True, allow_null=True
    )
    collectionLocation = serializers.ChoiceField(
        source="collection_location", choices=Receipt.LOCATION_CHOICES
    )
    collectionLocationOther = serializers.CharField(
        source="collection_location_other", required=False, allow_blank=True, allow_null=True
    )
    checkpostId = serializers.PrimaryKeyRelatedField(
        source="checkpost",
        queryset=Checkpost.objects.active(),
        required=False,
        allow_null=True,
    )
    checkpostName = serializers.CharField(write_only=True, required=False, allow_blank=True, allow_null=True)
    supervisorName = serializers.CharField(
        source="supervisor_name", required=False, allow_blank=True, allow_null=True
    )
    remarks = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    committeeId = serializers.PrimaryKeyRelatedField(
        source="committee", queryset=Committee.objects.active()
    )
    financialYear = serializers.CharField(source="financial_year", max_length=7)

    committee = CommitteeSummarySerializer(read_only=True)
    checkpost = CheckpostSummarySerializer(read_only=True)
    createdBy = serializers.PrimaryKeyRelatedField(source="created_by", read_only=True)
    updatedBy = serializers.PrimaryKeyRelatedField(source="updated_by", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Receipt
        fields = [
            "id",
            "bookNumber",
            "receiptNumber",
            "date",
            "traderName",
            "payeeName",
            "commodity",
            "transactionValue",
            "marketFee",
            "natureOfReceipt",
            "natureOfReceiptOther",
            "collectionLocation",
            "collectionLocationOther",
            "checkpostId",
            "checkpostName",
            "supervisorName",
            "remarks",
            "committeeId",
            "financialYear",
            "committee",
            "checkpost",
            "createdBy",
            "updatedBy",
            "isActive",
            "createdAt",
            "updatedAt",
        ]
        # (book, receipt, committee) uniqueness is a 409, raised by ReceiptService
        validators = []

    def validate_financialYear(self, value):
        if not is_valid_financial_year(value):
            raise serializers.ValidationError('Expected a label like "2025-26".')
        return value

    def _effective(self, attrs, key):
        if key in attrs:
            return attrs[key]
        if self.instance is not None:
            return getattr(self.instance, key)
        return None

    def validate(self, attrs):
        committee = self._effective(attrs, "committee")
        checkpost_name = attrs.pop("checkpostName", None)

        location = self._effective(attrs, "collection_location")
        checkpost = attrs.get("checkpost", None)
        if checkpost is None and checkpost_name and location == Receipt.CHECKPOST:
            checkpost = ReceiptValidationService.resolve_checkpost(committee, checkpost_name)
            if checkpost is None:
                raise serializers.ValidationError(
                    f"Checkpost '{checkpost_name}' not found for committee '{committee.code}'"
                )
            attrs["checkpost"] = checkpost

        merged = {
            key: self._effective(attrs, key)
            for key in (
                "nature_of_receipt",
                "nature_of_receipt_other",
                "collection_location",
                "checkpost",
                "supervisor_name",
            )
        }
        errors = ReceiptValidationService.check_conditional_fields(merged)
        if errors:
            raise serializers.ValidationError(errors)

        # the stored checkpost counts too when only committeeId changes
        checkpost = merged["checkpost"]
        if checkpost is not None and committee is not None and checkpost.committee_id != committee.pk:
            raise serializers.ValidationError(
                {"checkpostId": "Checkpost does not belong to the selected committee."}
            )

        attrs["nature_of_receipt_other"] = merged["nature_of_receipt_other"]
        attrs["checkpost"] = merged["checkpost"]
        return attrs


class ReceiptImportRowSerializer(ReceiptSerializer):
    """One spreadsheet row; the committee is identified by its code."""

    committeeId = serializers.PrimaryKeyRelatedField(
        source="committee", queryset=Committee.objects.active(), required=False
    )
    committeeCode = serializers.CharField(write_only=True)

    class Meta(ReceiptSerializer.Meta):
        fields = ReceiptSerializer.Meta.fields + ["committeeCode"]

    def validate(self, attrs):
        code = attrs.pop("committeeCode")
        committees = self.context.setdefault("committees_by_code", {})
        if code not in committees:
            committees[code] = Committee.objects.active().filter(code=code).first()
        committee = committees[code]
        if committee is None:
            raise serializers.ValidationError(f"Committee with code '{code}' not found")
        attrs["committee"] = committee
        return super().validate(attrs)


class ReceiptBulkCreateSerializer(serializers.Serializer):
    receipts = ReceiptSerializer(many=True)

    def validate_receipts(self, value):
        if not value:
            raise serializers.ValidationError("At least one receipt is required.")
        if len(value) > BULK_CREATE_LIMIT:
            raise serializers.ValidationError(
                f"At most {BULK_CREATE_LIMIT} receipts can be created at once."
            )
        return value


class ReceiptBulkUpdateItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    data = serializers.DictField()


class ReceiptBulkUpdateSerializer(serializers.Serializer):
    updates = ReceiptBulkUpdateItemSerializer(many=True)

    def validate_updates(self, value):
        if not value:
            raise serializers.ValidationError("At least one update is required.")
        if len(value) > BULK_UPDATE_LIMIT:
            raise serializers.ValidationError(
                f"At most {BULK_UPDATE_LIMIT} receipts can be updated at once."
            )
        return value


class ReceiptImportSerializer(serializers.Serializer):
    receipts = serializers.ListField(child=serializers.DictField(), allow_empty=False)
    validateOnly = serializers.BooleanField(required=False, default=False)

    def validate_receipts(self, value):
        if len(value) > IMPORT_LIMIT:
            raise serializers.ValidationError(f"At most {IMPORT_LIMIT} rows can be imported at once.")
        return value
