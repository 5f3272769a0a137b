# amc/services/ReceiptService.py
import logging

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from amc.exceptions import BatchValidationError, ConflictError, flatten_errors
from amc.models import Receipt
from amc.services.AuditService import AuditService
from amc.services.receipt_validation import ReceiptValidationService

logger = logging.getLogger(__name__)

DUPLICATE_RECEIPT_MESSAGE = "Receipt number already exists for this book and committee"


def acting_user(request):
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return user
    return None


class ReceiptService:
    @staticmethod
    def active_queryset():
        return Receipt.objects.active().select_related(
            "committee", "checkpost", "created_by", "updated_by"
        )

    @staticmethod
    def get_active(receipt_id):
        receipt = ReceiptService.active_queryset().filter(pk=receipt_id).first()
        if receipt is None:
            raise NotFound("Receipt not found")
        return receipt

    # ========================
    # Single receipt
    # ========================
    @staticmethod
    @transaction.atomic
    def create_receipt(validated_data, request=None):
        if ReceiptValidationService.find_existing_duplicates([validated_data]):
            raise ConflictError(DUPLICATE_RECEIPT_MESSAGE)

        user = acting_user(request)
        receipt = Receipt(**validated_data, created_by=user)
        receipt.full_clean(validate_unique=False, validate_constraints=False)
        receipt.save()

        AuditService.record(
            "receipts",
            receipt.pk,
            "CREATE",
            new_values=AuditService.snapshot(receipt),
            user=user,
            request=request,
        )
        logger.info(
            "Receipt %s/%s created for committee %s",
            receipt.book_number,
            receipt.receipt_number,
            receipt.committee_id,
        )
        return receipt

    @staticmethod
    @transaction.atomic
    def update_receipt(receipt, validated_data, request=None):
        old_values = AuditService.snapshot(receipt)
        candidate = {
            "book_number": validated_data.get("book_number", receipt.book_number),
            "receipt_number": validated_data.get("receipt_number", receipt.receipt_number),
            "committee": validated_data.get("committee", receipt.committee),
        }
        if ReceiptValidationService.find_existing_duplicates([candidate], exclude_ids=[receipt.pk]):
            raise ConflictError(DUPLICATE_RECEIPT_MESSAGE)

        user = acting_user(request)
        ReceiptService._apply(receipt, validated_data, user)

        AuditService.record(
            "receipts",
            receipt.pk,
            "UPDATE",
            old_values=old_values,
            new_values=AuditService.snapshot(receipt),
            user=user,
            request=request,
        )
        logger.info("Receipt %s updated", receipt.pk)
        return receipt

    @staticmethod
    @transaction.atomic
    def delete_receipt(receipt, request=None):
        old_values = AuditService.snapshot(receipt)
        receipt.soft_delete()
        AuditService.record(
            "receipts",
            receipt.pk,
            "DELETE",
            old_values=old_values,
            new_values={"isActive": False, "deletedAt": receipt.deleted_at},
            request=request,
        )
        logger.info("Receipt %s soft-deleted", receipt.pk)
        return receipt

    @staticmethod
    def _apply(receipt, validated_data, user):
        for field, value in validated_data.items():
            setattr(receipt, field, value)
        receipt.updated_by = user
        receipt.full_clean(validate_unique=False, validate_constraints=False)
        receipt.save()

    # ========================
    # Batches
    # ========================
    @staticmethod
    def _reject_duplicates(rows, exclude_ids=None):
        in_batch = ReceiptValidationService.find_batch_duplicates(rows)
        if in_batch:
            logger.warning("Batch rejected, duplicate keys inside batch: %s", in_batch)
            raise ValidationError(
                "Duplicate receipt numbers found in the batch: "
                + ReceiptValidationService.format_keys(in_batch)
            )
        existing = ReceiptValidationService.find_existing_duplicates(rows, exclude_ids=exclude_ids)
        if existing:
            logger.warning("Batch rejected, %s receipts already exist", len(existing))
            raise ConflictError(
                "Duplicate receipts found: " + ReceiptValidationService.format_keys(existing)
            )

    @staticmethod
    def _create_rows(rows, request, extra_audit=None):
        user = acting_user(request)
        created = []
        for row in rows:
            receipt = Receipt(**row, created_by=user)
            receipt.full_clean(validate_unique=False, validate_constraints=False)
            receipt.save()
            new_values = AuditService.snapshot(receipt)
            if extra_audit:
                new_values.update(extra_audit)
            AuditService.record(
                "receipts", receipt.pk, "CREATE", new_values=new_values, user=user, request=request
            )
            created.append(receipt)
        return created

    @staticmethod
    @transaction.atomic
    def bulk_create(rows, request=None):
        """All-or-nothing creation of already-validated rows."""
        ReceiptService._reject_duplicates(rows)
        created = ReceiptService._create_rows(rows, request)
        logger.info("Bulk created %s receipts", len(created))
        return created

    @staticmethod
    @transaction.atomic
    def bulk_update(updates, request=None, serializer_class=None):
        """
        Apply ``[{"id": .., "data": {..}}]`` partial updates as one unit.

        Every item is validated before anything is written; all failures are
        reported together.
        """
        ids = [item["id"] for item in updates]
        receipts = {r.pk: r for r in ReceiptService.active_queryset().filter(pk__in=ids)}
        missing = [str(pk) for pk in ids if pk not in receipts]
        if missing:
            raise NotFound("Receipts not found: " + ", ".join(missing))
        if len(set(ids)) != len(ids):
            raise ValidationError("Each receipt may appear only once in a bulk update.")

        errors = []
        validated = []
        for index, item in enumerate(updates, start=1):
            receipt = receipts[item["id"]]
            serializer = serializer_class(instance=receipt, data=item["data"], partial=True)
            if not serializer.is_valid():
                errors.extend(
                    f"Update {index} (id {receipt.pk}): {message}"
                    for message in flatten_errors(serializer.errors)
                )
                continue
            validated.append((receipt, serializer.validated_data))
        if errors:
            raise BatchValidationError(errors)

        keys = [
            {
                "book_number": data.get("book_number", receipt.book_number),
                "receipt_number": data.get("receipt_number", receipt.receipt_number),
                "committee": data.get("committee", receipt.committee),
            }
            for receipt, data in validated
        ]
        ReceiptService._reject_duplicates(keys, exclude_ids=ids)

        user = acting_user(request)
        updated = []
        for receipt, data in validated:
            old_values = AuditService.snapshot(receipt)
            ReceiptService._apply(receipt, data, user)
            AuditService.record(
                "receipts",
                receipt.pk,
                "UPDATE",
                old_values=old_values,
                new_values=AuditService.snapshot(receipt),
                user=user,
                request=request,
            )
            updated.append(receipt)
        logger.info("Bulk updated %s receipts", len(updated))
        return updated

    @staticmethod
    def validate_import_rows(rows, serializer_class):
        """Validate spreadsheet rows; returns validated dicts or raises with every row's errors."""
        context = {}
        errors = []
        validated = []
        for row_number, row in enumerate(rows, start=1):
            serializer = serializer_class(data=row, context=context)
            if not serializer.is_valid():
                errors.append(f"Row {row_number}: " + ", ".join(flatten_errors(serializer.errors)))
                continue
            validated.append(serializer.validated_data)
        if errors:
            logger.warning("Import rejected with %s invalid rows", len(errors))
            raise BatchValidationError(errors)
        return validated

    @staticmethod
    @transaction.atomic
    def import_receipts(rows, serializer_class, validate_only=False, request=None):
        validated = ReceiptService.validate_import_rows(rows, serializer_class)
        ReceiptService._reject_duplicates(validated)
        if validate_only:
            return validated, []

        user = acting_user(request)
        created = ReceiptService._create_rows(
            validated, request, extra_audit={"importedBy": user.pk if user else None}
        )
        logger.info("Imported %s receipts", len(created))
        return validated, created
