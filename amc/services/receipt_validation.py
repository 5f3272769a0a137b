# amc/services/receipt_validation.py

from collections import Counter

from django.db.models import Q

from amc.models import Checkpost, Receipt


class ReceiptValidationService:
    """
    Rules shared by single, bulk and imported receipts.

    Field-shape checks live on the serializers; this class holds the
    cross-field and cross-row rules.
    """

    @staticmethod
    def check_conditional_fields(attrs):
        """
        Validate fields whose presence depends on another field.

        Returns a dict of ``{field: message}``; empty when valid. Mutates
        ``attrs`` to drop values that do not apply (e.g. a checkpost on an
        OFFICE receipt).
        """
        errors = {}

        nature = attrs.get("nature_of_receipt")
        if nature == Receipt.OTHERS:
            if not (attrs.get("nature_of_receipt_other") or "").strip():
                errors["natureOfReceiptOther"] = "Required when natureOfReceipt is OTHERS."
        elif nature == Receipt.MF:
            attrs["nature_of_receipt_other"] = None

        location = attrs.get("collection_location")
        if location == Receipt.CHECKPOST:
            if attrs.get("checkpost") is None:
                errors["checkpostName"] = "Required when collectionLocation is CHECKPOST."
        else:
            attrs["checkpost"] = None

        if location == Receipt.SUPERVISOR:
            if not (attrs.get("supervisor_name") or "").strip():
                errors["supervisorName"] = "Required when collectionLocation is SUPERVISOR."

        return errors

    @staticmethod
    def resolve_checkpost(committee, name):
        if committee is None or not name:
            return None
        return (
            Checkpost.objects.active()
            .filter(committee=committee, name__iexact=name.strip())
            .first()
        )

    @staticmethod
    def receipt_key(row):
        committee = row.get("committee")
        committee_id = committee.pk if hasattr(committee, "pk") else committee
        return (row.get("book_number"), row.get("receipt_number"), committee_id)

    @staticmethod
    def find_batch_duplicates(rows):
        """Keys that occur more than once within the submitted rows."""
        counts = Counter(ReceiptValidationService.receipt_key(row) for row in rows)
        return [key for key, count in counts.items() if count > 1]

    @staticmethod
    def find_existing_duplicates(rows, exclude_ids=None):
        """Active receipts already holding any of the rows' keys."""
        keys = {ReceiptValidationService.receipt_key(row) for row in rows}
        if not keys:
            return []
        condition = Q()
        for book_number, receipt_number, committee_id in keys:
            condition |= Q(
                book_number=book_number,
                receipt_number=receipt_number,
                committee_id=committee_id,
            )
        queryset = Receipt.objects.active().filter(condition)
        if exclude_ids:
            queryset = queryset.exclude(pk__in=exclude_ids)
        return list(queryset.values_list("book_number", "receipt_number", "committee_id"))

    @staticmethod
    def format_keys(keys):
        return ", ".join(f"{book}-{number}" for book, number, _ in keys)
