# amc/filters.py
import django_filters
from django.db.models import Q
from rest_framework.exceptions import ValidationError

from amc.models import AuditLog, Checkpost, Committee, Receipt, Target, User

SORT_ORDERS = ("asc", "desc")


def int_param(params, name):
    """Optional positive integer query parameter (e.g. ``committeeId``)."""
    raw = params.get(name)
    if raw in (None, ""):
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: "Must be a whole number."})
    if value < 1:
        raise ValidationError({name: "Must be a positive number."})
    return value


def bool_param(params, name, default=False):
    raw = params.get(name)
    if raw in (None, ""):
        return default
    return str(raw).strip().lower() in ("true", "1", "yes")


def apply_sort(queryset, params, allowed, default):
    """
    Order by ``sortBy`` / ``sortOrder`` from the query string.

    ``allowed`` maps camelCase API names to model fields; unknown names fall
    back to ``default``.
    """
    sort_by = params.get("sortBy")
    sort_order = (params.get("sortOrder") or "desc").lower()
    if sort_order not in SORT_ORDERS:
        sort_order = "desc"
    field = allowed.get(sort_by, default)
    prefix = "-" if sort_order == "desc" else ""
    return queryset.order_by(f"{prefix}{field}", f"{prefix}id")


class ReceiptFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method="filter_search")
    startDate = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    endDate = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    financialYear = django_filters.CharFilter(field_name="financial_year")
    committeeId = django_filters.NumberFilter(field_name="committee_id")
    checkpostId = django_filters.NumberFilter(field_name="checkpost_id")
    natureOfReceipt = django_filters.ChoiceFilter(
        field_name="nature_of_receipt", choices=Receipt.NATURE_CHOICES
    )
    collectionLocation = django_filters.ChoiceFilter(
        field_name="collection_location", choices=Receipt.LOCATION_CHOICES
    )
    commodity = django_filters.CharFilter(field_name="commodity", lookup_expr="iexact")

    class Meta:
        model = Receipt
        fields = []

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(receipt_number__icontains=value)
            | Q(book_number__icontains=value)
            | Q(trader_name__icontains=value)
            | Q(payee_name__icontains=value)
            | Q(commodity__icontains=value)
        )


class CommitteeFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method="filter_search")
    hasCheckposts = django_filters.BooleanFilter(field_name="has_checkposts")
    district = django_filters.CharFilter(field_name="district", lookup_expr="iexact")

    class Meta:
        model = Committee
        fields = []

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(name__icontains=value) | Q(code__icontains=value))


class CheckpostFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    committeeId = django_filters.NumberFilter(field_name="committee_id")

    class Meta:
        model = Checkpost
        fields = []


class TargetFilter(django_filters.FilterSet):
    committeeId = django_filters.NumberFilter(field_name="committee_id")
    financialYear = django_filters.CharFilter(field_name="financial_year")

    class Meta:
        model = Target
        fields = []


class UserFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method="filter_search")
    role = django_filters.ChoiceFilter(choices=User.ROLE_CHOICES)

    class Meta:
        model = User
        fields = []

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(name__icontains=value) | Q(email__icontains=value))


class AuditLogFilter(django_filters.FilterSet):
    tableName = django_filters.CharFilter(field_name="table_name")
    recordId = django_filters.CharFilter(field_name="record_id")
    action = django_filters.ChoiceFilter(choices=AuditLog.ACTION_CHOICES)
    userId = django_filters.NumberFilter(field_name="user_id")
    startDate = django_filters.DateFilter(field_name="timestamp", lookup_expr="date__gte")
    endDate = django_filters.DateFilter(field_name="timestamp", lookup_expr="date__lte")

    class Meta:
        model = AuditLog
        fields = []
