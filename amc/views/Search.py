# amc/views/Search.py
from django.db.models import Count, Q
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework.exceptions import ValidationError
from rest_framework.views import APIView

from amc.models import Checkpost, Committee, Receipt
from amc.pagination import pagination_block, parse_page_params
from amc.responses import success_response

SEARCH_TYPES = ("all", "receipts", "committees", "checkposts")
MIN_QUERY_LENGTH = 2
ALL_TYPES_LIMIT = 5


def receipt_matches(term):
    return (
        Receipt.objects.active()
        .filter(
            Q(receipt_number__icontains=term)
            | Q(book_number__icontains=term)
            | Q(trader_name__icontains=term)
            | Q(payee_name__icontains=term)
            | Q(commodity__icontains=term)
        )
        .select_related("committee")
        .order_by("-date", "-id")
    )


def committee_matches(term):
    return (
        Committee.objects.active()
        .filter(Q(name__icontains=term) | Q(code__icontains=term) | Q(district__icontains=term))
        .annotate(
            receipt_total=Count(
                "receipts",
                filter=Q(receipts__is_active=True, receipts__deleted_at__isnull=True),
                distinct=True,
            ),
            checkpost_total=Count(
                "checkposts",
                filter=Q(checkposts__is_active=True, checkposts__deleted_at__isnull=True),
                distinct=True,
            ),
        )
        .order_by("name")
    )


def checkpost_matches(term):
    return (
        Checkpost.objects.active()
        .filter(Q(name__icontains=term) | Q(location__icontains=term))
        .select_related("committee")
        .order_by("name")
    )


def receipt_item(receipt):
    return {
        "id": receipt.pk,
        "type": "receipt",
        "title": f"Receipt {receipt.book_number}/{receipt.receipt_number}",
        "subtitle": f"{receipt.trader_name} - {receipt.commodity} ({receipt.committee.name})",
        "amount": float(receipt.market_fee),
        "date": receipt.date.isoformat(),
        "url": f"/receipts/{receipt.pk}",
    }


def committee_item(committee):
    return {
        "id": committee.pk,
        "type": "committee",
        "title": committee.name,
        "subtitle": f"{committee.code} - {committee.district}",
        "stats": {"receipts": committee.receipt_total, "checkposts": committee.checkpost_total},
        "url": f"/committees/{committee.pk}",
    }


def checkpost_item(checkpost):
    return {
        "id": checkpost.pk,
        "type": "checkpost",
        "title": checkpost.name,
        "subtitle": f"{checkpost.committee.name} ({checkpost.committee.code})",
        "url": f"/checkposts/{checkpost.pk}",
    }


SEARCHES = {
    "receipts": (receipt_matches, receipt_item),
    "committees": (committee_matches, committee_item),
    "checkposts": (checkpost_matches, checkpost_item),
}


class SearchView(APIView):
    """
    Global search across receipts, committees and checkposts.
    """

    @swagger_auto_schema(
        operation_summary="Search",
        operation_description="""
            type=all returns up to 5 matches of each kind; a single type is paginated.
            The search term must be at least 2 characters.
        """,
        manual_parameters=[
            openapi.Parameter("search", openapi.IN_QUERY, type=openapi.TYPE_STRING, required=True),
            openapi.Parameter("type", openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=list(SEARCH_TYPES)),
            openapi.Parameter("page", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
            openapi.Parameter("limit", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
        ],
    )
    def get(self, request):
        params = request.query_params
        term = (params.get("search") or params.get("q") or "").strip()
        if len(term) < MIN_QUERY_LENGTH:
            raise ValidationError("Search query must be at least 2 characters")
        search_type = (params.get("type") or "all").lower()
        if search_type not in SEARCH_TYPES:
            raise ValidationError({"type": f"Must be one of {', '.join(SEARCH_TYPES)}."})

        if search_type == "all":
            results = {}
            total = 0
            for name, (matches, to_item) in SEARCHES.items():
                queryset = matches(term)
                count = queryset.count()
                total += count
                results[name] = [to_item(row) for row in queryset[:ALL_TYPES_LIMIT]]
            return success_response(
                {"query": term, "type": search_type, "results": results, "totalResults": total}
            )

        page, limit = parse_page_params(params)
        matches, to_item = SEARCHES[search_type]
        queryset = matches(term)
        count = queryset.count()
        offset = (page - 1) * limit
        items = [to_item(row) for row in queryset[offset:offset + limit]]
        return success_response(
            {"query": term, "type": search_type, "results": {search_type: items}, "totalResults": count},
            pagination=pagination_block(page, limit, count),
        )
