# amc/pagination.py
import math

from rest_framework.exceptions import ValidationError
from rest_framework.pagination import BasePagination

from amc.responses import success_response

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def parse_page_params(query_params):
    """
    Read ``page`` and ``limit`` from the query string.

    ``page`` must be a positive integer; ``limit`` is clamped to [1, 100].
    """
    raw_page = query_params.get("page") or "1"
    try:
        page = int(raw_page)
    except (TypeError, ValueError):
        raise ValidationError({"page": "Must be a whole number."})
    if page < 1:
        raise ValidationError({"page": "Must be greater than or equal to 1."})

    raw_limit = query_params.get("limit") or str(DEFAULT_LIMIT)
    try:
        limit = int(raw_limit)
    except (TypeError, ValueError):
        raise ValidationError({"limit": "Must be a whole number."})
    limit = max(1, min(MAX_LIMIT, limit))
    return page, limit


def pagination_block(page, limit, total):
    total_pages = math.ceil(total / limit) if total else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def paginate_queryset(queryset, query_params):
    """Slice a queryset; returns ``(rows, pagination)``."""
    page, limit = parse_page_params(query_params)
    total = queryset.count()
    offset = (page - 1) * limit
    rows = list(queryset[offset:offset + limit])
    return rows, pagination_block(page, limit, total)


class EnvelopePagination(BasePagination):
    """page/limit pagination wrapped in the ``{success, data, pagination}`` envelope."""

    def paginate_queryset(self, queryset, request, view=None):
        rows, self.pagination = paginate_queryset(queryset, request.query_params)
        return rows

    def get_paginated_response(self, data):
        return success_response(data, pagination=self.pagination)

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "data": schema,
                "pagination": {"type": "object"},
            },
        }
