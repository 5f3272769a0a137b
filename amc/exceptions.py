"""
Error taxonomy and the DRF exception handler.

Every failure leaves the API as ``{"success": false, "error": "..."}`` with
the status code of its class: 400 validation, 401/403 auth, 404 missing,
409 conflict, 503 unhealthy dependency and 500 for anything unexpected.
"""
import logging

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import ProtectedError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "A record with this information already exists"
NOT_FOUND_MESSAGE = "Record not found"


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = DUPLICATE_MESSAGE
    default_code = "conflict"


class BatchValidationError(ValidationError):
    """Row-numbered validation failures reported together, one per line."""

    def __init__(self, errors, header="Validation failed"):
        super().__init__(list(errors))
        self.header = header


class ServiceUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Service temporarily unavailable"
    default_code = "service_unavailable"


def flatten_errors(detail, path=""):
    """
    Turn DRF's nested error structure into ``"path: message"`` strings.

    ``{"receipts": [{}, {"marketFee": ["Must be positive"]}]}`` becomes
    ``["receipts.1.marketFee: Must be positive"]``.
    """
    if isinstance(detail, dict):
        messages = []
        for key, value in detail.items():
            if key == "non_field_errors":
                child_path = path
            else:
                child_path = f"{path}.{key}" if path else str(key)
            messages.extend(flatten_errors(value, child_path))
        return messages
    if isinstance(detail, (list, tuple)):
        messages = []
        for index, item in enumerate(detail):
            if isinstance(item, (dict, list, tuple)):
                messages.extend(flatten_errors(item, f"{path}.{index}" if path else str(index)))
            else:
                messages.extend(flatten_errors(item, path))
        return messages
    return [f"{path}: {detail}" if path else str(detail)]


def _translate(exc):
    if isinstance(exc, (Http404, ObjectDoesNotExist)):
        return NotFound(NOT_FOUND_MESSAGE)
    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error translated to conflict: %s", exc)
        return ConflictError(DUPLICATE_MESSAGE)
    if isinstance(exc, ProtectedError):
        return ConflictError("Record is still referenced by other records")
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "error_dict"):
            return ValidationError(exc.message_dict)
        return ValidationError(exc.messages)
    return exc


def api_exception_handler(exc, context):
    exc = _translate(exc)
    response = exception_handler(exc, context)

    if response is None:
        set_rollback()
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else "request", exc_info=exc
        )
        return Response(
            {"success": False, "error": "Internal server error", "message": str(exc)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, BatchValidationError):
        errors = flatten_errors(exc.detail)
        body = {"success": False, "error": f"{exc.header}:\n" + "\n".join(errors), "errors": errors}
    elif isinstance(exc, ValidationError):
        errors = flatten_errors(exc.detail)
        body = {"success": False, "error": ", ".join(errors), "errors": errors}
    elif response.status_code == status.HTTP_401_UNAUTHORIZED:
        body = {"success": False, "error": "Unauthorized", "message": _detail_text(exc)}
    elif response.status_code == status.HTTP_403_FORBIDDEN:
        body = {"success": False, "error": "Forbidden", "message": _detail_text(exc)}
    else:
        body = {"success": False, "error": _detail_text(exc)}

    response.data = body
    return response


def _detail_text(exc):
    detail = getattr(exc, "detail", str(exc))
    if isinstance(detail, dict) and "detail" in detail:
        return str(detail["detail"])
    if isinstance(detail, (dict, list)):
        return ", ".join(flatten_errors(detail))
    return str(detail)
