# amc_config/middleware.py
import logging

from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First hop of X-Forwarded-For, falling back to REMOTE_ADDR."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.META.get("HTTP_X_REAL_IP") or request.META.get("REMOTE_ADDR")


class AuditContextMiddleware(MiddlewareMixin):
    """
    Attaches request metadata consumed by audit-log rows.

    Sets ``request.audit_ip`` and ``request.audit_user_agent`` on every
    request. Authentication itself is left to DRF's authentication classes.
    """

    def process_request(self, request):
        # Skip OPTIONS (CORS preflight)
        if request.method == "OPTIONS":
            return None

        request.audit_ip = get_client_ip(request)
        request.audit_user_agent = request.META.get("HTTP_USER_AGENT", "")[:500]
        return None

    def process_response(self, request, response):
        if response.status_code >= 500:
            logger.error("%s %s -> %s", request.method, request.path, response.status_code)
        return response
