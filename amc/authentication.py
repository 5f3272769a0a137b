# amc/authentication.py
import logging

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)


class ActiveUserJWTAuthentication(JWTAuthentication):
    """
    Bearer-token authentication that only admits users who are still active.

    simplejwt already rejects ``is_active=False``; soft-deleted accounts are
    rejected here as well so a token issued before removal stops working.
    """

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if user.deleted_at is not None:
            logger.warning("Rejected token for deleted user %s", user.pk)
            raise AuthenticationFailed("User is inactive", code="user_inactive")
        return user
