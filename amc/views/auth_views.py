# amc/views/auth_views.py
import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from django.db import transaction
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from amc.exceptions import ConflictError
from amc.models import AuditLog, User
from amc.responses import created_response, error_response, success_response
from amc.serializers.auth_serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    RegisterSerializer,
    UserSerializer,
    issue_token,
)
from amc.services.AuditService import AuditService

logger = logging.getLogger(__name__)


class LoginView(APIView):
    authentication_classes = []

    @swagger_auto_schema(
        operation_summary="Log in",
        request_body=LoginSerializer,
        responses={200: "Token and user", 401: "Invalid credentials"},
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"].strip().lower()

        user = authenticate(request, email=email, password=serializer.validated_data["password"])
        if user is None:
            logger.warning("Failed login for %s", email)
            return error_response("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

        update_last_login(None, user)
        AuditService.record(
            "users",
            user.pk,
            AuditLog.LOGIN,
            new_values={"email": user.email, "lastLogin": user.last_login},
            user=user,
            request=request,
        )
        logger.info("User %s logged in", user.email)
        return success_response(
            {"token": issue_token(user), "user": UserSerializer(user).data},
            "Login successful",
        )


class RegisterView(APIView):
    """
    Public sign-up creates USER or VIEWER accounts; only an authenticated
    ADMIN may register ADMIN or MANAGER accounts.
    """

    @swagger_auto_schema(operation_summary="Register a user", request_body=RegisterSerializer)
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        is_admin = request.user.is_authenticated and request.user.role == User.ADMIN
        if data["role"] in (User.ADMIN, User.MANAGER) and not is_admin:
            raise ValidationError({"role": "Only administrators can assign this role."})
        if User.objects.filter(email=data["email"]).exists():
            raise ConflictError("User with this email already exists")

        with transaction.atomic():
            user = User.objects.create_user(
                data["email"], data["password"], name=data["name"], role=data["role"]
            )
            AuditService.record(
                "users",
                user.pk,
                AuditLog.CREATE,
                new_values=AuditService.snapshot(user),
                user=request.user if request.user.is_authenticated else user,
                request=request,
            )
        logger.info("User %s registered with role %s", user.email, user.role)
        return created_response(
            {"token": issue_token(user), "user": UserSerializer(user).data},
            "User registered successfully",
        )


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return success_response(UserSerializer(request.user).data)


class LogoutView(APIView):
    """Tokens are stateless; logging out only leaves a trail in the audit log."""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        AuditService.record(
            "users",
            request.user.pk,
            AuditLog.LOGOUT,
            new_values={"email": request.user.email},
            request=request,
        )
        return success_response(message="Logged out successfully")


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(operation_summary="Change password", request_body=ChangePasswordSerializer)
    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = request.user
        if not user.check_password(serializer.validated_data["currentPassword"]):
            raise ValidationError({"currentPassword": "Current password is incorrect"})

        user.set_password(serializer.validated_data["newPassword"])
        user.save(update_fields=["password", "updated_at"])
        AuditService.record(
            "users",
            user.pk,
            AuditLog.UPDATE,
            new_values={"passwordChanged": True},
            request=request,
        )
        return success_response(message="Password changed successfully")
