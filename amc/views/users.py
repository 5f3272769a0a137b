# amc/views/users.py
from django.db import transaction
from rest_framework import generics
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.views import APIView

from amc.filters import UserFilter, apply_sort
from amc.models import AuditLog, User
from amc.permissions import IsAdmin
from amc.responses import success_response
from amc.serializers.auth_serializers import UserSerializer, UserUpdateSerializer
from amc.services.AuditService import AuditService

USER_SORT_FIELDS = {"name": "name", "email": "email", "role": "role", "createdAt": "created_at"}


def get_active_user(pk):
    user = User.objects.active().filter(pk=pk).first()
    if user is None:
        raise NotFound("User not found")
    return user


class UserListView(generics.ListAPIView):
    serializer_class = UserSerializer
    filterset_class = UserFilter
    permission_classes = [IsAdmin]

    def get_queryset(self):
        return apply_sort(User.objects.active(), self.request.query_params, USER_SORT_FIELDS, "created_at")


class UserDetailView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, pk):
        return success_response(UserSerializer(get_active_user(pk)).data)

    def put(self, request, pk):
        user = get_active_user(pk)
        old_values = AuditService.snapshot(user)
        serializer = UserUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            user = serializer.save()
            AuditService.record(
                "users",
                user.pk,
                AuditLog.UPDATE,
                old_values=old_values,
                new_values=AuditService.snapshot(user),
                request=request,
            )
        return success_response(UserSerializer(user).data, "User updated successfully")

    def delete(self, request, pk):
        user = get_active_user(pk)
        if user.pk == request.user.pk:
            raise ValidationError("You cannot delete your own account")
        old_values = AuditService.snapshot(user)
        with transaction.atomic():
            user.soft_delete()
            AuditService.record(
                "users",
                user.pk,
                AuditLog.DELETE,
                old_values=old_values,
                new_values={"isActive": False, "deletedAt": user.deleted_at},
                request=request,
            )
        return success_response(message="User deleted successfully")
