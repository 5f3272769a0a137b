# amc/serializers/AuditLogSerializer.py
from rest_framework import serializers

from amc.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    tableName = serializers.CharField(source="table_name")
    recordId = serializers.CharField(source="record_id")
    oldValues = serializers.JSONField(source="old_values")
    newValues = serializers.JSONField(source="new_values")
    userId = serializers.IntegerField(source="user_id")
    user = serializers.SerializerMethodField()
    ipAddress = serializers.CharField(source="ip_address")
    userAgent = serializers.CharField(source="user_agent")

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "tableName",
            "recordId",
            "action",
            "oldValues",
            "newValues",
            "userId",
            "user",
            "ipAddress",
            "userAgent",
            "timestamp",
        ]

    def get_user(self, obj):
        if obj.user is None:
            return None
        return {"id": obj.user.pk, "name": obj.user.name, "email": obj.user.email}
