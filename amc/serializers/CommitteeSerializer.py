# amc/serializers/CommitteeSerializer.py
from rest_framework import serializers

from amc.models import Committee, Checkpost


class CommitteeSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Committee
        fields = ["id", "name", "code"]


class CheckpostSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Checkpost
        fields = ["id", "name", "location"]


class CheckpostSerializer(serializers.ModelSerializer):
    committeeId = serializers.PrimaryKeyRelatedField(
        source="committee", queryset=Committee.objects.active()
    )
    committee = CommitteeSummarySerializer(read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Checkpost
        fields = [
            "id",
            "name",
            "location",
            "committeeId",
            "committee",
            "isActive",
            "createdAt",
            "updatedAt",
        ]
        # uniqueness among active rows is checked in CommitteeService (409)
        validators = []

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Checkpost name is required")
        return value


class CommitteeSerializer(serializers.ModelSerializer):
    hasCheckposts = serializers.BooleanField(source="has_checkposts", required=False, default=False)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    checkposts = serializers.SerializerMethodField()
    counts = serializers.SerializerMethodField()

    class Meta:
        model = Committee
        fields = [
            "id",
            "name",
            "code",
            "district",
            "state",
            "hasCheckposts",
            "isActive",
            "createdAt",
            "updatedAt",
            "checkposts",
            "counts",
        ]
        extra_kwargs = {
            "name": {"max_length": 255},
            "code": {"max_length": 50, "validators": []},
            "district": {"required": False},
            "state": {"required": False},
        }

    def get_checkposts(self, obj):
        checkposts = [cp for cp in obj.checkposts.all() if cp.is_active and cp.deleted_at is None]
        return CheckpostSummarySerializer(checkposts, many=True).data

    def get_counts(self, obj):
        receipts = getattr(obj, "receipt_count", None)
        targets = getattr(obj, "target_count", None)
        if receipts is None and targets is None:
            return None
        return {"receipts": receipts or 0, "targets": targets or 0}

    def validate_code(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Committee code is required")
        return value

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Committee name is required")
        return value


class CommitteeDetailSerializer(CommitteeSerializer):
    """Committee with its active targets (monthly and checkpost rows included)."""

    targets = serializers.SerializerMethodField()

    class Meta(CommitteeSerializer.Meta):
        fields = CommitteeSerializer.Meta.fields + ["targets"]

    def get_targets(self, obj):
        from amc.serializers.TargetSerializer import TargetSerializer
        from amc.services.TargetService import TargetService

        targets = TargetService.active_queryset().filter(committee=obj).order_by("-financial_year", "-created_at")
        return TargetSerializer(targets, many=True).data
