# amc/serializers/TargetSerializer.py
from decimal import Decimal

from rest_framework import serializers

from amc.models import Checkpost, CheckpostTarget, Committee, MonthlyTarget, Target
from amc.models.Target import MONTH_CHOICES
from amc.serializers.CommitteeSerializer import CommitteeSummarySerializer
from amc.services.financial_year import FY_MONTHS, is_valid_financial_year


class MonthField(serializers.ChoiceField):
    """Month name in any case (``June`` / ``JUNE``), stored upper-case."""

    def __init__(self, **kwargs):
        super().__init__(choices=MONTH_CHOICES, **kwargs)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = data.strip().upper()
        return super().to_internal_value(data)


class MonthlyTargetSerializer(serializers.ModelSerializer):
    month = MonthField()
    amount = serializers.DecimalField(
        max_digits=15,
        decimal_places=2,
        min_value=Decimal("0.01"),
        error_messages={"min_value": "Monthly target must be positive"},
    )

    class Meta:
        model = MonthlyTarget
        fields = ["id", "month", "amount"]


class CheckpostTargetSerializer(serializers.ModelSerializer):
    checkpostId = serializers.PrimaryKeyRelatedField(
        source="checkpost", queryset=Checkpost.objects.active()
    )
    checkpostName = serializers.CharField(source="checkpost.name", read_only=True)
    month = MonthField()
    amount = serializers.DecimalField(
        max_digits=15,
        decimal_places=2,
        min_value=Decimal("0.01"),
        error_messages={"min_value": "Checkpost target must be positive"},
    )

    class Meta:
        model = CheckpostTarget
        fields = ["id", "checkpostId", "checkpostName", "month", "amount"]


class TargetSerializer(serializers.ModelSerializer):
    committeeId = serializers.PrimaryKeyRelatedField(
        source="committee", queryset=Committee.objects.active()
    )
    committee = CommitteeSummarySerializer(read_only=True)
    financialYear = serializers.CharField(source="financial_year", max_length=7)
    yearlyTarget = serializers.DecimalField(
        source="yearly_target",
        max_digits=15,
        decimal_places=2,
        min_value=Decimal("0.01"),
        error_messages={"min_value": "Yearly target must be positive"},
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    monthlyTargets = MonthlyTargetSerializer(source="monthly_targets", many=True, required=False)
    checkpostTargets = CheckpostTargetSerializer(source="checkpost_targets", many=True, required=False)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Target
        fields = [
            "id",
            "committeeId",
            "committee",
            "financialYear",
            "yearlyTarget",
            "description",
            "monthlyTargets",
            "checkpostTargets",
            "isActive",
            "createdAt",
            "updatedAt",
        ]
        # one active target per committee and year is a 409 raised by TargetService
        validators = []

    def to_representation(self, instance):
        data = super().to_representation(instance)
        order = {month: index for index, month in enumerate(FY_MONTHS)}
        data["monthlyTargets"] = sorted(data["monthlyTargets"], key=lambda row: order[row["month"]])
        data["checkpostTargets"] = sorted(
            data["checkpostTargets"], key=lambda row: (row["checkpostId"], order[row["month"]])
        )
        return data

    def validate_financialYear(self, value):
        if not is_valid_financial_year(value):
            raise serializers.ValidationError('Expected a label like "2025-26".')
        return value

    def validate_monthlyTargets(self, value):
        months = [row["month"] for row in value]
        if len(months) != len(set(months)):
            raise serializers.ValidationError("Each month may appear only once.")
        return value

    def validate(self, attrs):
        committee = attrs.get("committee") or (self.instance.committee if self.instance else None)
        checkpost_rows = attrs.get("checkpost_targets") or []
        moved = self.instance is not None and committee.pk != self.instance.committee_id
        if moved and "checkpost_targets" not in attrs and self.instance.checkpost_targets.exists():
            raise serializers.ValidationError(
                {"checkpostTargets": "Stored checkpost targets belong to the old committee; supply replacements or an empty list."}
            )
        if checkpost_rows:
            if not committee.has_checkposts:
                raise serializers.ValidationError(
                    {"checkpostTargets": "Committee has no checkposts; checkpost targets are not allowed."}
                )
            seen = set()
            for row in checkpost_rows:
                if row["checkpost"].committee_id != committee.pk:
                    raise serializers.ValidationError(
                        {"checkpostTargets": f"Checkpost {row['checkpost'].pk} does not belong to the committee."}
                    )
                key = (row["checkpost"].pk, row["month"])
                if key in seen:
                    raise serializers.ValidationError(
                        {"checkpostTargets": "Each checkpost and month may appear only once."}
                    )
                seen.add(key)
        return attrs
