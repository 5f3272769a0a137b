# amc/services/TargetService.py
import logging
from decimal import Decimal, ROUND_DOWN

from django.db import transaction
from django.db.models import Prefetch
from rest_framework.exceptions import NotFound

from amc.exceptions import ConflictError
from amc.models import CheckpostTarget, MonthlyTarget, Target
from amc.services.AuditService import AuditService
from amc.services.financial_year import FY_MONTHS
from amc.services.ReceiptService import acting_user

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class TargetService:
    @staticmethod
    def active_queryset():
        return (
            Target.objects.active()
            .select_related("committee")
            .prefetch_related(
                "monthly_targets",
                Prefetch(
                    "checkpost_targets",
                    queryset=CheckpostTarget.objects.select_related("checkpost"),
                ),
            )
        )

    @staticmethod
    def get_active(target_id):
        target = TargetService.active_queryset().filter(pk=target_id).first()
        if target is None:
            raise NotFound("Target not found")
        return target

    @staticmethod
    def current_target(committee_id, financial_year):
        """Active target of a committee; the most recently created wins if several exist."""
        return (
            Target.objects.active()
            .filter(committee_id=committee_id, financial_year=financial_year)
            .order_by("-created_at", "-id")
            .first()
        )

    @staticmethod
    def split_evenly(yearly_target):
        """Twelve monthly amounts; April absorbs the rounding remainder."""
        share = (Decimal(yearly_target) / 12).quantize(CENT, rounding=ROUND_DOWN)
        amounts = {month: share for month in FY_MONTHS}
        amounts["APRIL"] = Decimal(yearly_target) - share * 11
        return [{"month": month, "amount": amounts[month]} for month in FY_MONTHS]

    @staticmethod
    def snapshot(target):
        data = AuditService.snapshot(target)
        data["monthlyTargets"] = [
            {"month": row.month, "amount": row.amount} for row in target.monthly_targets.all()
        ]
        data["checkpostTargets"] = [
            {"checkpostId": row.checkpost_id, "month": row.month, "amount": row.amount}
            for row in target.checkpost_targets.all()
        ]
        return AuditService.clean(data)

    @staticmethod
    def _write_children(target, monthly_rows, checkpost_rows):
        MonthlyTarget.objects.bulk_create(
            [MonthlyTarget(target=target, month=row["month"], amount=row["amount"]) for row in monthly_rows]
        )
        CheckpostTarget.objects.bulk_create(
            [
                CheckpostTarget(
                    target=target,
                    checkpost=row["checkpost"],
                    month=row["month"],
                    amount=row["amount"],
                )
                for row in checkpost_rows
            ]
        )

    @staticmethod
    @transaction.atomic
    def create_target(validated_data, request=None):
        committee = validated_data["committee"]
        financial_year = validated_data["financial_year"]
        if TargetService.current_target(committee.pk, financial_year) is not None:
            raise ConflictError(
                f"An active target already exists for {committee.code} in {financial_year}"
            )

        monthly_rows = validated_data.pop("monthly_targets", None) or TargetService.split_evenly(
            validated_data["yearly_target"]
        )
        checkpost_rows = validated_data.pop("checkpost_targets", None) or []

        user = acting_user(request)
        target = Target.objects.create(**validated_data, created_by=user)
        TargetService._write_children(target, monthly_rows, checkpost_rows)

        target = TargetService.get_active(target.pk)
        AuditService.record(
            "targets",
            target.pk,
            "CREATE",
            new_values=TargetService.snapshot(target),
            user=user,
            request=request,
        )
        logger.info("Target %s created for %s %s", target.pk, committee.code, financial_year)
        return target

    @staticmethod
    @transaction.atomic
    def update_target(target, validated_data, request=None):
        """
        Update yearly fields; a supplied ``monthlyTargets`` or
        ``checkpostTargets`` list replaces the stored rows wholesale.
        """
        old_values = TargetService.snapshot(target)
        monthly_rows = validated_data.pop("monthly_targets", None)
        checkpost_rows = validated_data.pop("checkpost_targets", None)

        committee = validated_data.get("committee", target.committee)
        financial_year = validated_data.get("financial_year", target.financial_year)
        clash = (
            Target.objects.active()
            .filter(committee=committee, financial_year=financial_year)
            .exclude(pk=target.pk)
            .exists()
        )
        if clash:
            raise ConflictError(
                f"An active target already exists for {committee.code} in {financial_year}"
            )

        for field, value in validated_data.items():
            setattr(target, field, value)
        target.save()

        if monthly_rows is not None:
            target.monthly_targets.all().delete()
            TargetService._write_children(target, monthly_rows, [])
        if checkpost_rows is not None:
            target.checkpost_targets.all().delete()
            TargetService._write_children(target, [], checkpost_rows)

        target = TargetService.get_active(target.pk)
        AuditService.record(
            "targets",
            target.pk,
            "UPDATE",
            old_values=old_values,
            new_values=TargetService.snapshot(target),
            request=request,
        )
        return target

    @staticmethod
    @transaction.atomic
    def delete_target(target, request=None):
        old_values = TargetService.snapshot(target)
        target.soft_delete()
        AuditService.record(
            "targets",
            target.pk,
            "DELETE",
            old_values=old_values,
            new_values={"isActive": False, "deletedAt": target.deleted_at},
            request=request,
        )
        logger.info("Target %s soft-deleted", target.pk)
        return target
