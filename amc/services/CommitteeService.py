# amc/services/CommitteeService.py
import logging

from django.db import transaction
from django.db.models import Count, Prefetch, Q
from rest_framework.exceptions import NotFound

from amc.exceptions import ConflictError
from amc.models import Checkpost, Committee
from amc.services.AuditService import AuditService
from amc.services.ReceiptService import acting_user

logger = logging.getLogger(__name__)


class CommitteeService:
    @staticmethod
    def active_queryset():
        return (
            Committee.objects.active()
            .prefetch_related(
                Prefetch("checkposts", queryset=Checkpost.objects.active().order_by("name"))
            )
            .annotate(
                receipt_count=Count(
                    "receipts",
                    filter=Q(receipts__is_active=True, receipts__deleted_at__isnull=True),
                    distinct=True,
                ),
                target_count=Count(
                    "targets",
                    filter=Q(targets__is_active=True, targets__deleted_at__isnull=True),
                    distinct=True,
                ),
            )
        )

    @staticmethod
    def get_active(committee_id):
        committee = CommitteeService.active_queryset().filter(pk=committee_id).first()
        if committee is None:
            raise NotFound("Committee not found")
        return committee

    @staticmethod
    @transaction.atomic
    def create_committee(validated_data, request=None):
        if Committee.objects.filter(code=validated_data["code"]).exists():
            raise ConflictError(f"Committee code '{validated_data['code']}' already exists")
        committee = Committee.objects.create(**validated_data)
        AuditService.record(
            "committees",
            committee.pk,
            "CREATE",
            new_values=AuditService.snapshot(committee),
            user=acting_user(request),
            request=request,
        )
        logger.info("Committee %s created", committee.code)
        return CommitteeService.get_active(committee.pk)

    @staticmethod
    @transaction.atomic
    def update_committee(committee, validated_data, request=None):
        code = validated_data.get("code")
        if code and Committee.objects.filter(code=code).exclude(pk=committee.pk).exists():
            raise ConflictError(f"Committee code '{code}' already exists")
        old_values = AuditService.snapshot(committee)
        for field, value in validated_data.items():
            setattr(committee, field, value)
        committee.save()
        AuditService.record(
            "committees",
            committee.pk,
            "UPDATE",
            old_values=old_values,
            new_values=AuditService.snapshot(committee),
            request=request,
        )
        return CommitteeService.get_active(committee.pk)

    @staticmethod
    @transaction.atomic
    def delete_committee(committee, request=None):
        old_values = AuditService.snapshot(committee)
        committee.soft_delete()
        AuditService.record(
            "committees",
            committee.pk,
            "DELETE",
            old_values=old_values,
            new_values={"isActive": False, "deletedAt": committee.deleted_at},
            request=request,
        )
        logger.info("Committee %s soft-deleted", committee.code)
        return committee

    # ========================
    # Checkposts
    # ========================
    @staticmethod
    def active_checkposts():
        return Checkpost.objects.active().select_related("committee")

    @staticmethod
    def get_checkpost(checkpost_id):
        checkpost = CommitteeService.active_checkposts().filter(pk=checkpost_id).first()
        if checkpost is None:
            raise NotFound("Checkpost not found")
        return checkpost

    @staticmethod
    def _check_checkpost_name(name, committee, exclude_id=None):
        clash = Checkpost.objects.active().filter(name__iexact=name, committee=committee)
        if exclude_id is not None:
            clash = clash.exclude(pk=exclude_id)
        if clash.exists():
            raise ConflictError(f"Checkpost '{name}' already exists for committee '{committee.code}'")

    @staticmethod
    @transaction.atomic
    def create_checkpost(validated_data, request=None):
        committee = validated_data["committee"]
        CommitteeService._check_checkpost_name(validated_data["name"], committee)
        checkpost = Checkpost.objects.create(**validated_data)
        if not committee.has_checkposts:
            committee.has_checkposts = True
            committee.save(update_fields=["has_checkposts", "updated_at"])
        AuditService.record(
            "checkposts",
            checkpost.pk,
            "CREATE",
            new_values=AuditService.snapshot(checkpost),
            user=acting_user(request),
            request=request,
        )
        return checkpost

    @staticmethod
    @transaction.atomic
    def update_checkpost(checkpost, validated_data, request=None):
        committee = validated_data.get("committee", checkpost.committee)
        name = validated_data.get("name", checkpost.name)
        CommitteeService._check_checkpost_name(name, committee, exclude_id=checkpost.pk)
        old_values = AuditService.snapshot(checkpost)
        for field, value in validated_data.items():
            setattr(checkpost, field, value)
        checkpost.save()
        AuditService.record(
            "checkposts",
            checkpost.pk,
            "UPDATE",
            old_values=old_values,
            new_values=AuditService.snapshot(checkpost),
            request=request,
        )
        return checkpost

    @staticmethod
    @transaction.atomic
    def delete_checkpost(checkpost, request=None):
        old_values = AuditService.snapshot(checkpost)
        checkpost.soft_delete()
        AuditService.record(
            "checkposts",
            checkpost.pk,
            "DELETE",
            old_values=old_values,
            new_values={"isActive": False, "deletedAt": checkpost.deleted_at},
            request=request,
        )
        return checkpost
