# amc/models/base.py

from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True, deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)


class SoftDeleteModel(models.Model):
    """
    Shared lifecycle columns.

    Rows are never removed by the API: ``soft_delete()`` flips ``is_active``
    and stamps ``deleted_at`` so historical audit entries keep pointing at
    something real.
    """

    is_active = models.BooleanField(default=True, help_text="False once soft-deleted")
    deleted_at = models.DateTimeField(
        null=True, blank=True, help_text="When the row was soft-deleted"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True

    def soft_delete(self):
        self.is_active = False
        self.deleted_at = timezone.now()
        self.save(update_fields=["is_active", "deleted_at", "updated_at"])

    def restore(self):
        self.is_active = True
        self.deleted_at = None
        self.save(update_fields=["is_active", "deleted_at", "updated_at"])
