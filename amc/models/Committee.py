# amc/models/Committee.py

from django.db import models

from amc.models.base import SoftDeleteModel


class Committee(SoftDeleteModel):
    name = models.CharField(max_length=255, help_text="e.g. Karapa")
    code = models.CharField(
        max_length=50, unique=True, help_text="Short code, e.g. KRP-AMC"
    )
    district = models.CharField(max_length=100, default="KAKINADA")
    state = models.CharField(max_length=100, default="Andhra Pradesh")
    has_checkposts = models.BooleanField(
        default=False,
        help_text="Only committees with checkposts accept checkpost-level targets",
    )

    class Meta:
        db_table = "committees"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active"], name="committee_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"


class Checkpost(SoftDeleteModel):
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True, null=True)
    committee = models.ForeignKey(
        Committee,
        on_delete=models.PROTECT,
        related_name="checkposts",
        help_text="Owning committee",
    )

    class Meta:
        db_table = "checkposts"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["name", "committee"],
                condition=models.Q(is_active=True),
                name="unique_active_checkpost_name_per_committee",
            )
        ]
        indexes = [
            models.Index(fields=["committee", "is_active"], name="checkpost_committee_idx"),
        ]

    def __str__(self):
        return self.name
