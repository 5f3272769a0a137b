# amc/models/Target.py

from django.conf import settings
from django.db import models

from amc.models.base import SoftDeleteModel
from amc.models.Committee import Committee, Checkpost

MONTH_CHOICES = [
    ("MAY", "May"),
    ("JUNE", "June"),
    ("JULY", "July"),
    ("AUGUST", "August"),
    ("SEPTEMBER", "September"),
    ("OCTOBER", "October"),
    ("NOVEMBER", "November"),
    ("DECEMBER", "December"),
    ("JANUARY", "January"),
    ("FEBRUARY", "February"),
    ("MARCH", "March"),
    ("APRIL", "April"),
]


class Target(SoftDeleteModel):
    """
    Yearly collection target of one committee for one financial year.

    At most one active row per (committee, financial_year).
    """

    committee = models.ForeignKey(
        Committee, on_delete=models.PROTECT, related_name="targets"
    )
    financial_year = models.CharField(max_length=7)
    yearly_target = models.DecimalField(max_digits=15, decimal_places=2)
    description = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_targets",
    )

    class Meta:
        db_table = "targets"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["committee", "financial_year"],
                condition=models.Q(is_active=True),
                name="unique_active_target_per_committee_year",
            )
        ]
        indexes = [
            models.Index(fields=["financial_year", "is_active"], name="target_fy_active_idx"),
        ]

    def __str__(self):
        return f"{self.committee.code} {self.financial_year}"


class MonthlyTarget(models.Model):
    target = models.ForeignKey(
        Target, on_delete=models.CASCADE, related_name="monthly_targets"
    )
    month = models.CharField(max_length=10, choices=MONTH_CHOICES)
    amount = models.DecimalField(max_digits=15, decimal_places=2)

    class Meta:
        db_table = "monthly_targets"
        constraints = [
            models.UniqueConstraint(
                fields=["target", "month"], name="unique_month_per_target"
            )
        ]


class CheckpostTarget(models.Model):
    target = models.ForeignKey(
        Target, on_delete=models.CASCADE, related_name="checkpost_targets"
    )
    checkpost = models.ForeignKey(
        Checkpost, on_delete=models.PROTECT, related_name="targets"
    )
    month = models.CharField(max_length=10, choices=MONTH_CHOICES)
    amount = models.DecimalField(max_digits=15, decimal_places=2)

    class Meta:
        db_table = "checkpost_targets"
        constraints = [
            models.UniqueConstraint(
                fields=["target", "checkpost", "month"],
                name="unique_checkpost_month_per_target",
            )
        ]
