# amc/models/Receipt.py

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal

from amc.models.base import SoftDeleteModel
from amc.models.Committee import Committee, Checkpost


class Receipt(SoftDeleteModel):
    MF = "MF"
    OTHERS = "OTHERS"
    NATURE_CHOICES = [
        (MF, "Market Fee"),
        (OTHERS, "Others"),
    ]

    OFFICE = "OFFICE"
    CHECKPOST = "CHECKPOST"
    SUPERVISOR = "SUPERVISOR"
    LOCATION_CHOICES = [
        (OFFICE, "Office"),
        (CHECKPOST, "Checkpost"),
        (SUPERVISOR, "Supervisor"),
    ]

    # ========================
    # 1. Document Identity
    # ========================
    book_number = models.CharField(max_length=50, help_text="Receipt book number")
    receipt_number = models.CharField(
        max_length=50,
        help_text="Unique per book and committee among active receipts",
    )
    date = models.DateField(help_text="Date of the transaction")
    financial_year = models.CharField(
        max_length=7, help_text='May-April year label, e.g. "2025-26"'
    )

    # ========================
    # 2. Parties & Goods
    # ========================
    trader_name = models.CharField(max_length=255)
    payee_name = models.CharField(max_length=255)
    commodity = models.CharField(
        max_length=100, help_text="Free text; the dashboard offers a fixed list"
    )

    # ========================
    # 3. Amounts
    # ========================
    transaction_value = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    market_fee = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    # ========================
    # 4. Classification
    # ========================
    nature_of_receipt = models.CharField(max_length=10, choices=NATURE_CHOICES)
    nature_of_receipt_other = models.CharField(
        max_length=255, blank=True, null=True, help_text="Required when nature is OTHERS"
    )
    collection_location = models.CharField(max_length=12, choices=LOCATION_CHOICES)
    collection_location_other = models.CharField(max_length=255, blank=True, null=True)

    # ========================
    # 5. Where & Who
    # ========================
    committee = models.ForeignKey(
        Committee, on_delete=models.PROTECT, related_name="receipts"
    )
    checkpost = models.ForeignKey(
        Checkpost,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="receipts",
        help_text="Required when collected at a checkpost",
    )
    supervisor_name = models.CharField(max_length=255, blank=True, null=True)
    remarks = models.TextField(blank=True, null=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_receipts",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="updated_receipts",
    )

    class Meta:
        db_table = "receipts"
        ordering = ["-date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["book_number", "receipt_number", "committee"],
                condition=models.Q(is_active=True),
                name="unique_active_receipt_per_book_and_committee",
            )
        ]
        indexes = [
            models.Index(fields=["committee", "financial_year"], name="receipt_committee_fy_idx"),
            models.Index(fields=["financial_year", "date"], name="receipt_fy_date_idx"),
            models.Index(fields=["checkpost"], name="receipt_checkpost_idx"),
            models.Index(fields=["commodity"], name="receipt_commodity_idx"),
        ]

    def __str__(self):
        return f"{self.book_number}/{self.receipt_number}"
