from decimal import Decimal

import amc.models.user
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

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


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("email", models.EmailField(help_text="Login identifier", max_length=254, unique=True)),
                ("name", models.CharField(max_length=255)),
                (
                    "role",
                    models.CharField(
                        choices=[("ADMIN", "Admin"), ("MANAGER", "Manager"), ("USER", "User"), ("VIEWER", "Viewer")],
                        default="USER",
                        help_text="Controls which handlers the user may call",
                        max_length=10,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "users",
                "ordering": ["-created_at"],
            },
            managers=[
                ("objects", amc.models.user.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="Committee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(default=True, help_text="False once soft-deleted")),
                ("deleted_at", models.DateTimeField(blank=True, help_text="When the row was soft-deleted", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(help_text="e.g. Karapa", max_length=255)),
                ("code", models.CharField(help_text="Short code, e.g. KRP-AMC", max_length=50, unique=True)),
                ("district", models.CharField(default="KAKINADA", max_length=100)),
                ("state", models.CharField(default="Andhra Pradesh", max_length=100)),
                (
                    "has_checkposts",
                    models.BooleanField(
                        default=False,
                        help_text="Only committees with checkposts accept checkpost-level targets",
                    ),
                ),
            ],
            options={
                "db_table": "committees",
                "ordering": ["name"],
                "indexes": [models.Index(fields=["is_active"], name="committee_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="Checkpost",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(default=True, help_text="False once soft-deleted")),
                ("deleted_at", models.DateTimeField(blank=True, help_text="When the row was soft-deleted", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("location", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "committee",
                    models.ForeignKey(
                        help_text="Owning committee",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="checkposts",
                        to="amc.committee",
                    ),
                ),
            ],
            options={
                "db_table": "checkposts",
                "ordering": ["name"],
                "indexes": [models.Index(fields=["committee", "is_active"], name="checkpost_committee_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("name", "committee"),
                        name="unique_active_checkpost_name_per_committee",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Receipt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(default=True, help_text="False once soft-deleted")),
                ("deleted_at", models.DateTimeField(blank=True, help_text="When the row was soft-deleted", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("book_number", models.CharField(help_text="Receipt book number", max_length=50)),
                (
                    "receipt_number",
                    models.CharField(help_text="Unique per book and committee among active receipts", max_length=50),
                ),
                ("date", models.DateField(help_text="Date of the transaction")),
                ("financial_year", models.CharField(help_text='May-April year label, e.g. "2025-26"', max_length=7)),
                ("trader_name", models.CharField(max_length=255)),
                ("payee_name", models.CharField(max_length=255)),
                ("commodity", models.CharField(help_text="Free text; the dashboard offers a fixed list", max_length=100)),
                (
                    "transaction_value",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=15,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "market_fee",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=15,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("nature_of_receipt", models.CharField(choices=[("MF", "Market Fee"), ("OTHERS", "Others")], max_length=10)),
                (
                    "nature_of_receipt_other",
                    models.CharField(blank=True, help_text="Required when nature is OTHERS", max_length=255, null=True),
                ),
                (
                    "collection_location",
                    models.CharField(
                        choices=[("OFFICE", "Office"), ("CHECKPOST", "Checkpost"), ("SUPERVISOR", "Supervisor")],
                        max_length=12,
                    ),
                ),
                ("collection_location_other", models.CharField(blank=True, max_length=255, null=True)),
                ("supervisor_name", models.CharField(blank=True, max_length=255, null=True)),
                ("remarks", models.TextField(blank=True, null=True)),
                (
                    "committee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="receipts", to="amc.committee"
                    ),
                ),
                (
                    "checkpost",
                    models.ForeignKey(
                        blank=True,
                        help_text="Required when collected at a checkpost",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="receipts",
                        to="amc.checkpost",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_receipts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="updated_receipts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "receipts",
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["committee", "financial_year"], name="receipt_committee_fy_idx"),
                    models.Index(fields=["financial_year", "date"], name="receipt_fy_date_idx"),
                    models.Index(fields=["checkpost"], name="receipt_checkpost_idx"),
                    models.Index(fields=["commodity"], name="receipt_commodity_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("book_number", "receipt_number", "committee"),
                        name="unique_active_receipt_per_book_and_committee",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Target",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(default=True, help_text="False once soft-deleted")),
                ("deleted_at", models.DateTimeField(blank=True, help_text="When the row was soft-deleted", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("financial_year", models.CharField(max_length=7)),
                ("yearly_target", models.DecimalField(decimal_places=2, max_digits=15)),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "committee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="targets", to="amc.committee"
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_targets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "targets",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["financial_year", "is_active"], name="target_fy_active_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("committee", "financial_year"),
                        name="unique_active_target_per_committee_year",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="MonthlyTarget",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("month", models.CharField(choices=MONTH_CHOICES, max_length=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=15)),
                (
                    "target",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="monthly_targets", to="amc.target"
                    ),
                ),
            ],
            options={
                "db_table": "monthly_targets",
                "constraints": [
                    models.UniqueConstraint(fields=("target", "month"), name="unique_month_per_target")
                ],
            },
        ),
        migrations.CreateModel(
            name="CheckpostTarget",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("month", models.CharField(choices=MONTH_CHOICES, max_length=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=15)),
                (
                    "checkpost",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="targets", to="amc.checkpost"
                    ),
                ),
                (
                    "target",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="checkpost_targets", to="amc.target"
                    ),
                ),
            ],
            options={
                "db_table": "checkpost_targets",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("target", "checkpost", "month"), name="unique_checkpost_month_per_target"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("table_name", models.CharField(help_text="e.g. receipts, targets", max_length=50)),
                ("record_id", models.CharField(max_length=64)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("CREATE", "Create"),
                            ("UPDATE", "Update"),
                            ("DELETE", "Delete"),
                            ("LOGIN", "Login"),
                            ("LOGOUT", "Logout"),
                        ],
                        max_length=10,
                    ),
                ),
                ("old_values", models.JSONField(blank=True, null=True)),
                ("new_values", models.JSONField(blank=True, null=True)),
                ("ip_address", models.CharField(blank=True, max_length=64, null=True)),
                ("user_agent", models.CharField(blank=True, max_length=500, null=True)),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "audit_logs",
                "ordering": ["-timestamp"],
                "indexes": [models.Index(fields=["table_name", "record_id"], name="audit_table_record_idx")],
            },
        ),
        migrations.CreateModel(
            name="SystemConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=100, unique=True)),
                ("value", models.TextField(help_text="Stored as text, interpreted via data_type")),
                (
                    "data_type",
                    models.CharField(
                        choices=[("string", "String"), ("number", "Number"), ("boolean", "Boolean"), ("json", "JSON")],
                        default="string",
                        max_length=10,
                    ),
                ),
                ("category", models.CharField(default="application", max_length=50)),
                ("description", models.CharField(blank=True, max_length=255, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "system_config",
                "ordering": ["category", "key"],
            },
        ),
    ]
