from django.core.management.base import BaseCommand
from django.db import transaction
from decouple import config

from amc.models import Checkpost, Committee, User

# (code, name, [checkposts])
DEFAULT_COMMITTEES = [
    ("KRP-AMC", "Karapa", ["Penuguduru"]),
    ("KKDR-AMC", "Kakinada Rural", ["Atchempeta", "Turangi Bypass"]),
    ("PTM-AMC", "Pithapuram", ["Pithapuram", "Chebrolu"]),
    ("TUNI-AMC", "Tuni", ["Tuni", "K/P/Puram", "Rekavanipalem"]),
    ("PTD-AMC", "Prathipadu", ["Kathipudi", "Prathipadu", "Yerravaram"]),
    ("JPT-AMC", "Jaggampeta", ["Jaggampeta", "Rajupalem"]),
    ("PDM-AMC", "Peddapuram", ["Peddapuram"]),
    ("SMLK-AMC", "Samalkota", []),
    ("KKD-AMC", "Kakinada", []),
]

ADMIN_EMAIL = "admin@amc.gov.in"


class Command(BaseCommand):
    help = "Upsert the Kakinada district committees and their checkposts"

    def add_arguments(self, parser):
        parser.add_argument(
            "--with-admin",
            action="store_true",
            help=f"Also create the {ADMIN_EMAIL} administrator (password from ADMIN_PASSWORD)",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        committees_created = 0
        checkposts_created = 0
        for code, name, checkposts in DEFAULT_COMMITTEES:
            committee, created = Committee.objects.update_or_create(
                code=code,
                defaults={
                    "name": name,
                    "district": "KAKINADA",
                    "state": "Andhra Pradesh",
                    "has_checkposts": bool(checkposts),
                    "is_active": True,
                    "deleted_at": None,
                },
            )
            committees_created += int(created)
            for checkpost_name in checkposts:
                exists = Checkpost.objects.active().filter(committee=committee, name=checkpost_name).exists()
                if not exists:
                    Checkpost.objects.create(committee=committee, name=checkpost_name, location=checkpost_name)
                    checkposts_created += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Committees: {committees_created} created, "
                f"{len(DEFAULT_COMMITTEES) - committees_created} updated; "
                f"checkposts: {checkposts_created} created"
            )
        )

        if options["with_admin"]:
            if User.objects.filter(email=ADMIN_EMAIL).exists():
                self.stdout.write(f"Admin {ADMIN_EMAIL} already exists")
                return
            User.objects.create_user(
                ADMIN_EMAIL,
                config("ADMIN_PASSWORD", default="admin123"),
                name="System Administrator",
                role=User.ADMIN,
            )
            self.stdout.write(self.style.SUCCESS(f"Admin {ADMIN_EMAIL} created"))
