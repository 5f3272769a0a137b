from decimal import Decimal

from django.test import TestCase

from amc.models import AuditLog, Checkpost, Committee, User
from amc.services.TargetService import TargetService
from tests.helpers import client_for, make_committee, make_receipt, make_user


class CommitteeTest(TestCase):
    def setUp(self):
        self.client = client_for(make_user(User.MANAGER))

    def test_manager_creates_committee(self):
        response = self.client.post(
            "/api/committees", {"name": "Kakinada", "code": "KKD-AMC"}, format="json"
        )

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["district"], "KAKINADA")
        self.assertFalse(data["hasCheckposts"])
        self.assertTrue(AuditLog.objects.filter(table_name="committees", action="CREATE").exists())

    def test_duplicate_code_is_a_conflict(self):
        make_committee(code="KKD-AMC", name="Kakinada")
        response = self.client.post(
            "/api/committees", {"name": "Kakinada Rural", "code": "KKD-AMC"}, format="json"
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], "Committee code 'KKD-AMC' already exists")

    def test_viewer_cannot_create(self):
        response = client_for(make_user(User.VIEWER)).post(
            "/api/committees", {"name": "Kakinada", "code": "KKD-AMC"}, format="json"
        )

        self.assertEqual(response.status_code, 403)

    def test_detail_includes_checkposts_targets_and_counts(self):
        committee = make_committee(checkposts=["Penuguduru", "Atchampeta"])
        TargetService.create_target(
            {"committee": committee, "financial_year": "2025-26", "yearly_target": Decimal("1200")}
        )
        make_receipt(committee)

        data = client_for().get(f"/api/committees/{committee.pk}").json()["data"]

        self.assertEqual([row["name"] for row in data["checkposts"]], ["Atchampeta", "Penuguduru"])
        self.assertEqual(data["targets"][0]["financialYear"], "2025-26")
        self.assertEqual(data["counts"], {"receipts": 1, "targets": 1})

    def test_list_search_and_pagination(self):
        make_committee()
        make_committee(code="TUNI-AMC", name="Tuni")

        body = client_for().get("/api/committees", {"search": "tuni"}).json()

        self.assertEqual([row["code"] for row in body["data"]], ["TUNI-AMC"])
        self.assertEqual(body["pagination"]["total"], 1)

    def test_soft_delete_hides_committee(self):
        committee = make_committee()
        response = self.client.delete(f"/api/committees/{committee.pk}")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Committee.objects.get(pk=committee.pk).is_active)
        self.assertEqual(client_for().get(f"/api/committees/{committee.pk}").status_code, 404)
        self.assertEqual(client_for().get("/api/committees").json()["data"], [])


class CheckpostTest(TestCase):
    def setUp(self):
        self.committee = make_committee()
        self.client = client_for(make_user(User.ADMIN))

    def test_first_checkpost_flags_committee(self):
        response = self.client.post(
            "/api/checkposts",
            {"name": "Penuguduru", "location": "NH-216", "committeeId": self.committee.pk},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.committee.refresh_from_db()
        self.assertTrue(self.committee.has_checkposts)

    def test_name_is_unique_within_committee(self):
        Checkpost.objects.create(committee=self.committee, name="Penuguduru")
        response = self.client.post(
            "/api/checkposts", {"name": "PENUGUDURU", "committeeId": self.committee.pk}, format="json"
        )

        self.assertEqual(response.status_code, 409)

    def test_same_name_under_another_committee(self):
        Checkpost.objects.create(committee=self.committee, name="Penuguduru")
        other = make_committee(code="TUNI-AMC", name="Tuni")
        response = self.client.post(
            "/api/checkposts", {"name": "Penuguduru", "committeeId": other.pk}, format="json"
        )

        self.assertEqual(response.status_code, 201)

    def test_filter_by_committee(self):
        make_committee(code="TUNI-AMC", name="Tuni", checkposts=["Tuni Gate"])
        Checkpost.objects.create(committee=self.committee, name="Penuguduru")

        body = client_for().get("/api/checkposts", {"committeeId": self.committee.pk}).json()

        self.assertEqual([row["name"] for row in body["data"]], ["Penuguduru"])
