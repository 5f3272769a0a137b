from decimal import Decimal

from django.test import TestCase

from amc.models import Checkpost, CheckpostTarget, MonthlyTarget, Target, User
from amc.services.TargetService import TargetService
from tests.helpers import client_for, make_committee, make_user


class TargetCreateTest(TestCase):
    def setUp(self):
        self.committee = make_committee(checkposts=["Penuguduru"])
        self.checkpost = Checkpost.objects.get(name="Penuguduru")
        self.client = client_for(make_user(User.MANAGER))

    def test_yearly_target_is_split_evenly_when_months_omitted(self):
        response = self.client.post(
            "/api/targets",
            {"committeeId": self.committee.pk, "financialYear": "2025-26", "yearlyTarget": "1000000.00"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        months = response.json()["data"]["monthlyTargets"]
        self.assertEqual(len(months), 12)
        self.assertEqual(months[0]["month"], "MAY")
        self.assertEqual(months[-1]["month"], "APRIL")
        self.assertEqual(months[0]["amount"], 83333.33)
        self.assertEqual(months[-1]["amount"], 83333.37)
        total = sum(row.amount for row in MonthlyTarget.objects.all())
        self.assertEqual(total, Decimal("1000000.00"))

    def test_supplied_months_are_kept_even_if_they_do_not_add_up(self):
        payload = {
            "committeeId": self.committee.pk,
            "financialYear": "2025-26",
            "yearlyTarget": "1200000",
            "monthlyTargets": [{"month": "may", "amount": "50000"}, {"month": "June", "amount": "70000"}],
            "checkpostTargets": [{"checkpostId": self.checkpost.pk, "month": "MAY", "amount": "10000"}],
        }
        response = self.client.post("/api/targets", payload, format="json")

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual([row["month"] for row in data["monthlyTargets"]], ["MAY", "JUNE"])
        self.assertEqual(data["checkpostTargets"][0]["checkpostName"], "Penuguduru")

    def test_second_active_target_is_a_conflict(self):
        payload = {"committeeId": self.committee.pk, "financialYear": "2025-26", "yearlyTarget": "100"}
        self.client.post("/api/targets", payload, format="json")
        response = self.client.post("/api/targets", payload, format="json")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], "An active target already exists for KRP-AMC in 2025-26")
        self.assertEqual(Target.objects.count(), 1)

    def test_checkpost_targets_need_a_committee_with_checkposts(self):
        plain = make_committee(code="KKD-AMC", name="Kakinada")
        payload = {
            "committeeId": plain.pk,
            "financialYear": "2025-26",
            "yearlyTarget": "100",
            "checkpostTargets": [{"checkpostId": self.checkpost.pk, "month": "MAY", "amount": "10"}],
        }
        response = self.client.post("/api/targets", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("checkpostTargets", response.json()["error"])

    def test_checkpost_of_another_committee_is_rejected(self):
        other = make_committee(code="TUNI-AMC", name="Tuni", checkposts=["Tuni"])
        payload = {
            "committeeId": other.pk,
            "financialYear": "2025-26",
            "yearlyTarget": "100",
            "checkpostTargets": [{"checkpostId": self.checkpost.pk, "month": "MAY", "amount": "10"}],
        }
        response = self.client.post("/api/targets", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("does not belong", response.json()["error"])

    def test_invalid_financial_year(self):
        payload = {"committeeId": self.committee.pk, "financialYear": "2025-27", "yearlyTarget": "100"}
        response = self.client.post("/api/targets", payload, format="json")

        self.assertEqual(response.status_code, 400)

    def test_user_role_cannot_create_targets(self):
        payload = {"committeeId": self.committee.pk, "financialYear": "2025-26", "yearlyTarget": "100"}
        response = client_for(make_user(User.USER)).post("/api/targets", payload, format="json")

        self.assertEqual(response.status_code, 403)


class TargetUpdateTest(TestCase):
    def setUp(self):
        self.committee = make_committee()
        self.target = TargetService.create_target(
            {"committee": self.committee, "financial_year": "2025-26", "yearly_target": Decimal("1200")}
        )
        self.client = client_for(make_user(User.ADMIN))

    def test_supplied_months_replace_stored_rows(self):
        response = self.client.put(
            f"/api/targets/{self.target.pk}",
            {"monthlyTargets": [{"month": "JULY", "amount": "1200"}]},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(list(self.target.monthly_targets.values_list("month", flat=True)), ["JULY"])

    def test_committee_change_with_stored_checkpost_targets(self):
        checkpost = Checkpost.objects.create(committee=self.committee, name="Penuguduru")
        self.committee.has_checkposts = True
        self.committee.save()
        CheckpostTarget.objects.create(target=self.target, checkpost=checkpost, month="MAY", amount=Decimal("100"))
        other = make_committee(code="TUNI-AMC", name="Tuni")
        url = f"/api/targets/{self.target.pk}"

        response = self.client.put(url, {"committeeId": other.pk}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("checkpostTargets:", response.json()["error"])
        self.target.refresh_from_db()
        self.assertEqual(self.target.committee, self.committee)

        response = self.client.put(url, {"committeeId": other.pk, "checkpostTargets": []}, format="json")

        self.assertEqual(response.status_code, 200)
        self.target.refresh_from_db()
        self.assertEqual(self.target.committee, other)
        self.assertFalse(self.target.checkpost_targets.exists())

    def test_deleted_target_frees_the_year(self):
        self.client.delete(f"/api/targets/{self.target.pk}")
        response = self.client.post(
            "/api/targets",
            {"committeeId": self.committee.pk, "financialYear": "2025-26", "yearlyTarget": "500"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.client.get("/api/targets").json()["pagination"]["total"], 1)

    def test_split_evenly_puts_remainder_in_april(self):
        rows = TargetService.split_evenly(Decimal("100"))

        self.assertEqual(rows[0], {"month": "MAY", "amount": Decimal("8.33")})
        self.assertEqual(rows[-1], {"month": "APRIL", "amount": Decimal("8.37")})
