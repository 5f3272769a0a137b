from decimal import Decimal

from django.test import TestCase

from amc.models import AuditLog, Checkpost, Receipt, User
from tests.helpers import client_for, make_committee, make_receipt, make_user, receipt_payload


class ReceiptCreateTest(TestCase):
    """Single receipt creation, conditional fields and duplicates"""

    def setUp(self):
        self.committee = make_committee(checkposts=["Penuguduru"])
        self.user = make_user(User.USER)
        self.client = client_for(self.user)

    def test_create_returns_envelope_and_audit_row(self):
        response = self.client.post("/api/receipts", receipt_payload(self.committee), format="json")

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["receiptNumber"], "R1")
        self.assertEqual(body["data"]["committee"]["code"], "KRP-AMC")

        receipt = Receipt.objects.get(pk=body["data"]["id"])
        self.assertEqual(receipt.created_by, self.user)
        self.assertEqual(receipt.transaction_value, Decimal("100000.00"))
        self.assertEqual(receipt.market_fee, Decimal("1000.00"))
        self.assertEqual(body["data"]["marketFee"], 1000.0)
        log = AuditLog.objects.get(table_name="receipts", record_id=str(receipt.pk), action="CREATE")
        self.assertEqual(log.user, self.user)
        self.assertEqual(log.new_values["receipt_number"], "R1")

    def test_checkpost_location_requires_checkpost_name(self):
        payload = receipt_payload(self.committee, collectionLocation="CHECKPOST")
        response = self.client.post("/api/receipts", payload, format="json")

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertTrue(any(error.startswith("checkpostName:") for error in body["errors"]))
        self.assertEqual(Receipt.objects.count(), 0)

    def test_checkpost_name_is_resolved_case_insensitively(self):
        payload = receipt_payload(
            self.committee, collectionLocation="CHECKPOST", checkpostName="penuguduru"
        )
        response = self.client.post("/api/receipts", payload, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"]["checkpost"]["name"], "Penuguduru")

    def test_unknown_checkpost_name_is_rejected(self):
        payload = receipt_payload(self.committee, collectionLocation="CHECKPOST", checkpostName="Nowhere")
        response = self.client.post("/api/receipts", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("Checkpost 'Nowhere' not found for committee 'KRP-AMC'", response.json()["error"])

    def test_others_requires_description(self):
        payload = receipt_payload(self.committee, natureOfReceipt="OTHERS")
        response = self.client.post("/api/receipts", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("natureOfReceiptOther", response.json()["error"])

    def test_supervisor_location_requires_supervisor_name(self):
        payload = receipt_payload(self.committee, collectionLocation="SUPERVISOR")
        response = self.client.post("/api/receipts", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("supervisorName", response.json()["error"])

    def test_non_positive_market_fee_is_rejected(self):
        payload = receipt_payload(self.committee, marketFee="0")
        response = self.client.post("/api/receipts", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("marketFee: Market fee must be positive", response.json()["errors"])

    def test_duplicate_receipt_is_a_conflict(self):
        first = self.client.post("/api/receipts", receipt_payload(self.committee), format="json")
        second = self.client.post("/api/receipts", receipt_payload(self.committee), format="json")

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 409)
        self.assertFalse(second.json()["success"])
        self.assertEqual(Receipt.objects.count(), 1)

    def test_same_numbers_in_another_committee_are_allowed(self):
        other = make_committee(code="TUNI-AMC", name="Tuni")
        self.client.post("/api/receipts", receipt_payload(self.committee), format="json")
        response = self.client.post("/api/receipts", receipt_payload(other), format="json")

        self.assertEqual(response.status_code, 201)

    def test_numbers_of_a_deleted_receipt_can_be_reused(self):
        receipt = make_receipt(self.committee)
        receipt.soft_delete()

        response = self.client.post("/api/receipts", receipt_payload(self.committee), format="json")

        self.assertEqual(response.status_code, 201)


class ReceiptListTest(TestCase):
    """Pagination, filters and sorting"""

    def setUp(self):
        self.committee = make_committee()
        self.other = make_committee(code="TUNI-AMC", name="Tuni")
        for index in range(3):
            make_receipt(self.committee, number=f"R{index}", fee=f"{(index + 1) * 100}.00")
        make_receipt(self.other, number="T1", commodity="Cotton")
        self.client = client_for()

    def test_pagination_block(self):
        response = self.client.get("/api/receipts", {"page": 2, "limit": 3})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body["data"]), 1)
        self.assertEqual(
            body["pagination"],
            {"page": 2, "limit": 3, "total": 4, "totalPages": 2, "hasNext": False, "hasPrev": True},
        )

    def test_limit_is_clamped(self):
        response = self.client.get("/api/receipts", {"limit": 500})

        self.assertEqual(response.json()["pagination"]["limit"], 100)

    def test_page_below_one_is_rejected(self):
        response = self.client.get("/api/receipts", {"page": 0})

        self.assertEqual(response.status_code, 400)

    def test_filter_by_committee_and_search(self):
        by_committee = self.client.get("/api/receipts", {"committeeId": self.other.pk}).json()
        by_search = self.client.get("/api/receipts", {"search": "cotton"}).json()

        self.assertEqual([row["receiptNumber"] for row in by_committee["data"]], ["T1"])
        self.assertEqual([row["receiptNumber"] for row in by_search["data"]], ["T1"])

    def test_sort_by_market_fee_ascending(self):
        response = self.client.get(
            "/api/receipts", {"committeeId": self.committee.pk, "sortBy": "marketFee", "sortOrder": "asc"}
        )

        fees = [row["marketFee"] for row in response.json()["data"]]
        self.assertEqual(fees, [100.0, 200.0, 300.0])


class ReceiptUpdateDeleteTest(TestCase):
    def setUp(self):
        self.committee = make_committee()
        self.receipt = make_receipt(self.committee)
        self.manager = make_user(User.MANAGER)

    def test_partial_update_is_audited(self):
        client = client_for(make_user(User.USER))
        response = client.put(f"/api/receipts/{self.receipt.pk}", {"marketFee": "1500.00"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.receipt.refresh_from_db()
        self.assertEqual(self.receipt.market_fee, Decimal("1500.00"))
        log = AuditLog.objects.get(table_name="receipts", action="UPDATE")
        self.assertEqual(log.old_values["market_fee"], "1000.00")
        self.assertEqual(log.new_values["market_fee"], "1500.00")

    def test_committee_change_must_match_stored_checkpost(self):
        checkpost = Checkpost.objects.create(committee=self.committee, name="Penuguduru")
        self.receipt.collection_location = Receipt.CHECKPOST
        self.receipt.checkpost = checkpost
        self.receipt.save()
        other = make_committee(code="TUNI-AMC", name="Tuni")

        response = client_for(self.manager).put(
            f"/api/receipts/{self.receipt.pk}", {"committeeId": other.pk}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["error"], "checkpostId: Checkpost does not belong to the selected committee."
        )
        self.receipt.refresh_from_db()
        self.assertEqual(self.receipt.committee, self.committee)

    def test_office_receipt_can_move_committee(self):
        other = make_committee(code="TUNI-AMC", name="Tuni")

        response = client_for(self.manager).put(
            f"/api/receipts/{self.receipt.pk}", {"committeeId": other.pk}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.receipt.refresh_from_db()
        self.assertEqual(self.receipt.committee, other)

    def test_soft_delete_hides_receipt_but_keeps_row_and_history(self):
        response = client_for(self.manager).delete(f"/api/receipts/{self.receipt.pk}")
        self.assertEqual(response.status_code, 200)

        public = client_for()
        self.assertEqual(public.get("/api/receipts").json()["data"], [])
        self.assertEqual(public.get(f"/api/receipts/{self.receipt.pk}").status_code, 404)

        stored = Receipt.objects.get(pk=self.receipt.pk)
        self.assertFalse(stored.is_active)
        self.assertIsNotNone(stored.deleted_at)
        self.assertTrue(
            AuditLog.objects.filter(
                table_name="receipts", record_id=str(self.receipt.pk), action="DELETE"
            ).exists()
        )

    def test_missing_receipt_is_404(self):
        response = client_for().get("/api/receipts/9999")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"success": False, "error": "Receipt not found"})


class ReceiptPermissionTest(TestCase):
    def setUp(self):
        self.committee = make_committee()
        self.receipt = make_receipt(self.committee)

    def test_anonymous_write_is_401(self):
        response = client_for().post("/api/receipts", receipt_payload(self.committee, receiptNumber="R9"), format="json")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "Unauthorized")

    def test_viewer_write_is_403(self):
        client = client_for(make_user(User.VIEWER))
        response = client.post("/api/receipts", receipt_payload(self.committee, receiptNumber="R9"), format="json")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"], "Forbidden")

    def test_user_cannot_delete(self):
        response = client_for(make_user(User.USER)).delete(f"/api/receipts/{self.receipt.pk}")

        self.assertEqual(response.status_code, 403)

    def test_invalid_token_is_401(self):
        client = client_for()
        client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")

        self.assertEqual(client.get("/api/auth/me").status_code, 401)
