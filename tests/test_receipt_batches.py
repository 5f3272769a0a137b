from decimal import Decimal

from django.test import TestCase

from amc.models import AuditLog, Receipt, User
from tests.helpers import client_for, make_committee, make_receipt, make_user, receipt_payload


def import_row(**overrides):
    row = {
        "bookNumber": "B1",
        "receiptNumber": "R1",
        "date": "2025-06-01",
        "financialYear": "2025-26",
        "traderName": "Trader",
        "payeeName": "Payee",
        "commodity": "Maize",
        "transactionValue": "50000",
        "marketFee": "500",
        "natureOfReceipt": "MF",
        "collectionLocation": "OFFICE",
        "committeeCode": "KRP-AMC",
    }
    row.update(overrides)
    return row


class BulkCreateTest(TestCase):
    def setUp(self):
        self.committee = make_committee()
        self.client = client_for(make_user(User.USER))

    def test_creates_every_row(self):
        rows = [receipt_payload(self.committee, receiptNumber=f"R{i}") for i in range(3)]
        response = self.client.post("/api/receipts/bulk", {"receipts": rows}, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.json()["data"]), 3)
        self.assertEqual(Receipt.objects.count(), 3)
        self.assertEqual(AuditLog.objects.filter(table_name="receipts", action="CREATE").count(), 3)

    def test_duplicate_inside_batch_writes_nothing(self):
        rows = [receipt_payload(self.committee), receipt_payload(self.committee)]
        response = self.client.post("/api/receipts/bulk", {"receipts": rows}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("Duplicate receipt numbers found in the batch: B1-R1", response.json()["error"])
        self.assertEqual(Receipt.objects.count(), 0)

    def test_existing_receipt_rejects_whole_batch(self):
        make_receipt(self.committee, number="R1")
        rows = [receipt_payload(self.committee, receiptNumber="R0"), receipt_payload(self.committee)]
        response = self.client.post("/api/receipts/bulk", {"receipts": rows}, format="json")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(Receipt.objects.count(), 1)

    def test_row_errors_carry_their_index(self):
        rows = [receipt_payload(self.committee), receipt_payload(self.committee, receiptNumber="R2", marketFee="-5")]
        response = self.client.post("/api/receipts/bulk", {"receipts": rows}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("receipts.1.marketFee: Market fee must be positive", response.json()["errors"])
        self.assertEqual(Receipt.objects.count(), 0)

    def test_batch_limit(self):
        rows = [receipt_payload(self.committee, receiptNumber=f"R{i}") for i in range(101)]
        response = self.client.post("/api/receipts/bulk", {"receipts": rows}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Receipt.objects.count(), 0)


class BulkUpdateTest(TestCase):
    def setUp(self):
        self.committee = make_committee()
        self.first = make_receipt(self.committee, number="R1")
        self.second = make_receipt(self.committee, number="R2")
        self.client = client_for(make_user(User.USER))

    def test_updates_are_applied_together(self):
        updates = [
            {"id": self.first.pk, "data": {"marketFee": "2000.00"}},
            {"id": self.second.pk, "data": {"commodity": "Cotton"}},
        ]
        response = self.client.put("/api/receipts/bulk/update", {"updates": updates}, format="json")

        self.assertEqual(response.status_code, 200)
        self.first.refresh_from_db()
        self.second.refresh_from_db()
        self.assertEqual(self.first.market_fee, Decimal("2000.00"))
        self.assertEqual(self.second.commodity, "Cotton")

    def test_one_invalid_update_rolls_back_all(self):
        updates = [
            {"id": self.first.pk, "data": {"marketFee": "2000.00"}},
            {"id": self.second.pk, "data": {"natureOfReceipt": "OTHERS"}},
        ]
        response = self.client.put("/api/receipts/bulk/update", {"updates": updates}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn(f"Update 2 (id {self.second.pk})", response.json()["error"])
        self.first.refresh_from_db()
        self.assertEqual(self.first.market_fee, Decimal("1000.00"))

    def test_unknown_ids_are_404(self):
        updates = [{"id": 9999, "data": {"marketFee": "10"}}]
        response = self.client.put("/api/receipts/bulk/update", {"updates": updates}, format="json")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Receipts not found: 9999")

    def test_renumbering_onto_an_existing_receipt_is_a_conflict(self):
        updates = [{"id": self.second.pk, "data": {"receiptNumber": "R1"}}]
        response = self.client.put("/api/receipts/bulk/update", {"updates": updates}, format="json")

        self.assertEqual(response.status_code, 409)


class ImportTest(TestCase):
    def setUp(self):
        self.committee = make_committee(checkposts=["Penuguduru"])
        self.client = client_for(make_user(User.USER))

    def test_import_resolves_codes_and_checkpost_names(self):
        rows = [
            import_row(),
            import_row(receiptNumber="R2", collectionLocation="CHECKPOST", checkpostName="Penuguduru"),
        ]
        response = self.client.post("/api/receipts/import", {"receipts": rows}, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"]["imported"], 2)
        imported = Receipt.objects.get(receipt_number="R2")
        self.assertEqual(imported.committee, self.committee)
        self.assertEqual(imported.checkpost.name, "Penuguduru")

    def test_duplicate_rows_in_one_import_write_nothing(self):
        rows = [import_row(), import_row()]
        response = self.client.post("/api/receipts/import", {"receipts": rows}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("Duplicate receipt numbers found in the batch", response.json()["error"])
        self.assertEqual(Receipt.objects.count(), 0)

    def test_unresolvable_references_are_reported_by_line(self):
        rows = [
            import_row(),
            import_row(receiptNumber="R2", committeeCode="NOPE-AMC"),
            import_row(receiptNumber="R3", collectionLocation="CHECKPOST", checkpostName="Nowhere"),
        ]
        response = self.client.post("/api/receipts/import", {"receipts": rows}, format="json")

        self.assertEqual(response.status_code, 400)
        error = response.json()["error"]
        self.assertTrue(error.startswith("Validation failed:\n"))
        self.assertIn("Row 2: Committee with code 'NOPE-AMC' not found", error)
        self.assertIn("Row 3: Checkpost 'Nowhere' not found for committee 'KRP-AMC'", error)
        self.assertEqual(Receipt.objects.count(), 0)

    def test_validate_only_writes_nothing(self):
        rows = [import_row(), import_row(receiptNumber="R2")]
        response = self.client.post(
            "/api/receipts/import", {"receipts": rows, "validateOnly": True}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["validRows"], 2)
        self.assertEqual(Receipt.objects.count(), 0)

    def test_validate_only_reports_existing_receipts(self):
        make_receipt(self.committee, number="R1")
        response = self.client.post(
            "/api/receipts/import", {"receipts": [import_row()], "validateOnly": True}, format="json"
        )

        self.assertEqual(response.status_code, 409)
        self.assertIn("B1-R1", response.json()["error"])
