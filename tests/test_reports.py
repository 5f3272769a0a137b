from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from amc.models import Receipt
from amc.services.financial_year import (
    cumulative_months,
    financial_year_for_date,
    is_valid_financial_year,
    previous_financial_year,
    season_for_month,
)
from amc.services.ReportService import ReportService, growth_rate, percentage
from amc.services.TargetService import TargetService
from tests.helpers import client_for, make_committee, make_receipt


class FinancialYearTest(SimpleTestCase):
    def test_labels(self):
        self.assertTrue(is_valid_financial_year("2025-26"))
        self.assertTrue(is_valid_financial_year("2099-00"))
        self.assertFalse(is_valid_financial_year("2025-27"))
        self.assertFalse(is_valid_financial_year("2025/26"))
        self.assertEqual(previous_financial_year("2025-26"), "2024-25")
        self.assertEqual(previous_financial_year("2000-01"), "1999-00")

    def test_year_starts_in_may(self):
        self.assertEqual(financial_year_for_date(date(2025, 4, 30)), "2024-25")
        self.assertEqual(financial_year_for_date(date(2025, 5, 1)), "2025-26")

    def test_cumulative_window_resets_every_may(self):
        self.assertEqual(cumulative_months("May"), ["MAY"])
        self.assertEqual(cumulative_months("june"), ["MAY", "JUNE"])
        self.assertEqual(len(cumulative_months("APRIL")), 12)
        self.assertEqual(cumulative_months("January")[-2:], ["DECEMBER", "JANUARY"])

    def test_seasons(self):
        self.assertEqual(season_for_month(3), "Spring")
        self.assertEqual(season_for_month(5), "Spring")
        self.assertEqual(season_for_month(6), "Summer")
        self.assertEqual(season_for_month(10), "Monsoon")
        self.assertEqual(season_for_month(12), "Winter")
        self.assertEqual(season_for_month(1), "Winter")


class PercentageTest(SimpleTestCase):
    def test_zero_or_missing_whole_gives_zero(self):
        self.assertEqual(percentage(500, 0), 0.0)
        self.assertEqual(percentage(500, None, 0), 0)

    def test_rounding(self):
        self.assertEqual(percentage(190000, 1200000, 0), 16)
        self.assertEqual(percentage(190000, 1200000, 2), 15.83)
        self.assertEqual(percentage(1, 3, 2), 33.33)

    def test_growth_rate(self):
        self.assertEqual(growth_rate(150, 100), 50.0)
        self.assertEqual(growth_rate(50, 100), -50.0)
        self.assertEqual(growth_rate(100, 0), 0.0)
        self.assertEqual(growth_rate(0, 0), 0.0)


class CommitteeStatementTest(TestCase):
    """Committee C1: 12 lakh yearly target, 80,000 in May and 110,000 in June."""

    def setUp(self):
        self.committee = make_committee()
        TargetService.create_target(
            {"committee": self.committee, "financial_year": "2025-26", "yearly_target": Decimal("1200000")}
        )
        make_receipt(self.committee, number="R1", on=date(2025, 5, 12), fee="80000.00")
        make_receipt(self.committee, number="R2", on=date(2025, 6, 3), fee="60000.00")
        make_receipt(self.committee, number="R3", on=date(2025, 6, 20), fee="50000.00")
        self.client = client_for()

    def get_report(self, **params):
        query = {"financialYear": "2025-26", "month": "June", "statement": "committee"}
        query.update(params)
        response = self.client.get("/api/reports/market-fees", query)
        self.assertEqual(response.status_code, 200)
        return response.json()["data"]

    def test_cumulative_achievement_through_june(self):
        row = self.get_report(inLakhs="false")["reportData"][0]

        self.assertEqual(row["cumulativeTarget"], 200000.0)
        self.assertEqual(row["progressiveCurrent"], 190000.0)
        self.assertEqual(row["currentMonthCurrent"], 110000.0)
        self.assertEqual(row["cumulativeAchievement"], 95.0)
        self.assertEqual(row["percentageAchieved"], 15.83)

    def test_printable_statement_is_in_lakhs_with_whole_percent(self):
        report = self.get_report()
        row = report["reportData"][0]

        self.assertEqual(row["slNo"], 1)
        self.assertEqual(row["progressiveCurrent"], 1.9)
        self.assertEqual(row["yearlyTarget"], 12.0)
        self.assertEqual(row["percentageAchieved"], 16)
        self.assertEqual(report["totals"]["name"], "Total")
        self.assertEqual(report["metadata"]["unit"], "lakhs")
        self.assertEqual(report["metadata"]["cumulativeMonths"], ["May", "June"])

    def test_later_months_do_not_change_the_window(self):
        before = self.get_report(inLakhs="false")["reportData"][0]["progressiveCurrent"]
        make_receipt(self.committee, number="R4", on=date(2025, 7, 1), fee="99999.00")
        after = self.get_report(inLakhs="false")["reportData"][0]["progressiveCurrent"]

        self.assertEqual(before, after)

    def test_previous_year_same_month_is_compared(self):
        make_receipt(
            self.committee, number="P1", on=date(2024, 6, 15), fee="100000.00", financial_year="2024-25"
        )
        row = self.get_report(inLakhs="false")["reportData"][0]

        self.assertEqual(row["currentMonthPrevious"], 100000.0)
        self.assertEqual(row["difference"], 10000.0)
        self.assertEqual(row["progressivePrevious"], 100000.0)

    def test_other_receipts_and_deleted_rows_are_ignored(self):
        make_receipt(self.committee, number="O1", on=date(2025, 6, 1), fee="5000.00",
                     nature_of_receipt=Receipt.OTHERS, nature_of_receipt_other="Rent")
        make_receipt(self.committee, number="D1", on=date(2025, 6, 1), fee="7000.00").soft_delete()
        row = self.get_report(inLakhs="false")["reportData"][0]

        self.assertEqual(row["progressiveCurrent"], 190000.0)

    def test_committee_without_target_reports_zero(self):
        tuni = make_committee(code="TUNI-AMC", name="Tuni")
        make_receipt(tuni, number="T1", on=date(2025, 5, 2), fee="500.00")
        rows = {row["code"]: row for row in self.get_report(inLakhs="false")["reportData"]}

        self.assertEqual(rows["TUNI-AMC"]["progressiveCurrent"], 500.0)
        self.assertEqual(rows["TUNI-AMC"]["percentageAchieved"], 0.0)
        self.assertEqual(rows["TUNI-AMC"]["cumulativeAchievement"], 0.0)

    def test_commodity_statement_shares(self):
        make_receipt(self.committee, number="C1", on=date(2025, 6, 5), fee="10000.00", commodity="Cotton")
        report = self.get_report(statement="commodity", inLakhs="false")
        rows = {row["name"]: row for row in report["reportData"]}

        self.assertEqual(report["reportData"][0]["name"], "Paddy")
        self.assertEqual(rows["Paddy"]["share"], 95.0)
        self.assertEqual(rows["Cotton"]["share"], 5.0)

    def test_csv_statement_download(self):
        response = self.client.get(
            "/api/reports/market-fees",
            {"financialYear": "2025-26", "month": "June", "format": "csv", "columns": "name,progressiveCurrent"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("attachment;", response["Content-Disposition"])
        text = b"".join(response.streaming_content).decode()
        self.assertEqual(text.splitlines()[0], '"Name of the AMC","Progressive Total (2025-26)"')
        self.assertIn('"Karapa","1.9"', text)

    def test_invalid_inputs(self):
        self.assertEqual(
            self.client.get("/api/reports/market-fees", {"financialYear": "2025"}).status_code, 400
        )
        self.assertEqual(
            self.client.get("/api/reports/market-fees", {"month": "Smarch"}).status_code, 400
        )
        self.assertEqual(
            self.client.get("/api/reports/market-fees", {"statement": "district"}).status_code, 400
        )


class CheckpostStatementTest(TestCase):
    def test_checkpost_rows_use_checkpost_targets(self):
        committee = make_committee(checkposts=["Penuguduru"])
        checkpost = committee.checkposts.get()
        TargetService.create_target(
            {
                "committee": committee,
                "financial_year": "2025-26",
                "yearly_target": Decimal("1000"),
                "checkpost_targets": [
                    {"checkpost": checkpost, "month": "MAY", "amount": Decimal("100")},
                    {"checkpost": checkpost, "month": "JUNE", "amount": Decimal("100")},
                ],
            }
        )
        make_receipt(
            committee, on=date(2025, 5, 9), fee="150.00",
            collection_location=Receipt.CHECKPOST, checkpost=checkpost,
        )

        rows = ReportService.statement("checkpost", "2025-26", "JUNE", in_lakhs=False)["reportData"]

        self.assertEqual(rows[0]["name"], "Penuguduru")
        self.assertEqual(rows[0]["cumulativeTarget"], 200.0)
        self.assertEqual(rows[0]["yearlyTarget"], 200.0)
        self.assertEqual(rows[0]["cumulativeAchievement"], 75.0)


class AnalyticsTest(TestCase):
    def setUp(self):
        self.committee = make_committee()
        make_receipt(self.committee, number="R1", on=date(2025, 5, 12), fee="80000.00")
        make_receipt(self.committee, number="R2", on=date(2025, 6, 3), fee="110000.00", commodity="Cotton")
        self.client = client_for()

    def test_monthly_trends_with_growth_and_seasons(self):
        response = self.client.get("/api/analytics/trends", {"period": "monthly", "financialYear": "2025-26"})

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual([row["period"] for row in data["trends"]], ["May 2025", "June 2025"])
        self.assertEqual(data["trends"][0]["growthRate"], 0.0)
        self.assertEqual(data["trends"][1]["growthRate"], 37.5)
        seasons = {row["season"]: row["amount"] for row in data["seasonalPatterns"]}
        self.assertEqual(seasons, {"Spring": 80000.0, "Summer": 110000.0, "Monsoon": 0.0, "Winter": 0.0})
        self.assertEqual(data["summary"]["totalReceipts"], 2)

    def test_growth_skips_months_without_receipts(self):
        make_receipt(self.committee, number="R3", on=date(2025, 8, 20), fee="121000.00")

        data = self.client.get("/api/analytics/trends", {"financialYear": "2025-26"}).json()["data"]

        self.assertEqual([row["period"] for row in data["trends"]], ["May 2025", "June 2025", "August 2025"])
        self.assertEqual(data["trends"][2]["growthRate"], 10.0)

    def test_quarterly_buckets(self):
        data = self.client.get("/api/analytics/trends", {"period": "quarterly"}).json()["data"]

        self.assertEqual([row["period"] for row in data["trends"]], ["Q2 2025"])
        self.assertEqual(data["trends"][0]["amount"], 190000.0)

    def test_unknown_period(self):
        self.assertEqual(self.client.get("/api/analytics/trends", {"period": "weekly"}).status_code, 400)

    def test_dashboard(self):
        data = self.client.get("/api/analytics/dashboard", {"financialYear": "2025-26"}).json()["data"]

        self.assertEqual(data["overview"]["totalReceipts"], 2)
        self.assertEqual(data["overview"]["currentYearCollection"], 190000.0)
        self.assertEqual(data["overview"]["yearOverYearGrowth"], 0.0)
        self.assertEqual(data["monthlyTrends"]["months"][0], "May")
        self.assertEqual(data["monthlyTrends"]["currentYear"][1], 110000.0)

    def test_committee_performance_without_target(self):
        data = self.client.get(
            "/api/analytics/committee-performance", {"financialYear": "2025-26"}
        ).json()["data"]

        self.assertEqual(data[0]["performance"]["totalCollection"], 190000.0)
        self.assertEqual(data[0]["performance"]["achievement"], 0.0)
        self.assertEqual(len(data[0]["monthlyData"]), 12)
        self.assertEqual(
            {row["commodity"] for row in data[0]["commodityBreakdown"]}, {"Paddy", "Cotton"}
        )
