"""
Test Suite: Range summaries
"""

import pytest

from dinvox.records import ExpenseRecord
from dinvox.summary import daily_totals, monthly_category_totals, summarize_range


def expense(date_str, amount, category_id=None):
    return ExpenseRecord(date=date_str, amount=amount, category_id=category_id)


class TestRangeSummary:
    """Totals and per-category shares"""

    @pytest.fixture
    def records(self):
        return [
            expense("2026-01-31", 999.0, "comida"),
            expense("2026-02-01", 300.0, "comida"),
            expense("2026-02-03", 100.0, "ocio"),
            expense("2026-02-03", 100.0, None),
            expense("2026-02-10", 0.0, "ocio"),
            expense("2026-02-14", 500.0, "salud"),
        ]

    def test_range_is_inclusive(self, records):
        summary = summarize_range(records, "2026-02-01", "2026-02-13")

        assert summary.total == 500.0
        assert summary.count == 3
        assert summary.from_date == "2026-02-01"
        assert summary.to_date == "2026-02-13"

    def test_categories_sorted_by_amount_then_id(self, records):
        summary = summarize_range(records, "2026-02-01", "2026-02-13")

        assert [s.category_id for s in summary.by_category] == ["comida", "ocio", "otros"]
        assert summary.by_category[0].percent == pytest.approx(60.0)
        assert sum(s.percent for s in summary.by_category) == pytest.approx(100.0)

    def test_empty_range(self, records):
        summary = summarize_range(records, "2026-03-01", "2026-03-31")
        assert summary.total == 0
        assert summary.count == 0
        assert summary.by_category == []

    def test_to_dict(self, records):
        payload = summarize_range(records, "2026-02-01", "2026-02-13").to_dict()
        assert payload["from"] == "2026-02-01"
        assert payload["byCategory"][0]["categoryId"] == "comida"
        assert payload["byCategory"][0]["percent"] == pytest.approx(60.0)


class TestDailyAndMonthlyTotals:

    def test_daily_totals(self):
        totals = daily_totals([
            expense("2026-02-03", 10.0),
            expense("2026-02-01", 5.0),
            expense("2026-02-03", 15.0),
            expense("2026-02-05", -1.0),
        ], "2026-02-01", "2026-02-28")

        assert [(t.ymd, t.total, t.tx_count) for t in totals] == [
            ("2026-02-01", 5.0, 1),
            ("2026-02-03", 25.0, 2),
        ]

    def test_monthly_category_totals(self):
        totals = monthly_category_totals([
            expense("2026-02-03", 10.0, "ocio"),
            expense("2026-01-03", 20.0, "comida"),
            expense("2026-02-09", 5.0, "ocio"),
            expense("bad", 5.0, "ocio"),
        ])

        assert [t.to_dict() for t in totals] == [
            {"monthKey": "2026-01", "categoryId": "comida", "total": 20.0, "txCount": 1},
            {"monthKey": "2026-02", "categoryId": "ocio", "total": 15.0, "txCount": 2},
        ]
