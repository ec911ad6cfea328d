"""
Test Suite: Thirds bucketizer
T1 = days 1-10, T2 = 11-20, T3 = 21-end of month
"""

import pytest

from dinvox.records import ExpenseRecord
from dinvox.thirds import compute_thirds, third_for_day


def expense(date, amount, category_id=None):
    return ExpenseRecord(date=date, amount=amount, category_id=category_id)


class TestThirdForDay:
    """Bucket boundaries"""

    @pytest.mark.parametrize("day,third", [
        (1, "T1"), (10, "T1"),
        (11, "T2"), (20, "T2"),
        (21, "T3"), (28, "T3"), (31, "T3"),
    ])
    def test_boundaries(self, day, third):
        assert third_for_day(day) == third


class TestComputeThirds:
    """Totals and shares for a single month"""

    @pytest.fixture
    def january(self):
        return [
            expense("2026-01-05", 100.0),
            expense("2026-01-15", 200.0),
            expense("2026-01-25", 300.0),
        ]

    def test_basic_split(self, january):
        result = compute_thirds(january)

        assert result.month_key == "2026-01"
        assert (result.total_t1, result.total_t2, result.total_t3) == (100.0, 200.0, 300.0)
        assert result.total_month == 600.0
        assert result.percentages() == (16.7, 33.3, 50.0)
        assert result.active_days == 3
        assert result.first_day_with_expense == 5
        assert result.n_expenses == 3

    def test_february_scenario(self):
        result = compute_thirds([
            {"date": "2026-02-05", "amount": 100},
            {"date": "2026-02-15", "amount": 200},
            {"date": "2026-02-25", "amount": 300},
        ])
        assert result.month_key == "2026-02"
        assert result.total_month == 600.0
        assert result.percentages() == (16.7, 33.3, 50.0)

    def test_shares_are_fractions_summing_to_one(self, january):
        result = compute_thirds(january)
        assert result.pct_t1 + result.pct_t2 + result.pct_t3 == pytest.approx(1.0)
        assert result.pct_t3 == pytest.approx(0.5)

    def test_totals_add_up(self, january):
        result = compute_thirds(january)
        assert result.total_t1 + result.total_t2 + result.total_t3 == pytest.approx(result.total_month)

    def test_day_boundaries_land_in_the_right_third(self):
        result = compute_thirds([
            expense("2026-01-10", 1.0),
            expense("2026-01-11", 2.0),
            expense("2026-01-20", 4.0),
            expense("2026-01-21", 8.0),
            expense("2026-01-31", 16.0),
        ])
        assert (result.total_t1, result.total_t2, result.total_t3) == (1.0, 6.0, 24.0)

    def test_same_day_counts_once(self):
        result = compute_thirds([
            expense("2026-01-03", 10.0),
            expense("2026-01-03", 15.0),
        ])
        assert result.active_days == 1
        assert result.n_expenses == 2
        assert result.total_t1 == 25.0

    def test_empty_input(self):
        assert compute_thirds([]) is None
        assert compute_thirds(None) is None

    def test_only_malformed_dates(self):
        assert compute_thirds([expense("01/02/2026", 10.0), expense("2026-1-2", 5.0)]) is None

    def test_malformed_dates_are_skipped(self):
        result = compute_thirds([expense("2026-01-02", 10.0), expense("bad", 99.0)])
        assert result.total_month == 10.0
        assert result.active_days == 1

    def test_mixed_months_are_rejected(self, caplog):
        result = compute_thirds([expense("2026-01-05", 10.0), expense("2026-02-05", 10.0)])
        assert result is None
        assert "mixing" in caplog.text

    def test_non_positive_amounts_cover_days_without_adding(self):
        result = compute_thirds([
            expense("2026-01-02", 0.0),
            expense("2026-01-12", -50.0),
            expense("2026-01-22", 40.0),
        ])
        assert result.total_month == 40.0
        assert result.active_days == 3
        assert result.first_day_with_expense == 2
        assert result.pct_t3 == 1.0

    def test_zero_total_gives_zero_shares(self):
        result = compute_thirds([expense("2026-01-02", 0.0)])
        assert result.total_month == 0.0
        assert (result.pct_t1, result.pct_t2, result.pct_t3) == (0.0, 0.0, 0.0)

    def test_accepts_plain_dicts(self):
        result = compute_thirds([
            {"date": "2026-01-05", "amount": "1500.50"},
            {"expense_date": "2026-01-25", "amount": 499.5},
        ])
        assert result.total_month == 2000.0

    def test_to_dict_uses_camel_case(self, january):
        payload = compute_thirds(january).to_dict()
        assert payload["monthKey"] == "2026-01"
        assert payload["totalT3"] == 300.0
        assert payload["firstDayWithExpense"] == 5
