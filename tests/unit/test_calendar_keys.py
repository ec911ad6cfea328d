"""
Test Suite: Calendar key utilities
Month keys, day strings and month arithmetic
"""

import pytest

from dinvox.calendar_keys import (
    CERRADO,
    EN_CURSO,
    MAX_MONTH_SPAN,
    NO_INICIADO,
    day_of,
    day_string,
    days_in_month,
    is_month_key,
    last_n_month_keys,
    month_end,
    month_key_of,
    month_keys_between,
    month_label,
    month_start,
    shift_month_key,
    split_date,
    third_range_labels,
    third_states,
    year_to_date_month_keys,
)


class TestParsing:
    """Shape checks on month keys and day strings"""

    @pytest.mark.parametrize("value,expected", [
        ("2026-02-01", "2026-02"),
        ("2025-12-31", "2025-12"),
        ("2026-2-1", None),
        ("2026-02-01T00:00:00", None),
        ("2026-02-05\n", None),
        ("2026-13-01", None),
        ("", None),
        (None, None),
        (20260201, None),
    ])
    def test_month_key_of(self, value, expected):
        assert month_key_of(value) == expected

    def test_month_key_is_taken_by_substring(self):
        """A first-of-month date always lands in its own month"""
        assert month_key_of("2026-02-01") == "2026-02"
        assert day_of("2026-02-01") == 1

    def test_split_date_checks_shape_only(self):
        assert split_date("2025-02-30") == (2025, 2, 30)
        assert split_date("2025-02-32") is None
        assert split_date("2025-00-10") is None

    @pytest.mark.parametrize("key,expected", [
        ("2026-01", True),
        ("2026-12", True),
        ("2026-13", False),
        ("2026-00", False),
        ("26-01", False),
        ("2026-1", False),
        ("2026-02\n", False),
        ("\u0662\u0660\u0662\u0666-02", False),
        (None, False),
    ])
    def test_is_month_key(self, key, expected):
        assert is_month_key(key) is expected


class TestMonthLength:
    """Days per month including leap years"""

    @pytest.mark.parametrize("key,days", [
        ("2024-02", 29),
        ("2025-02", 28),
        ("2000-02", 29),
        ("1900-02", 28),
        ("2026-04", 30),
        ("2026-12", 31),
    ])
    def test_days_in_month(self, key, days):
        assert days_in_month(key) == days

    def test_invalid_key_has_no_length(self):
        assert days_in_month("2026-13") is None
        assert days_in_month("2026-02\n") is None

    def test_month_bounds(self):
        assert month_start("2024-02") == "2024-02-01"
        assert month_end("2024-02") == "2024-02-29"
        assert month_end("bad") is None

    def test_day_string_rejects_missing_days(self):
        assert day_string("2026-02", 13) == "2026-02-13"
        assert day_string("2025-02", 29) is None
        assert day_string("2026-02", 0) is None


class TestShiftMonthKey:
    """Month arithmetic across year boundaries"""

    @pytest.mark.parametrize("key,delta,expected", [
        ("2026-01", -1, "2025-12"),
        ("2025-12", 1, "2026-01"),
        ("2026-03", -14, "2025-01"),
        ("2026-03", 0, "2026-03"),
        ("2026-01", 1.7, "2026-02"),
        ("2026-01", -1.7, "2025-12"),
    ])
    def test_shift(self, key, delta, expected):
        assert shift_month_key(key, delta) == expected

    @pytest.mark.parametrize("key,delta", [
        ("2026-13", 1),
        ("bad", 1),
        ("2026-01", float("nan")),
        ("2026-01", float("inf")),
        ("2026-01", "1"),
        ("2026-01", True),
        ("9999-12", 1),
        ("0000-01", -1),
    ])
    def test_invalid_shift_returns_none(self, key, delta):
        assert shift_month_key(key, delta) is None

    @pytest.mark.parametrize("key", ["2026-01", "2025-12", "2000-02", "1999-07"])
    @pytest.mark.parametrize("n", [-25, -12, -1, 0, 1, 11, 36])
    def test_round_trip(self, key, n):
        assert shift_month_key(shift_month_key(key, n), -n) == key


class TestMonthRanges:
    """Inclusive month ranges used by the evolution windows"""

    def test_between_is_inclusive_and_ascending(self):
        assert month_keys_between("2025-11", "2026-02") == [
            "2025-11", "2025-12", "2026-01", "2026-02"
        ]

    def test_between_single_month(self):
        assert month_keys_between("2026-02", "2026-02") == ["2026-02"]

    def test_between_reversed_or_invalid_is_empty(self):
        assert month_keys_between("2026-02", "2025-11") == []
        assert month_keys_between("bad", "2026-01") == []

    def test_between_is_capped(self):
        keys = month_keys_between("2000-01", "2100-01")
        assert len(keys) == MAX_MONTH_SPAN
        assert keys[0] == "2000-01"

    def test_last_six_months(self):
        assert last_n_month_keys("2026-02", 6) == [
            "2025-09", "2025-10", "2025-11", "2025-12", "2026-01", "2026-02"
        ]

    def test_last_n_truncates_fractions(self):
        assert last_n_month_keys("2026-02", 2.9) == ["2026-01", "2026-02"]

    @pytest.mark.parametrize("n", [0, -3, float("nan"), "6", None, True])
    def test_last_n_invalid_count(self, n):
        assert last_n_month_keys("2026-02", n) == []

    def test_year_to_date(self):
        assert year_to_date_month_keys("2026-03") == ["2026-01", "2026-02", "2026-03"]
        assert year_to_date_month_keys("2026-01") == ["2026-01"]
        assert year_to_date_month_keys("nope") == []


class TestLabels:
    """Spanish UI labels"""

    def test_month_label(self):
        assert month_label("2026-01") == "Ene 2026"
        assert month_label("2025-12") == "Dic 2025"
        assert month_label("2025-13") is None

    def test_third_range_labels(self):
        assert third_range_labels("2026-02") == {
            "t1": "01-10 Feb", "t2": "11-20 Feb", "t3": "21-28 Feb"
        }
        assert third_range_labels("2025-12")["t3"] == "21-31 Dic"

    @pytest.mark.parametrize("day,expected", [
        (1, (EN_CURSO, NO_INICIADO, NO_INICIADO)),
        (10, (EN_CURSO, NO_INICIADO, NO_INICIADO)),
        (11, (CERRADO, EN_CURSO, NO_INICIADO)),
        (20, (CERRADO, EN_CURSO, NO_INICIADO)),
        (21, (CERRADO, CERRADO, EN_CURSO)),
        (31, (CERRADO, CERRADO, EN_CURSO)),
    ])
    def test_third_states(self, day, expected):
        states = third_states(day)
        assert (states["t1"], states["t2"], states["t3"]) == expected
