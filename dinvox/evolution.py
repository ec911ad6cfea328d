"""Month-over-month evolution: gap-filled monthly series plus closed-month comparisons.

The month containing ``today`` is the in-progress month. It is plotted in the
series but never compared, since a partial month is not comparable to a
closed one.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from .calendar_keys import (
    last_n_month_keys,
    month_key_from_date,
    month_key_of,
    month_label,
    year_to_date_month_keys,
)
from .categories import normalize_category_id
from .records import RecordLike, coerce_records

logger = logging.getLogger(__name__)

LAST_6_MONTHS = "last_6_months"
LAST_12_MONTHS = "last_12_months"
YEAR_TO_DATE = "year_to_date"
WINDOW_KINDS = (LAST_6_MONTHS, LAST_12_MONTHS, YEAR_TO_DATE)

ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class MonthlyPoint:
    month_key: str
    label: str
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {"monthKey": self.month_key, "label": self.label, "total": self.total}


@dataclass(frozen=True)
class MonthComparison:
    """Last closed month against the closed month before it."""

    current_month_key: str
    previous_month_key: str
    current_label: str
    prev_label: str
    current_total: float
    previous_total: float
    delta_amount: float
    delta_pct: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentMonthKey": self.current_month_key,
            "previousMonthKey": self.previous_month_key,
            "currentLabel": self.current_label,
            "prevLabel": self.prev_label,
            "currentTotal": self.current_total,
            "previousTotal": self.previous_total,
            "deltaAmount": self.delta_amount,
            "deltaPct": self.delta_pct,
        }


@dataclass(frozen=True)
class CategoryComparison:
    category_id: str
    current_total: float
    previous_total: float
    delta_amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categoryId": self.category_id,
            "currentTotal": self.current_total,
            "previousTotal": self.previous_total,
            "deltaAmount": self.delta_amount,
        }


@dataclass(frozen=True)
class EvolutionResult:
    window_kind: str
    category_id: str
    series: List[MonthlyPoint]
    in_progress_month_key: str
    headline_comparison: Optional[MonthComparison]
    month_delta_pct_by_month_key: Dict[str, Optional[float]] = field(default_factory=dict)
    category_comparisons: List[CategoryComparison] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "windowKind": self.window_kind,
            "categoryId": self.category_id,
            "series": [point.to_dict() for point in self.series],
            "inProgressMonthKey": self.in_progress_month_key,
            "headlineComparison": (
                self.headline_comparison.to_dict() if self.headline_comparison else None
            ),
            "monthDeltaPctByMonthKey": dict(self.month_delta_pct_by_month_key),
            "categoryComparisons": [c.to_dict() for c in self.category_comparisons],
        }


def safe_pct_change(current: float, previous: float) -> Optional[float]:
    """Percent change, or None against a zero previous value."""
    if previous == 0:
        return None
    return (current - previous) / previous * 100


def anchor_month_key(today: Union[date, str]) -> str:
    if isinstance(today, date):
        return month_key_from_date(today)
    key = month_key_of(today)
    if key is None:
        raise ValueError(f"Invalid reference day: {today!r}")
    return key


def window_month_keys(window_kind: str, anchor: str) -> List[str]:
    if window_kind == LAST_12_MONTHS:
        return last_n_month_keys(anchor, 12)
    if window_kind == LAST_6_MONTHS:
        return last_n_month_keys(anchor, 6)
    if window_kind == YEAR_TO_DATE:
        return year_to_date_month_keys(anchor)
    raise ValueError(f"Unknown evolution window: {window_kind!r}")


def _usable_amount(amount: float) -> bool:
    return math.isfinite(amount) and amount >= 0


def _headline(closed: List[MonthlyPoint]) -> Optional[MonthComparison]:
    if len(closed) < 2:
        return None
    current, previous = closed[-1], closed[-2]
    return MonthComparison(
        current_month_key=current.month_key,
        previous_month_key=previous.month_key,
        current_label=current.label,
        prev_label=previous.label,
        current_total=current.total,
        previous_total=previous.total,
        delta_amount=current.total - previous.total,
        delta_pct=safe_pct_change(current.total, previous.total),
    )


def _month_deltas(series: List[MonthlyPoint], in_progress: str) -> Dict[str, Optional[float]]:
    deltas = {}
    previous = None
    for point in series:
        deltas[point.month_key] = None
        if (previous is not None
                and point.month_key != in_progress
                and previous.month_key != in_progress):
            deltas[point.month_key] = safe_pct_change(point.total, previous.total)
        previous = point
    return deltas


def compute_evolution(records: Iterable[RecordLike],
                      window_kind: str = LAST_6_MONTHS,
                      category_id: Optional[str] = ALL_CATEGORIES,
                      *,
                      today: Union[date, str]) -> EvolutionResult:
    """Build the monthly series and closed-month comparisons for a window.

    ``today`` is injected by the caller; its month is the in-progress month
    and the anchor of the window. Category comparisons are only produced for
    the "all" view.
    """
    category = ALL_CATEGORIES
    if category_id and category_id != ALL_CATEGORIES:
        category = normalize_category_id(category_id)
    in_progress = anchor_month_key(today)
    month_keys = window_month_keys(window_kind, in_progress)

    totals: Dict[str, float] = defaultdict(float)
    by_category: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))

    for expense in coerce_records(records):
        key = expense.month_key
        if key is None or not _usable_amount(expense.amount):
            logger.debug(f"Skipping record {expense!r} for evolution")
            continue
        by_category[key][expense.category] += expense.amount
        if category == ALL_CATEGORIES or expense.category == category:
            totals[key] += expense.amount

    series = [
        MonthlyPoint(month_key=key, label=month_label(key) or key, total=totals.get(key, 0.0))
        for key in month_keys
    ]

    closed = [point for point in series if point.month_key != in_progress]
    headline = _headline(closed)

    comparisons = []
    if headline is not None and category == ALL_CATEGORIES:
        current = by_category.get(headline.current_month_key, {})
        previous = by_category.get(headline.previous_month_key, {})
        for cat in sorted(set(current) | set(previous)):
            comparisons.append(CategoryComparison(
                category_id=cat,
                current_total=current.get(cat, 0.0),
                previous_total=previous.get(cat, 0.0),
                delta_amount=current.get(cat, 0.0) - previous.get(cat, 0.0),
            ))

    return EvolutionResult(
        window_kind=window_kind,
        category_id=category,
        series=series,
        in_progress_month_key=in_progress,
        headline_comparison=headline,
        month_delta_pct_by_month_key=_month_deltas(series, in_progress),
        category_comparisons=comparisons,
    )
