"""
Thirds Bucketizer
Splits one month of expenses into T1 (days 1-10), T2 (11-20) and T3 (21-end).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from .records import RecordLike, coerce_records

logger = logging.getLogger(__name__)

T1_LAST_DAY = 10
T2_LAST_DAY = 20


def third_for_day(day: int) -> str:
    if day <= T1_LAST_DAY:
        return 'T1'
    if day <= T2_LAST_DAY:
        return 'T2'
    return 'T3'


def _share(part: float, total: float) -> float:
    return part / total if total > 0 else 0.0


@dataclass(frozen=True)
class ThirdsResult:
    """Totals and shares per third for a single month"""

    month_key: str
    n_expenses: int
    active_days: int
    first_day_with_expense: Optional[int]
    total_month: float
    total_t1: float
    total_t2: float
    total_t3: float
    # Fractions of total_month (0..1)
    pct_t1: float
    pct_t2: float
    pct_t3: float

    def percentages(self, ndigits: int = 1) -> Tuple[float, float, float]:
        """Shares as 0..100 values rounded for display."""
        return (
            round(self.pct_t1 * 100, ndigits),
            round(self.pct_t2 * 100, ndigits),
            round(self.pct_t3 * 100, ndigits),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'monthKey': self.month_key,
            'nExpenses': self.n_expenses,
            'activeDays': self.active_days,
            'firstDayWithExpense': self.first_day_with_expense,
            'totalMonth': self.total_month,
            'totalT1': self.total_t1,
            'totalT2': self.total_t2,
            'totalT3': self.total_t3,
            'pctT1': self.pct_t1,
            'pctT2': self.pct_t2,
            'pctT3': self.pct_t3,
        }


def compute_thirds(records: Iterable[RecordLike]) -> Optional[ThirdsResult]:
    """
    Compute totals and shares per third of the month

    Records must all belong to one month. The month is taken from the first
    record with a well-formed date; input spanning several months is
    rejected. A record with a non-positive amount adds nothing to the
    totals but its day still counts as covered.

    Args:
        records: ExpenseRecord objects or dicts with 'date', 'amount'

    Returns:
        ThirdsResult, or None when there is nothing to analyse
    """
    expenses = coerce_records(records)
    if not expenses:
        return None

    month_key = next((e.month_key for e in expenses if e.month_key), None)
    if month_key is None:
        logger.debug(f"No well-formed dates among {len(expenses)} records")
        return None

    totals = {'T1': 0.0, 'T2': 0.0, 'T3': 0.0}
    active_dates = set()
    first_day = None

    for expense in expenses:
        day = expense.day
        if day is None:
            logger.debug(f"Skipping record with malformed date {expense.date!r}")
            continue

        if expense.month_key != month_key:
            logger.warning(f"Rejecting thirds input mixing {month_key} and {expense.month_key}")
            return None

        active_dates.add(expense.date)
        if first_day is None or day < first_day:
            first_day = day

        if not expense.has_valid_amount:
            continue

        totals[third_for_day(day)] += expense.amount

    total_month = totals['T1'] + totals['T2'] + totals['T3']

    return ThirdsResult(
        month_key=month_key,
        n_expenses=len(expenses),
        active_days=len(active_dates),
        first_day_with_expense=first_day,
        total_month=total_month,
        total_t1=totals['T1'],
        total_t2=totals['T2'],
        total_t3=totals['T3'],
        pct_t1=_share(totals['T1'], total_month),
        pct_t2=_share(totals['T2'], total_month),
        pct_t3=_share(totals['T3'], total_month),
    )
