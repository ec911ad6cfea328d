"""
Range Summary Module
Aggregates for a date range: total, per-category shares, daily and monthly totals.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from .calendar_keys import split_date
from .records import ExpenseRecord, RecordLike, coerce_records


@dataclass(frozen=True)
class CategoryShare:
    category_id: str
    amount: float
    percent: float  # 0..100

    def to_dict(self) -> Dict[str, Any]:
        return {'categoryId': self.category_id, 'amount': self.amount, 'percent': self.percent}


@dataclass(frozen=True)
class RangeSummary:
    total: float
    count: int
    from_date: str
    to_date: str
    by_category: List[CategoryShare] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'count': self.count,
            'byCategory': [share.to_dict() for share in self.by_category],
            'from': self.from_date,
            'to': self.to_date,
        }


@dataclass(frozen=True)
class DailyTotal:
    ymd: str
    total: float
    tx_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {'ymd': self.ymd, 'total': self.total, 'txCount': self.tx_count}


@dataclass(frozen=True)
class MonthlyCategoryTotal:
    month_key: str
    category_id: str
    total: float
    tx_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'monthKey': self.month_key,
            'categoryId': self.category_id,
            'total': self.total,
            'txCount': self.tx_count,
        }


def _in_range(expense: ExpenseRecord, from_date: str, to_date: str) -> bool:
    # Well-formed "YYYY-MM-DD" strings sort chronologically
    if split_date(expense.date) is None:
        return False
    return from_date <= expense.date <= to_date


def summarize_range(records: Iterable[RecordLike], from_date: str, to_date: str) -> RangeSummary:
    """
    Total and per-category breakdown for an inclusive date range

    Args:
        records: Expenses; the ones outside the range or with unusable amounts are ignored
        from_date: First day "YYYY-MM-DD"
        to_date: Last day "YYYY-MM-DD"

    Returns:
        RangeSummary with categories sorted by amount (desc), then id
    """
    amounts: Dict[str, float] = defaultdict(float)
    count = 0

    for expense in coerce_records(records):
        if not _in_range(expense, from_date, to_date) or not expense.has_valid_amount:
            continue
        amounts[expense.category] += expense.amount
        count += 1

    total = sum(amounts.values())
    by_category = [
        CategoryShare(
            category_id=category,
            amount=amount,
            percent=(amount / total * 100) if total > 0 else 0.0,
        )
        for category, amount in amounts.items()
    ]
    by_category.sort(key=lambda share: (-share.amount, share.category_id))

    return RangeSummary(
        total=total,
        count=count,
        from_date=from_date,
        to_date=to_date,
        by_category=by_category,
    )


def daily_totals(records: Iterable[RecordLike], from_date: str, to_date: str) -> List[DailyTotal]:
    """Per-day totals for days that have at least one usable expense."""
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)

    for expense in coerce_records(records):
        if not _in_range(expense, from_date, to_date) or not expense.has_valid_amount:
            continue
        totals[expense.date] += expense.amount
        counts[expense.date] += 1

    return [DailyTotal(ymd=day, total=totals[day], tx_count=counts[day]) for day in sorted(totals)]


def monthly_category_totals(records: Iterable[RecordLike]) -> List[MonthlyCategoryTotal]:
    totals: Dict[tuple, float] = defaultdict(float)
    counts: Dict[tuple, int] = defaultdict(int)

    for expense in coerce_records(records):
        if expense.month_key is None or not expense.has_valid_amount:
            continue
        key = (expense.month_key, expense.category)
        totals[key] += expense.amount
        counts[key] += 1

    return [
        MonthlyCategoryTotal(month_key=month, category_id=category,
                             total=totals[(month, category)], tx_count=counts[(month, category)])
        for month, category in sorted(totals)
    ]
