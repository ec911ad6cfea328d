"""Expense records as consumed by the analytics engines."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from .calendar_keys import day_of, month_key_of
from .categories import normalize_category_id


def to_number(value: Any) -> float:
    """Convert numbers and numeric strings (Postgres ``numeric``) to float; ``nan`` otherwise."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return math.nan


@dataclass(frozen=True)
class ExpenseRecord:
    """A single expense: local calendar day, amount and optional category."""

    date: str
    amount: float
    category_id: Optional[str] = None

    @property
    def month_key(self) -> Optional[str]:
        return month_key_of(self.date)

    @property
    def day(self) -> Optional[int]:
        return day_of(self.date)

    @property
    def category(self) -> str:
        return normalize_category_id(self.category_id)

    @property
    def has_valid_amount(self) -> bool:
        return math.isfinite(self.amount) and self.amount > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "amount": self.amount,
            "categoryId": self.category_id,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ExpenseRecord":
        if not payload:
            raise ValueError("Missing expense payload")

        date_value = payload.get("date")
        if date_value is None:
            date_value = payload.get("expense_date")
        if date_value is None:
            raise ValueError("Expense payload has no date")

        category = payload.get("categoryId", payload.get("category_id"))
        return cls(
            date=str(date_value),
            amount=to_number(payload.get("amount")),
            category_id=None if category is None else str(category),
        )


RecordLike = Union[ExpenseRecord, Dict[str, Any]]


def coerce_records(items: Optional[Iterable[RecordLike]]) -> List[ExpenseRecord]:
    """Accept records or plain dicts and return a list of ExpenseRecord."""
    records = []
    for item in items or ():
        if isinstance(item, ExpenseRecord):
            records.append(item)
        else:
            records.append(ExpenseRecord.from_dict(item))
    return records
