"""
Performance Report Module
Runs every analytics engine for one user and returns a single JSON-ready payload.

The caller fetches the expenses (see ``PerformanceReporter.fetch_range``) and
passes them in together with the user's local "today".
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from .calendar_keys import (
    CERRADO,
    day_string,
    month_key_from_date,
    month_label,
    month_start,
    shift_month_key,
    third_range_labels,
    third_states,
)
from .config import Settings
from .evolution import ALL_CATEGORIES, compute_evolution, window_month_keys
from .insights import (
    CURRENT_MONTH,
    PREVIOUS_MONTH,
    build_evolution_insight,
    build_month_summary_insight,
    build_pace_insight,
    build_thirds_insight,
)
from .pace import compute_pace, resolve_day_limit
from .periods import DateRange, resolve_today
from .records import RecordLike, coerce_records
from .summary import summarize_range
from .thirds import compute_thirds

logger = logging.getLogger(__name__)


class PerformanceReporter:
    """Builds the performance page payload from pre-fetched expenses"""

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize reporter

        Args:
            settings: Timezone, currency and engine defaults (environment when omitted)
        """
        self.settings = settings or Settings.from_environment()

    def resolve_today(self, current_time: Optional[datetime] = None) -> date:
        """
        User's local day

        Args:
            current_time: Optional instant for testing (system clock otherwise)
        """
        return resolve_today(self.settings.timezone, current_time)

    def selected_month_key(self, period: str, today: date) -> str:
        anchor = month_key_from_date(today)
        if period == CURRENT_MONTH:
            return anchor
        if period == PREVIOUS_MONTH:
            return shift_month_key(anchor, -1)
        raise ValueError(f"Unknown report period: {period!r}")

    def fetch_range(self, today: date, window_kind: Optional[str] = None) -> DateRange:
        """
        Days a caller has to load so every engine sees its data

        Covers the evolution window and the pace baseline of the previous
        month, through today.
        """
        anchor = month_key_from_date(today)
        window = window_month_keys(window_kind or self.settings.evolution_window, anchor)
        baseline_start = shift_month_key(anchor, -(1 + self.settings.pace.max_baseline_months))
        start = min(window[0], baseline_start) if baseline_start else window[0]
        return DateRange(month_start(start), today.isoformat())

    def build_report(self,
                     records: Iterable[RecordLike],
                     today: Optional[date] = None,
                     period: str = CURRENT_MONTH,
                     window_kind: Optional[str] = None,
                     category_id: str = ALL_CATEGORIES) -> Dict[str, Any]:
        """
        Run thirds, pace, evolution and summary for one month

        Args:
            records: Expenses covering at least ``fetch_range(today)``
            today: User's local day (resolved from the settings timezone if None)
            period: 'current_month' or 'previous_month'
            window_kind: Evolution window (settings default if None)
            category_id: Category for the evolution series, or 'all'

        Returns:
            JSON-serializable report dict
        """
        if today is None:
            today = self.resolve_today()

        expenses = coerce_records(records)
        window = window_kind or self.settings.evolution_window
        selected = self.selected_month_key(period, today)
        day_limit = resolve_day_limit(selected, today)
        label = month_label(selected)

        month_expenses = [
            e for e in expenses
            if e.month_key == selected and e.day is not None and e.day <= day_limit
        ]

        thirds = compute_thirds(month_expenses)
        pace = compute_pace(expenses, selected, day_limit, self.settings.pace)
        evolution = compute_evolution(expenses, window, category_id, today=today)
        summary = summarize_range(expenses, month_start(selected), day_string(selected, day_limit))

        if period == CURRENT_MONTH:
            states = third_states(today.day)
        else:
            states = {'t1': CERRADO, 't2': CERRADO, 't3': CERRADO}

        logger.info(
            f"Performance report for {selected} up to day {day_limit}: "
            f"{len(expenses)} records, pace={pace.status if pace else None}"
        )

        return {
            'today': today.isoformat(),
            'period': period,
            'monthKey': selected,
            'monthLabel': label,
            'dayLimit': day_limit,
            'thirdStates': states,
            'thirdRanges': third_range_labels(selected),
            'thirds': thirds.to_dict() if thirds else None,
            'pace': pace.to_dict() if pace else None,
            'evolution': evolution.to_dict(),
            'summary': summary.to_dict(),
            'insights': {
                'thirds': build_thirds_insight(thirds, period, label).to_dict(),
                'pace': build_pace_insight(pace, period, label).to_dict(),
                'evolution': build_evolution_insight(evolution, category_id).to_dict(),
                'summary': build_month_summary_insight(summary, self.settings.currency).to_dict(),
            },
        }
