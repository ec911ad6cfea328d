"""
Month Pace Module
Compares spend-to-date in a month against the same cutoff in previous months.
"""

import logging
import math
import os
import statistics
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .calendar_keys import (
    days_in_month,
    is_month_key,
    month_index,
    month_key_from_date,
    shift_month_key,
)
from .records import ExpenseRecord, RecordLike, coerce_records

logger = logging.getLogger(__name__)

CONTENIDO = 'contenido'
NORMAL = 'normal'
ACELERADO = 'acelerado'

SIN_REFERENCIA = 'sin_referencia'
PRELIMINAR = 'preliminar'
SOLIDA = 'solida'

AGGREGATES = {
    'median': statistics.median,
    'mean': statistics.mean,
}


@dataclass(frozen=True)
class PaceConfig:
    """Thresholds and baseline rules for the pacing engine"""

    threshold_contenido: float = 0.9
    threshold_acelerado: float = 1.1
    max_baseline_months: int = 3
    solid_min_months: int = 3
    # Minimum coverage for a previous month to count as baseline
    min_active_days: int = 1
    max_first_expense_day: int = 31
    aggregate: str = 'median'

    def __post_init__(self):
        if self.threshold_contenido <= 0 or self.threshold_acelerado <= 0:
            raise ValueError("Pace thresholds must be positive")
        if self.threshold_contenido > self.threshold_acelerado:
            raise ValueError("threshold_contenido must not exceed threshold_acelerado")
        if not 1 <= self.max_baseline_months <= 3:
            raise ValueError("max_baseline_months must be between 1 and 3")
        if not 1 <= self.solid_min_months <= self.max_baseline_months:
            raise ValueError("solid_min_months must be between 1 and max_baseline_months")
        if self.min_active_days < 1:
            raise ValueError("min_active_days must be at least 1")
        if not 1 <= self.max_first_expense_day <= 31:
            raise ValueError("max_first_expense_day must be between 1 and 31")
        if self.aggregate not in AGGREGATES:
            raise ValueError(f"Unknown baseline aggregate: {self.aggregate}")

    @classmethod
    def from_environment(cls) -> "PaceConfig":
        defaults = cls()
        max_months = _env_number(
            'DINVOX_PACE_MAX_BASELINE_MONTHS', defaults.max_baseline_months, int)
        return cls(
            threshold_contenido=_env_number(
                'DINVOX_PACE_THRESHOLD_CONTENIDO', defaults.threshold_contenido, float),
            threshold_acelerado=_env_number(
                'DINVOX_PACE_THRESHOLD_ACELERADO', defaults.threshold_acelerado, float),
            max_baseline_months=max_months,
            solid_min_months=_env_number(
                'DINVOX_PACE_SOLID_MIN_MONTHS', min(defaults.solid_min_months, max_months), int),
            min_active_days=_env_number(
                'DINVOX_PACE_MIN_ACTIVE_DAYS', defaults.min_active_days, int),
            max_first_expense_day=_env_number(
                'DINVOX_PACE_MAX_FIRST_EXPENSE_DAY', defaults.max_first_expense_day, int),
            aggregate=os.getenv('DINVOX_PACE_AGGREGATE', defaults.aggregate).strip().lower(),
        )


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


@dataclass(frozen=True)
class PaceChartPoint:
    day: int
    actual: float
    baseline: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        point = {'day': self.day, 'actual': self.actual}
        if self.baseline is not None:
            point['baseline'] = self.baseline
        return point


@dataclass(frozen=True)
class PaceResult:
    selected_month_key: str
    day_limit: int
    actual_to_day: float
    baseline_to_day: Optional[float]
    avg_daily_actual: float
    r: Optional[float]
    delta_pct: Optional[float]
    status: Optional[str]
    confidence: str
    baseline_months_used: List[str]
    valid_months_found: int
    reasons_no_baseline: List[str] = field(default_factory=list)
    chart: List[PaceChartPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'selectedMonthKey': self.selected_month_key,
            'dayLimit': self.day_limit,
            'actualToDay': self.actual_to_day,
            'baselineToDay': self.baseline_to_day,
            'avgDailyActual': self.avg_daily_actual,
            'R': self.r,
            'deltaPct': self.delta_pct,
            'status': self.status,
            'confidence': self.confidence,
            'baselineMonthsUsed': list(self.baseline_months_used),
            'meta': {
                'validMonthsFound': self.valid_months_found,
                'reasonsNoBaseline': list(self.reasons_no_baseline) or None,
            },
            'chart': [point.to_dict() for point in self.chart],
        }


@dataclass
class _MonthSeries:
    month_key: str
    days_in_month: int
    # Index 0 unused so that day d lives at [d]
    daily_totals: List[float]
    daily_cumulative: List[float]
    active_days: int
    first_day_with_expense: Optional[int]

    def cumulative_at(self, day: int) -> float:
        return self.daily_cumulative[min(day, self.days_in_month)]


def _build_month_series(month_key: str, expenses: List[ExpenseRecord]) -> Optional[_MonthSeries]:
    size = days_in_month(month_key)
    if not size:
        return None

    daily_totals = [0.0] * (size + 1)
    active = set()
    first_day = None

    for expense in expenses:
        day = expense.day
        # Day 31 in a 30-day month is a bad record, not a reason to fail
        if day is None or day > size:
            continue
        if not expense.has_valid_amount:
            continue

        daily_totals[day] += expense.amount
        active.add(day)
        if first_day is None or day < first_day:
            first_day = day

    daily_cumulative = [0.0] * (size + 1)
    for day in range(1, size + 1):
        daily_cumulative[day] = daily_cumulative[day - 1] + daily_totals[day]

    return _MonthSeries(
        month_key=month_key,
        days_in_month=size,
        daily_totals=daily_totals,
        daily_cumulative=daily_cumulative,
        active_days=len(active),
        first_day_with_expense=first_day,
    )


def _group_by_month(expenses: List[ExpenseRecord]) -> Dict[str, List[ExpenseRecord]]:
    grouped = defaultdict(list)
    for expense in expenses:
        key = expense.month_key
        if key:
            grouped[key].append(expense)
    return grouped


def is_valid_baseline_month(series: _MonthSeries, config: PaceConfig) -> bool:
    if series.active_days < config.min_active_days:
        return False
    if series.first_day_with_expense is None:
        return False
    return series.first_day_with_expense <= config.max_first_expense_day


def status_for_ratio(r: Optional[float], config: PaceConfig) -> Optional[str]:
    """
    Classify a pace ratio

    Args:
        r: actual / baseline ratio, or None without baseline
        config: Thresholds to compare against

    Returns:
        'contenido', 'normal', 'acelerado' or None
    """
    if r is None:
        return None
    if r < config.threshold_contenido:
        return CONTENIDO
    if r > config.threshold_acelerado:
        return ACELERADO
    return NORMAL


def confidence_for(months_used: int, config: PaceConfig) -> str:
    if months_used <= 0:
        return SIN_REFERENCIA
    if months_used < config.solid_min_months:
        return PRELIMINAR
    return SOLIDA


def resolve_day_limit(selected_month_key: str, today: date) -> Optional[int]:
    """
    Day cutoff for a month as seen from ``today``

    Returns:
        today's day for the current month, the last day for a past month,
        None for future or malformed months
    """
    selected = month_index(selected_month_key)
    if selected is None:
        return None

    current = month_index(month_key_from_date(today))
    if selected == current:
        return today.day
    if selected < current:
        return days_in_month(selected_month_key)
    return None


def compute_pace(records: Iterable[RecordLike],
                 selected_month_key: str,
                 day_limit,
                 config: Optional[PaceConfig] = None) -> Optional[PaceResult]:
    """
    Compare cumulative spend of a month against its baseline

    Args:
        records: Expenses covering the selected month and the months before it
        selected_month_key: Month under analysis ("YYYY-MM")
        day_limit: Last day counted; clamped to the month length
        config: Thresholds and baseline rules (defaults when omitted)

    Returns:
        PaceResult, or None for a malformed month key or day limit
    """
    cfg = config or PaceConfig()

    if not is_month_key(selected_month_key):
        return None
    if isinstance(day_limit, bool) or not isinstance(day_limit, (int, float)):
        return None
    if isinstance(day_limit, float) and not math.isfinite(day_limit):
        return None

    by_month = _group_by_month(coerce_records(records))

    selected = _build_month_series(selected_month_key, by_month.get(selected_month_key, []))
    if selected is None:
        return None

    limit = max(1, min(math.trunc(day_limit), selected.days_in_month))
    actual_to_day = selected.daily_cumulative[limit]
    avg_daily_actual = actual_to_day / limit

    # Baseline: consecutive previous months that have usable data
    baseline_series = []
    for offset in range(1, cfg.max_baseline_months + 1):
        key = shift_month_key(selected_month_key, -offset)
        expenses = by_month.get(key) if key else None
        if not expenses:
            continue
        series = _build_month_series(key, expenses)
        if series and is_valid_baseline_month(series, cfg):
            baseline_series.append(series)
        else:
            logger.debug(f"Month {key} does not qualify as pace baseline")

    reasons = []
    if not baseline_series:
        reasons.append("No previous month qualifies as baseline.")

    # Chart and baseline come out of the same day-by-day pass
    aggregate = AGGREGATES[cfg.aggregate]
    chart = []
    baseline_to_day = None
    for day in range(1, limit + 1):
        baseline = None
        if baseline_series:
            baseline = float(aggregate([series.cumulative_at(day) for series in baseline_series]))
            baseline_to_day = baseline
        chart.append(PaceChartPoint(day=day, actual=selected.daily_cumulative[day], baseline=baseline))

    r = None
    delta_pct = None
    if baseline_to_day is not None and baseline_to_day > 0:
        r = actual_to_day / baseline_to_day
        delta_pct = (r - 1) * 100
    elif baseline_to_day is not None:
        reasons.append("Baseline months have no spend up to this day.")

    return PaceResult(
        selected_month_key=selected_month_key,
        day_limit=limit,
        actual_to_day=actual_to_day,
        baseline_to_day=baseline_to_day,
        avg_daily_actual=avg_daily_actual,
        r=r,
        delta_pct=delta_pct,
        status=status_for_ratio(r, cfg),
        confidence=confidence_for(len(baseline_series), cfg),
        baseline_months_used=[series.month_key for series in baseline_series],
        valid_months_found=len(baseline_series),
        reasons_no_baseline=reasons,
        chart=chart,
    )
