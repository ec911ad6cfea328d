"""
Insight Formatters
Turn engine results into short Spanish headlines for the dashboard and chat channels.

Nothing here computes totals; every builder reads an engine result and
applies the wording, threshold and tie-break rules.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .calendar_keys import month_short_es, split_date
from .categories import category_label
from .evolution import ALL_CATEGORIES, EvolutionResult
from .pace import ACELERADO, CONTENIDO, SIN_REFERENCIA, PaceResult
from .summary import RangeSummary
from .thirds import ThirdsResult

CURRENT_MONTH = 'current_month'
PREVIOUS_MONTH = 'previous_month'

# Gap between the two heaviest thirds needed to call one of them dominant
DOMINANCE_THRESHOLD = 0.10

MAX_DRIVERS = 2

GOOD = 'good'
INFO = 'info'
WARN = 'warn'

NO_CALCULABLE = 'no_calculable'

ZERO_DECIMAL_CURRENCIES = {'COP', 'CLP', 'JPY'}
CURRENCY_SYMBOLS = {
    'COP': '$', 'CLP': '$', 'MXN': '$', 'ARS': '$',
    'USD': 'US$', 'EUR': '€', 'GBP': '£', 'JPY': '¥',
}

THIRD_NAMES = {'T1': 'primer tercio', 'T2': 'segundo tercio', 'T3': 'tercer tercio'}
THIRD_TIMING = {'T1': 'al inicio del mes', 'T2': 'a mitad de mes', 'T3': 'hacia el final del mes'}


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_pct_short(value: float) -> str:
    """One decimal, without a trailing ".0" (12.0 -> "12%", 12.34 -> "12.3%")."""
    rounded = round(value, 1)
    if rounded == int(rounded):
        return f"{int(rounded)}%"
    return f"{rounded:.1f}%"


def format_money(value: float, currency: str = 'COP') -> str:
    """
    Symbol-only money string with Spanish digit grouping

    Args:
        value: Amount in major units
        currency: ISO code; zero-decimal currencies are printed without cents

    Returns:
        e.g. "$120.000" for COP, "€12,50" for EUR
    """
    code = (currency or 'COP').upper()
    decimals = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
    amount = float(value or 0)

    magnitude = round(abs(amount), decimals)
    digits = f"{magnitude:,.{decimals}f}"
    digits = digits.replace(',', '_').replace('.', ',').replace('_', '.')
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    sign = '-' if amount < 0 and magnitude > 0 else ''
    return f"{sign}{symbol}{digits}"


def format_day_es(ymd: str) -> str:
    """ "2026-02-13" -> "13 Feb" """
    parts = split_date(ymd)
    if parts is None:
        return ymd
    _, month, day = parts
    return f"{day:02d} {month_short_es(month)}"


def severity_from_status(status: Optional[str]) -> str:
    if status == ACELERADO:
        return WARN
    if status == CONTENIDO:
        return GOOD
    return INFO


# ---------------------------------------------------------------------------
# Thirds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ThirdsInsight:
    headline: str
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {'headline': self.headline}
        if self.note:
            payload['note'] = self.note
        return payload


def build_thirds_insight(metrics: Optional[ThirdsResult], period: str, month_label: str) -> ThirdsInsight:
    if metrics is None or metrics.total_month <= 0:
        return ThirdsInsight(headline="No hay gastos registrados en este período.")

    thirds = [('T1', metrics.pct_t1), ('T2', metrics.pct_t2), ('T3', metrics.pct_t3)]
    # Stable sort: on equal shares the earlier third comes first
    ranked = sorted(thirds, key=lambda item: item[1], reverse=True)
    dominant, second = ranked[0], ranked[1]

    is_current = period == CURRENT_MONTH
    prefix = "Hasta hoy," if is_current else f"En {month_label},"

    if dominant[1] - second[1] >= DOMINANCE_THRESHOLD:
        if is_current:
            headline = f"{prefix} la mayor parte del gasto se concentra en el {THIRD_NAMES[dominant[0]]}."
        else:
            headline = f"{prefix} gastaste principalmente {THIRD_TIMING[dominant[0]]}."
    elif is_current:
        headline = f"{prefix} tu gasto ha estado bastante repartido a lo largo del mes."
    else:
        headline = f"{prefix} tu gasto estuvo bastante repartido en el tiempo."

    note = None
    if metrics.active_days == 1:
        note = "Este análisis se basa en gastos registrados en un solo día."
    elif metrics.active_days <= 3:
        note = "Este análisis se basa en pocos días con registro."

    return ThirdsInsight(headline=headline, note=note)


# ---------------------------------------------------------------------------
# Pace
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PaceInsight:
    status: str
    headline: str
    severity: str
    confidence: str
    delta_pct: Optional[float] = None
    baseline_months_used_count: int = 0
    note: Optional[str] = None
    key: str = 'month_pace'

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            'key': self.key,
            'status': self.status,
            'headline': self.headline,
            'severity': self.severity,
            'deltaPct': self.delta_pct,
            'confidence': self.confidence,
            'baselineMonthsUsedCount': self.baseline_months_used_count,
        }
        if self.note:
            payload['note'] = self.note
        return payload


def build_pace_insight(pace: Optional[PaceResult], period: str, month_label: str) -> PaceInsight:
    """
    Headline for the month pace card

    The headline never repeats the raw numbers; the presentation layer
    decides how to show delta_pct.
    """
    if pace is None:
        return PaceInsight(
            status=NO_CALCULABLE,
            headline="No se pudo interpretar el ritmo del mes.",
            note=f"Revisa que exista data suficiente para {month_label}.",
            severity=INFO,
            confidence=SIN_REFERENCIA,
        )

    baseline_count = len(pace.baseline_months_used)

    if pace.status is None or pace.r is None or pace.delta_pct is None:
        if period == PREVIOUS_MONTH:
            headline = f"En {month_label} no hubo referencia suficiente para evaluar tu comportamiento."
        else:
            headline = "Este mes aún no hay referencia suficiente para evaluar tu comportamiento."
        return PaceInsight(
            status=SIN_REFERENCIA,
            headline=headline,
            note=("Cuando tengas más meses registrados, podrás ver si tu gasto va "
                  "contenido, normal o acelerado."),
            severity=INFO,
            confidence=pace.confidence,
            baseline_months_used_count=baseline_count,
        )

    if period == PREVIOUS_MONTH:
        headline = f"En {month_label} tu gasto fue {pace.status}."
    else:
        headline = f"Este mes tu gasto está siendo {pace.status}."

    return PaceInsight(
        status=pace.status,
        headline=headline,
        severity=severity_from_status(pace.status),
        delta_pct=pace.delta_pct,
        confidence=pace.confidence,
        baseline_months_used_count=baseline_count,
    )


# ---------------------------------------------------------------------------
# Monthly evolution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CategoryDriver:
    category_id: str
    label: str
    delta_amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {'categoryId': self.category_id, 'label': self.label, 'deltaAmount': self.delta_amount}


@dataclass(frozen=True)
class EvolutionHeadline:
    current_label: str
    prev_label: str
    current_total: float
    delta_pct: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'currentLabel': self.current_label,
            'prevLabel': self.prev_label,
            'currentTotal': self.current_total,
            'deltaPct': self.delta_pct,
        }


@dataclass(frozen=True)
class EvolutionInsight:
    headline: Optional[EvolutionHeadline]
    top_up: List[CategoryDriver] = field(default_factory=list)
    top_down: List[CategoryDriver] = field(default_factory=list)
    sentence: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'headline': self.headline.to_dict() if self.headline else None,
            'topUp': [driver.to_dict() for driver in self.top_up],
            'topDown': [driver.to_dict() for driver in self.top_down],
            'sentence': self.sentence,
        }


def _rank_drivers(comparisons, positive: bool) -> List[CategoryDriver]:
    selected = [
        c for c in comparisons
        if (c.delta_amount > 0 if positive else c.delta_amount < 0)
    ]
    # Materiality first (money, not percent); category id breaks ties
    selected.sort(key=lambda c: (-abs(c.delta_amount), c.category_id))
    return [
        CategoryDriver(category_id=c.category_id, label=category_label(c.category_id),
                       delta_amount=c.delta_amount)
        for c in selected[:MAX_DRIVERS]
    ]


def _evolution_sentence(headline: EvolutionHeadline) -> str:
    if headline.delta_pct is None:
        return f"En {headline.current_label} no hay base para compararte con {headline.prev_label}."
    if headline.delta_pct > 0:
        return (f"En {headline.current_label} gastaste {format_pct_short(headline.delta_pct)} "
                f"más que en {headline.prev_label}.")
    if headline.delta_pct < 0:
        return (f"En {headline.current_label} gastaste {format_pct_short(-headline.delta_pct)} "
                f"menos que en {headline.prev_label}.")
    return f"En {headline.current_label} gastaste lo mismo que en {headline.prev_label}."


def build_evolution_insight(evolution: EvolutionResult,
                            category_id: Optional[str] = None) -> EvolutionInsight:
    """
    Headline and top movers for the monthly evolution card

    Args:
        evolution: Result of compute_evolution
        category_id: View being shown; defaults to the one the result was built for

    Returns:
        EvolutionInsight; drivers are only filled for the "all" view
    """
    view = category_id or evolution.category_id
    comparison = evolution.headline_comparison
    if comparison is None:
        return EvolutionInsight(headline=None)

    headline = EvolutionHeadline(
        current_label=comparison.current_label,
        prev_label=comparison.prev_label,
        current_total=comparison.current_total,
        delta_pct=comparison.delta_pct,
    )
    sentence = _evolution_sentence(headline)

    if view != ALL_CATEGORIES:
        return EvolutionInsight(headline=headline, sentence=sentence)

    return EvolutionInsight(
        headline=headline,
        top_up=_rank_drivers(evolution.category_comparisons, positive=True),
        top_down=_rank_drivers(evolution.category_comparisons, positive=False),
        sentence=sentence,
    )


# ---------------------------------------------------------------------------
# Month summary (chat channel button)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonthSummaryInsight:
    kind: str
    confidence: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind, 'confidence': self.confidence, 'message': self.message}


def confidence_from_count(count: int) -> str:
    if count <= 1:
        return 'low'
    if count <= 4:
        return 'medium'
    return 'high'


def build_month_summary_insight(summary: RangeSummary, currency: str = 'COP') -> MonthSummaryInsight:
    if summary.count == 0:
        return MonthSummaryInsight(
            kind='no_data',
            confidence='low',
            message="Este mes aún no tienes gastos registrados. Registra al menos 1 para ver tu resumen.",
        )

    lines = [f"A hoy {format_day_es(summary.to_date)}: {format_money(summary.total, currency)}"]

    categories = summary.by_category
    for idx, share in enumerate(categories[:3]):
        prefix = "Top:" if idx == 0 else f"{idx + 1})"
        lines.append(
            f"{prefix} {category_label(share.category_id)} "
            f"{format_money(share.amount, currency)} ({format_pct_short(share.percent)})"
        )

    if len(categories) >= 5:
        top3 = sum(share.percent for share in categories[:3])
        lines.append(f"Top 3: {format_pct_short(top3)}")

    return MonthSummaryInsight(
        kind='summary',
        confidence=confidence_from_count(summary.count),
        message="\n".join(lines),
    )
