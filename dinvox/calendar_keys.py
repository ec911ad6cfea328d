"""
Calendar Key Utilities
Month keys ("YYYY-MM") and day strings ("YYYY-MM-DD") for period analytics.

Everything here works on plain strings so a record dated "2026-02-01" always
lands in February, whatever the host timezone is. Malformed input yields
``None`` or an empty list instead of raising.
"""

import calendar
import math
import re
from datetime import date
from typing import Dict, List, Optional, Tuple

MONTH_KEY_PATTERN = re.compile(r"(\d{4})-(\d{2})", re.ASCII)
DATE_PATTERN = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)

# Safety cap for month ranges (20 years)
MAX_MONTH_SPAN = 240

MONTH_SHORT_ES = ("Ene", "Feb", "Mar", "Abr", "May", "Jun",
                  "Jul", "Ago", "Sep", "Oct", "Nov", "Dic")

NO_INICIADO = "no_iniciado"
EN_CURSO = "en_curso"
CERRADO = "cerrado"


def pad2(n: int) -> str:
    return str(n).zfill(2)


def _split_month_key(key) -> Optional[Tuple[int, int]]:
    if not isinstance(key, str):
        return None
    match = MONTH_KEY_PATTERN.fullmatch(key)
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if month < 1 or month > 12:
        return None
    return year, month


def split_date(date_str) -> Optional[Tuple[int, int, int]]:
    """
    Split a "YYYY-MM-DD" string into (year, month, day)

    Only the shape is checked (month 1..12, day 1..31); whether the day
    exists in that month is left to callers that need it.
    """
    if not isinstance(date_str, str):
        return None
    match = DATE_PATTERN.fullmatch(date_str)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    if month < 1 or month > 12 or day < 1 or day > 31:
        return None
    return year, month, day


def is_month_key(key) -> bool:
    return _split_month_key(key) is not None


def month_key_of(date_str) -> Optional[str]:
    """Extract "YYYY-MM" from a "YYYY-MM-DD" string by substring."""
    if split_date(date_str) is None:
        return None
    return date_str[:7]


def day_of(date_str) -> Optional[int]:
    parts = split_date(date_str)
    return parts[2] if parts else None


def month_key_from_date(value: date) -> str:
    """Month key for a calendar date object (e.g. an injected "today")."""
    return f"{value.year:04d}-{pad2(value.month)}"


def month_index(key) -> Optional[int]:
    """Linear month index ``year * 12 + month0`` used for all month arithmetic."""
    parts = _split_month_key(key)
    if parts is None:
        return None
    year, month = parts
    return year * 12 + (month - 1)


def _key_from_index(index: int) -> Optional[str]:
    year, month0 = divmod(index, 12)
    if year < 0 or year > 9999:
        return None
    return f"{year:04d}-{pad2(month0 + 1)}"


def days_in_month(key) -> Optional[int]:
    parts = _split_month_key(key)
    if parts is None:
        return None
    year, month = parts
    if year < 1:
        # calendar only knows years 1..9999; year 0 is a leap year proleptically
        return 29 if month == 2 else calendar.monthrange(2000, month)[1]
    return calendar.monthrange(year, month)[1]


def month_start(key) -> Optional[str]:
    if not is_month_key(key):
        return None
    return f"{key}-01"


def month_end(key) -> Optional[str]:
    days = days_in_month(key)
    if days is None:
        return None
    return f"{key}-{pad2(days)}"


def day_string(key, day: int) -> Optional[str]:
    """Build "YYYY-MM-DD" for a day inside ``key``; None if the day does not exist."""
    days = days_in_month(key)
    if days is None or day < 1 or day > days:
        return None
    return f"{key}-{pad2(day)}"


def shift_month_key(key, delta) -> Optional[str]:
    """
    Move a month key ``delta`` months forward (or backward when negative)

    Args:
        key: Month key "YYYY-MM"
        delta: Number of months; fractional values are truncated toward zero

    Returns:
        Shifted month key, or None for malformed keys, non-finite deltas or
        results outside years 0000..9999
    """
    base = month_index(key)
    if base is None:
        return None
    if isinstance(delta, bool) or not isinstance(delta, (int, float)):
        return None
    if isinstance(delta, float) and not math.isfinite(delta):
        return None
    return _key_from_index(base + math.trunc(delta))


def month_keys_between(start, end) -> List[str]:
    """Inclusive, ascending, contiguous month keys from ``start`` to ``end``."""
    start_idx = month_index(start)
    end_idx = month_index(end)
    if start_idx is None or end_idx is None or start_idx > end_idx:
        return []

    keys = []
    for index in range(start_idx, min(end_idx, start_idx + MAX_MONTH_SPAN - 1) + 1):
        keys.append(_key_from_index(index))
    return keys


def last_n_month_keys(anchor, n) -> List[str]:
    """Last ``n`` months ending at (and including) ``anchor``, ascending."""
    if not is_month_key(anchor):
        return []
    if isinstance(n, bool) or not isinstance(n, (int, float)):
        return []
    if isinstance(n, float) and not math.isfinite(n):
        return []
    count = math.trunc(n)
    if count <= 0:
        return []
    start = shift_month_key(anchor, -(count - 1))
    if start is None:
        return [anchor]
    return month_keys_between(start, anchor)


def year_to_date_month_keys(anchor) -> List[str]:
    if not is_month_key(anchor):
        return []
    return month_keys_between(f"{anchor[:4]}-01", anchor)


def month_short_es(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_SHORT_ES[month - 1]
    return ""


def month_label(key) -> Optional[str]:
    """UI label such as "Ene 2026"."""
    parts = _split_month_key(key)
    if parts is None:
        return None
    year, month = parts
    return f"{month_short_es(month)} {year:04d}"


def third_states(today_day: int) -> Dict[str, str]:
    """
    State of each third of the month on a given day

    T3 is only reported as "en_curso" once it starts; closing it is a
    month-level event the caller knows about.
    """
    t1 = EN_CURSO if today_day <= 10 else CERRADO
    if today_day <= 10:
        t2 = NO_INICIADO
    elif today_day <= 20:
        t2 = EN_CURSO
    else:
        t2 = CERRADO
    t3 = NO_INICIADO if today_day <= 20 else EN_CURSO
    return {"t1": t1, "t2": t2, "t3": t3}


def third_range_labels(key) -> Optional[Dict[str, str]]:
    parts = _split_month_key(key)
    if parts is None:
        return None
    short = month_short_es(parts[1])
    return {
        "t1": f"01-10 {short}",
        "t2": f"11-20 {short}",
        "t3": f"21-{pad2(days_in_month(key))} {short}",
    }
