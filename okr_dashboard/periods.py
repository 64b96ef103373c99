"""
Reporting period and deadline calendar.

Every function takes the evaluation instant explicitly; nothing here reads
the system clock.
"""

import re
from datetime import datetime

import pandas as pd

from .config import (
    DEADLINE_CUTOFF_HOUR,
    DEADLINE_CUTOFF_LABEL,
    DEADLINE_CUTOFF_MINUTE,
    DEADLINE_WEEKDAY,
    DEADLINE_WEEKDAY_NAME,
    PERIOD_FORMAT,
    PERIOD_PATTERN,
)
from .errors import InvalidPeriodKey

_PERIOD_RE = re.compile(PERIOD_PATTERN)


def reporting_period(now: datetime) -> str:
    """Return the calendar-month period key for `now`, e.g. '2026-10'."""
    return pd.Timestamp(now).strftime(PERIOD_FORMAT)


def is_valid_period_key(key) -> bool:
    """True if `key` is a string of the form YYYY-MM."""
    return isinstance(key, str) and _PERIOD_RE.match(key) is not None


def parse_period_key(key) -> pd.Period:
    """Parse a period key into a monthly pd.Period.

    Raises InvalidPeriodKey for missing or malformed keys.
    """
    if not is_valid_period_key(key):
        raise InvalidPeriodKey(f"Invalid reporting period key: {key!r}")
    return pd.Period(key, freq="M")


def previous_period(period: str) -> str:
    """Period key of the month before `period` ('2026-01' -> '2025-12')."""
    return (parse_period_key(period) - 1).strftime(PERIOD_FORMAT)


def days_until_deadline(now: datetime, weekday: int = DEADLINE_WEEKDAY) -> int:
    """Days from `now` until the next deadline weekday, in 0-6.

    0 means the deadline is today, whether or not the cutoff time has
    already passed; use is_past_cutoff() to tell the two apart.
    """
    return (weekday - pd.Timestamp(now).weekday() + 7) % 7


def next_deadline(now: datetime) -> pd.Timestamp:
    """Cutoff instant of the current deadline (today's if today is deadline day)."""
    ts = pd.Timestamp(now)
    day = ts.normalize() + pd.Timedelta(days=days_until_deadline(ts))
    return day.replace(hour=DEADLINE_CUTOFF_HOUR, minute=DEADLINE_CUTOFF_MINUTE)


def is_past_cutoff(now: datetime) -> bool:
    """True on deadline day once the cutoff time has passed."""
    return pd.Timestamp(now) > next_deadline(now)


def deadline_label(days: int) -> str:
    """Render a countdown from days_until_deadline() as display text."""
    if days == 0:
        return f"Today {DEADLINE_CUTOFF_LABEL}"
    if days == 1:
        return f"Tomorrow {DEADLINE_CUTOFF_LABEL}"
    return f"{DEADLINE_WEEKDAY_NAME} {DEADLINE_CUTOFF_LABEL} ({days} days)"
