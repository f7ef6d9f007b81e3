"""Helper functions for dates, tenors and schedules."""

from __future__ import annotations

from contextlib import contextmanager
import datetime as dt
import re
from collections.abc import Iterator
import time

import pandas as pd

from .enums import DayCountConvention
from .exceptions import ConfigurationError, ValidationError

__all__ = [
    "log_timing",
    "as_date",
    "calculate_year_fraction",
    "tenor_offset",
    "add_tenor",
    "frequency_to_tenor",
    "generate_schedule",
    "parse_percentage",
]

SECONDS_IN_DAY = 86400

_TENOR_PATTERN = re.compile(r"^\s*(\d+)\s*([DWMY])\s*$")


@contextmanager
def log_timing(logger, label: str, enabled: bool) -> Iterator[None]:
    """Log timing for a code block when enabled is True."""
    if not enabled:
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug("Timing %s: %.6fs", label, elapsed)


def as_date(value: dt.date | dt.datetime) -> dt.date:
    """Normalize a date or datetime to a plain ``datetime.date``.

    Tenor points are matched by exact calendar date, so time-of-day
    components are dropped.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    raise ConfigurationError(f"expected a date or datetime, got {type(value).__name__}")


def _day_count_30_360_us(start_date: dt.date, end_date: dt.date) -> float:
    """30/360 (US) day-count fraction between two dates."""
    y1, m1, d1 = start_date.year, start_date.month, start_date.day
    y2, m2, d2 = end_date.year, end_date.month, end_date.day

    if d1 == 31:
        d1 = 30
    if d2 == 31 and d1 in (30, 31):
        d2 = 30

    return (360 * (y2 - y1) + 30 * (m2 - m1) + (d2 - d1)) / 360.0


def calculate_year_fraction(
    start_date,
    end_date,
    day_count_convention: DayCountConvention = DayCountConvention.ACT_365F,
) -> float:
    """Calculate year fraction between two dates.

    Parameters
    ==========
    start_date: date
        starting date
    end_date: date
        ending date
    day_count_convention: DayCountConvention, default DayCountConvention.ACT_365F
        Day-count basis. Supported:
        - DayCountConvention.ACT_365F
        - DayCountConvention.ACT_360
        - DayCountConvention.ACT_365_25
        - DayCountConvention.THIRTY_360_US

    Returns
    =======
    year_fraction: float
        year fraction between start_date and end_date (negative when
        end_date precedes start_date)
    """
    start_date = as_date(start_date)
    end_date = as_date(end_date)
    if day_count_convention is DayCountConvention.THIRTY_360_US:
        return _day_count_30_360_us(start_date, end_date)
    if day_count_convention is DayCountConvention.ACT_360:
        denom = 360.0
    elif day_count_convention is DayCountConvention.ACT_365_25:
        denom = 365.25
    elif day_count_convention is DayCountConvention.ACT_365F:
        denom = 365.0
    else:
        raise ValidationError(f"Unsupported day_count_convention: {day_count_convention}")

    delta_days = (end_date - start_date).total_seconds() / SECONDS_IN_DAY
    return delta_days / denom


_OFFSET_UNITS = {"D": "days", "W": "weeks", "M": "months", "Y": "years"}


def tenor_offset(tenor: str) -> pd.DateOffset:
    """Calendar offset for a tenor string such as ``"7D"``, ``"2W"``, ``"3M"`` or ``"5Y"``.

    Month and year offsets clamp the day to the end of the target month
    (31 Jan + 1M -> 28/29 Feb).
    """
    if not isinstance(tenor, str):
        raise ConfigurationError(f"tenor must be a string, got {type(tenor).__name__}")
    label = tenor.strip().upper()
    if label in ("ON", "O/N"):
        return pd.DateOffset(days=1)

    match = _TENOR_PATTERN.match(label)
    if match is None:
        raise ValidationError(f"Unsupported tenor: {tenor!r}")
    number, unit = int(match.group(1)), match.group(2)
    return pd.DateOffset(**{_OFFSET_UNITS[unit]: number})


def add_tenor(start, tenor: str) -> dt.date:
    """Shift a date by a tenor string (``"ON"``, ``"7D"``, ``"2W"``, ``"3M"``, ``"5Y"``)."""
    start = as_date(start)
    return (pd.Timestamp(start) + tenor_offset(tenor)).date()


def frequency_to_tenor(frequency: float) -> str:
    """Map a coupon frequency expressed as a year fraction to its schedule tenor."""
    frequency = float(frequency)
    if not (0.0 < frequency <= 1.0):
        raise ValidationError(f"frequency must be in (0, 1], got {frequency}")
    if abs(frequency - 0.25) < 1e-6:
        return "3M"
    if abs(frequency - 0.5) < 1e-6:
        return "6M"
    if abs(frequency - 1.0 / 12.0) < 1e-6:
        return "1M"
    return "1Y"


def generate_schedule(start, end, frequency: float) -> list[dt.date]:
    """Build a payment schedule from ``start`` to ``end``.

    Each date is the previous one shifted by the tenor implied by
    ``frequency``, so a month-end clamp carries forward
    (31 Jan quarterly -> 30 Apr -> 30 Jul). The schedule always finishes on
    ``end``; a short final period is kept as-is.
    """
    start = as_date(start)
    end = as_date(end)
    if end <= start:
        raise ValidationError("schedule end must be after start")
    offset = tenor_offset(frequency_to_tenor(frequency))

    rolled = pd.date_range(start, end, freq=offset, inclusive="left")
    schedule = [ts.date() for ts in rolled]
    schedule.append(end)

    if len(schedule) < 2:
        raise ValidationError("generated schedule is invalid (fewer than 2 dates)")
    return schedule


def parse_percentage(text: str) -> float:
    """Parse ``"5.56%"`` or ``"5.56"`` into the decimal ``0.0556``."""
    cleaned = str(text).replace("%", "").strip()
    try:
        return float(cleaned) / 100.0
    except ValueError as exc:
        raise ValidationError(f"Invalid percentage value: {text!r}") from exc
