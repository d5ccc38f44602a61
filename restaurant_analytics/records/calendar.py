"""
Calendar helpers for Restaurant Analytics

Month keys, month labels and month arithmetic built on calendar
components (year, month, day) only, never on timestamps.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")

PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Parse a loosely-typed value into a calendar date.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings (any
    trailing time part is ignored) and other free-form date strings that
    name a full year, month and day.
    Returns None when the value cannot be understood.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    match = ISO_DATE_RE.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None

    try:
        first, second = (date_parser.parse(text, default=d).date() for d in PARSE_DEFAULTS)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Unparseable date {text!r}: {e}")
        return None

    # A part missing from the string is filled from the default, so the two
    # parses only agree when year, month and day were all present.
    if first != second:
        logger.debug(f"Incomplete date {text!r} ignored")
        return None
    return first


def month_key(value: date) -> str:
    """Calendar month key, e.g. ``2024-03``."""
    return f"{value.year:04d}-{value.month:02d}"


def month_label(value: date) -> str:
    """Short display label, e.g. ``Mar 2024``."""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.year}"


def parse_month_key(key: str) -> Optional[date]:
    """First day of the month named by a ``YYYY-MM`` key."""
    try:
        year_str, month_str = key.split("-")[:2]
        return date(int(year_str), int(month_str), 1)
    except (ValueError, AttributeError):
        return None


def first_of_month(value: date) -> date:
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of shorter months."""
    return value + relativedelta(months=months)


def next_month_key(key: str) -> Optional[str]:
    start = parse_month_key(key)
    if start is None:
        return None
    return month_key(add_months(start, 1))
