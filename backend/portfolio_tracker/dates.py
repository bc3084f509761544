"""Calendar-date helpers.

Dates travel as plain ``YYYY-MM-DD`` strings and are parsed into
:class:`datetime.date` without any time or timezone component, so a record
entered late in the evening never shifts to the neighbouring day.
"""

from __future__ import annotations

import re
from datetime import date, datetime

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date_string(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string."""

    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise ValueError(f"Invalid date string: {value!r}")
    return date.fromisoformat(value)


def is_valid_date_string(value: str) -> bool:
    try:
        parse_date_string(value)
    except ValueError:
        return False
    return True


def coerce_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date_string(value)


def format_date_for_display(value: date | str) -> str:
    """Render a date as ``DD/MM/YYYY``; unparseable strings are returned as-is."""

    try:
        parsed = coerce_date(value)
    except ValueError:
        return str(value)
    return parsed.strftime("%d/%m/%Y")


def convert_display_date(value: str) -> str:
    """Convert ``DD/MM/YYYY`` into ``YYYY-MM-DD``."""

    day, month, year = (int(part) for part in value.strip().split("/"))
    return date(year, month, day).isoformat()


def one_year_before(value: date) -> date:
    """Same calendar day one year earlier; Feb 29 rolls forward to Mar 1."""

    try:
        return value.replace(year=value.year - 1)
    except ValueError:
        return date(value.year - 1, 3, 1)


__all__ = [
    "parse_date_string",
    "is_valid_date_string",
    "coerce_date",
    "format_date_for_display",
    "convert_display_date",
    "one_year_before",
]
