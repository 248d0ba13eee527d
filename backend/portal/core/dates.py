"""
Date helpers shared by the API, roster import, reports and e-mails.

Rosters and the employee-facing forms use DD/MM/YYYY while the database
stores ISO dates, so every inbound date goes through `parse_date` before
it reaches the premium engine or the validator.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from portal.core.logging import get_logger

logger = get_logger(__name__)

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_ISO_RE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$")
_DMY_RE = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")


def parse_date(value: str | date | datetime | None) -> date | None:
    """
    Parse a date from YYYY-MM-DD, DD/MM/YYYY or a date/datetime object.

    Returns None for empty input.  Raises ValueError for anything that
    cannot be read as a real calendar date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    if _ISO_RE.match(text):
        year, month, day = (int(part) for part in text.split("-"))
        return date(year, month, day)

    if _DMY_RE.match(text):
        day, month, year = (int(part) for part in text.split("/"))
        return date(year, month, day)

    # Spreadsheet cells sometimes carry a time component ("2024-04-01 00:00:00")
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValueError(f"Unrecognised date: {value!r}") from None


def parse_date_or_default(value: str | date | datetime | None, default: date) -> date:
    """Parse `value`, falling back to `default` when it is empty or malformed."""
    try:
        parsed = parse_date(value)
    except ValueError:
        logger.warning("Unparseable date, using fallback", value=str(value), fallback=default.isoformat())
        return default
    return parsed if parsed is not None else default


def calculate_age(date_of_birth: date, today: date | None = None) -> int:
    """Whole years elapsed since `date_of_birth` (birthday not yet reached does not count)."""
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def format_date_with_month_name(value: date | None) -> str:
    """Render a date as DD/Mon/YYYY, e.g. 05/Jan/1985."""
    if value is None:
        return ""
    return f"{value.day:02d}/{MONTH_ABBREVIATIONS[value.month - 1]}/{value.year}"


def to_display(value: date | None) -> str:
    """Render a date as DD/MM/YYYY (the roster and form format)."""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")
