"""
labels.py - Stable labels for internal keys.

Maps GEDCOM record types, weekday and month indices and time periods to the
English labels the charting layer translates. Also holds the canonical sort
orders used for chart axes and the text normalization helpers.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from unidecode import unidecode

RECORD_TYPE_LABELS: Dict[str, str] = {
    'INDI': 'Individual',
    'FAM': 'Family',
    'SOUR': 'Source',
    'REPO': 'Repository',
    'OBJE': 'Media object',
    'NOTE': 'Note',
    'SNOTE': 'Note',
    'SUBM': 'Submitter',
    'SUBN': 'Submission',
    '_LOC': 'Location',
    'HEAD': 'Other',
}

# Legacy single-letter xref prefixes used by old webtrees versions
XREF_PREFIX_LABELS: Dict[str, str] = {
    'I': 'Individual',
    'F': 'Family',
    'S': 'Source',
    'R': 'Repository',
    'M': 'Media object',
    'N': 'Note',
    'O': 'Submitter',
    'L': 'Location',
    'H': 'Other',
    'X': 'Other',
}

DEFAULT_RECORD_TYPE = 'Other'

RECORD_TYPE_ORDER: List[str] = [
    'Individual', 'Family', 'Source', 'Repository', 'Media object',
    'Note', 'Location', 'Submitter', 'Submission', 'Header', 'Other',
]

WEEKDAY_ABBREVIATIONS: List[str] = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
WEEKDAY_NAMES: List[str] = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']
MONTH_ABBREVIATIONS: List[str] = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                                  'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

PERIODS = ('day', 'week', 'month', 'year')

NOT_AVAILABLE = 'N/A'


def record_type_label(gedcom_type: str) -> str:
    """Map a GEDCOM record type (INDI, FAM, ...) to its label."""
    return RECORD_TYPE_LABELS.get(gedcom_type, DEFAULT_RECORD_TYPE)


def weekday_abbreviation(moment: datetime) -> str:
    return WEEKDAY_ABBREVIATIONS[moment.weekday()]


def weekday_name(moment: datetime) -> str:
    return WEEKDAY_NAMES[moment.weekday()]


def month_abbreviation(month: int) -> str:
    """Abbreviated month name for 1-12, 'N/A' otherwise."""
    if 1 <= month <= 12:
        return MONTH_ABBREVIATIONS[month - 1]
    return NOT_AVAILABLE


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


def iso_week_key(moment: datetime) -> str:
    """ISO-8601 week key, e.g. '2024-W01' (the ISO year may differ from the calendar year)."""
    iso_year, iso_week, _ = moment.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def period_key(moment: datetime, period: str) -> str:
    """
    Bucket a timestamp by calendar unit.

    Args:
        moment (datetime): Timestamp to bucket.
        period (str): 'day', 'week' (ISO), 'month' or 'year'.

    Returns:
        str: Sortable key ('2024-03-05', '2024-W10', '2024-03', '2024').

    Raises:
        ValueError: For an unknown period.
    """
    if period == 'day':
        return moment.strftime('%Y-%m-%d')
    if period == 'week':
        return iso_week_key(moment)
    if period == 'month':
        return moment.strftime('%Y-%m')
    if period == 'year':
        return f"{moment.year:04d}"
    raise ValueError(f"Unknown period '{period}', expected one of {', '.join(PERIODS)}")


def sanitize_text(value: Any) -> str:
    """
    Coerce a store value to clean text.

    None becomes '', bytes are decoded as UTF-8 with replacement and line
    endings are normalized to '\\n'.
    """
    if value is None:
        return ''
    if isinstance(value, bytes):
        value = value.decode('utf-8', errors='replace')
    text = str(value)
    return text.replace('\r\n', '\n').replace('\r', '\n')


def text_sort_key(text: str) -> str:
    """Accent- and case-insensitive sort key for names."""
    return unidecode(text or '').casefold()


def order_index(order: List[str], label: str) -> int:
    """Position of a label in a fixed enumeration; unknown labels sort last."""
    try:
        return order.index(label)
    except ValueError:
        return len(order)
