"""
Utility functions for the application.
"""
from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str, None]


def to_date(value: DateLike) -> Optional[date]:
    """
    Normalize a date-ish value to a calendar day.

    Accepts date, datetime (time of day is dropped) or an ISO string
    ('2025-03-01' or '2025-03-01T10:15:00Z'). Returns None for empty or
    unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def today() -> date:
    return date.today()
