"""
Date formatting helpers for Brazilian Portuguese output.

Display strings for report columns and chat replies, the YYYY-MM-DD form used
for date-typed SQL parameters, and "há 3 dias"-style relative descriptions.

All helpers accept `date` or `datetime` values and return an empty string
(None for to_postgres_date) for anything else, never raising.
"""

from datetime import date, datetime
from typing import Optional

from agent.utils.date_parser import DateRange


def format_br_date(value: date) -> str:
    """
    Format a date as DD/MM/YYYY.

    Example:
        >>> format_br_date(datetime(2025, 11, 5))
        '05/11/2025'
    """
    if not isinstance(value, date):
        return ""
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def format_br_datetime(value: date) -> str:
    """
    Format a datetime as DD/MM/YYYY HH:mm (24-hour). Plain dates render 00:00.

    Example:
        >>> format_br_datetime(datetime(2025, 11, 5, 9, 7))
        '05/11/2025 09:07'
    """
    if not isinstance(value, date):
        return ""
    hour = value.hour if isinstance(value, datetime) else 0
    minute = value.minute if isinstance(value, datetime) else 0
    return f"{format_br_date(value)} {hour:02d}:{minute:02d}"


def to_postgres_date(value: date) -> Optional[str]:
    """
    Format a date as YYYY-MM-DD for date-typed column filters.

    Uses the value's own calendar fields (no UTC conversion), so local midnight
    stays on the same day.
    """
    if not isinstance(value, date):
        return None
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def format_br_range(date_range: DateRange) -> str:
    """Format a DateRange as "DD/MM/YYYY a DD/MM/YYYY"."""
    if not isinstance(date_range, DateRange):
        return ""
    return f"{format_br_date(date_range.start)} a {format_br_date(date_range.end)}"


def _plural(count: int, singular: str, plural: str) -> str:
    return f"há {count} {plural if count > 1 else singular}"


def get_relative_time(value: date, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago `value` was, in Portuguese.

    Elapsed time is floored into the coarsest unit below its threshold:
    under 1 minute "agora mesmo", then minutos, horas, dias (< 7),
    semanas (< 30 days), meses (< 365 days, 30-day months) and anos.

    Args:
        value: Past moment. Plain dates are taken at midnight.
        now: Current moment (default: datetime.now() matching value's awareness)

    Returns:
        "agora mesmo", "há 1 minuto", "há 3 horas", "há 2 meses", ...
        Future moments are reported as "agora mesmo".

    Example:
        >>> get_relative_time(datetime.now() - timedelta(days=3))
        'há 3 dias'
    """
    if not isinstance(value, date):
        return ""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    if now is None:
        now = datetime.now(value.tzinfo) if value.tzinfo is not None else datetime.now()
    elif (now.tzinfo is None) != (value.tzinfo is None):
        # Mixed naive/aware: compare wall-clock readings
        now = now.replace(tzinfo=value.tzinfo)

    seconds = int((now - value).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return "agora mesmo"
    if minutes < 60:
        return _plural(minutes, "minuto", "minutos")
    if hours < 24:
        return _plural(hours, "hora", "horas")
    if days < 7:
        return _plural(days, "dia", "dias")
    if days < 30:
        return _plural(days // 7, "semana", "semanas")
    if days < 365:
        return _plural(days // 30, "mês", "meses")
    return _plural(days // 365, "ano", "anos")
