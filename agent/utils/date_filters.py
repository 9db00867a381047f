"""
Date filter resolution for listing and report queries.

Turns the free-text `date_from`/`date_to` arguments produced by the intent
classifier into concrete timestamp bounds, and those bounds into a SQLAlchemy
predicate on a timestamp column (e.g. tb_usuario.dh_edita).

Resolution order:
1. `date_from` as a period ("últimos 7 dias", "entre 01/11/2025 e 30/11/2025");
   a recognized period supplies both bounds
2. `date_from` as a single date, taken from 00:00:00.000
3. `date_to` (only if the end is still open) as a single date, up to 23:59:59.999

Unrecognized expressions leave their bound open and are logged; callers decide
whether to ask the user to rephrase. A start after the end is kept as given
(see DateFilter.is_reversed), so the resulting BETWEEN matches no rows.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.sql.elements import ColumnElement

from agent.utils.date_formatting import format_br_date
from agent.utils.date_parser import (
    DateRange,
    end_of_day,
    get_default_timezone,
    parse_date_range,
    parse_natural_date,
    start_of_day,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateFilter:
    """
    Optional bounds for a timestamp filter.

    Attributes:
        start: Inclusive lower bound, or None for an open start
        end: Inclusive upper bound, or None for an open end
    """
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    @property
    def is_reversed(self) -> bool:
        """Start after end: the BETWEEN predicate matches no rows."""
        return self.start is not None and self.end is not None and self.start > self.end


def resolve_date_expression(
    expression: str,
    timezone: Optional[ZoneInfo] = None,
    reference_date: Optional[datetime] = None,
) -> Optional[DateRange]:
    """
    Resolve an expression to a DateRange, whether it names a period or a day.

    "ontem" covers the whole of yesterday; "mês passado" the previous month.

    Returns:
        DateRange, or None if neither resolver recognizes the expression
    """
    date_range = parse_date_range(expression, timezone=timezone, reference_date=reference_date)
    if date_range is not None:
        return date_range

    day = parse_natural_date(expression, timezone=timezone, reference_date=reference_date)
    if day is None:
        return None
    return DateRange(start=start_of_day(day), end=end_of_day(day))


def resolve_date_filter(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    timezone: Optional[ZoneInfo] = None,
    reference_date: Optional[datetime] = None,
) -> DateFilter:
    """
    Resolve a date_from/date_to pair of free-text expressions to a DateFilter.

    Args:
        date_from: Period or start date ("últimos 7 dias", "ontem", "01/11/2025")
        date_to: End date, used only when date_from didn't already close the range
        timezone: Timezone for the bounds (default: settings.TIMEZONE)
        reference_date: Moment treated as "now" (default: current time)

    Returns:
        DateFilter with whichever bounds could be resolved

    Example:
        >>> resolve_date_filter("ontem", "ontem")
        DateFilter(start=<yesterday 00:00:00>, end=<yesterday 23:59:59.999>)
    """
    # One snapshot for both arguments
    tz = timezone or get_default_timezone()
    if reference_date is None:
        reference_date = datetime.now(tz)

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    if date_from:
        date_range = parse_date_range(date_from, timezone=tz, reference_date=reference_date)
        if date_range is not None:
            start, end = date_range.start, date_range.end
        else:
            day = parse_natural_date(date_from, timezone=tz, reference_date=reference_date)
            if day is not None:
                start = start_of_day(day)
            else:
                logger.warning(
                    f"Could not resolve date_from expression: '{date_from}'",
                    extra={"expression": date_from},
                )

    if date_to and end is None:
        day = parse_natural_date(date_to, timezone=tz, reference_date=reference_date)
        if day is not None:
            end = end_of_day(day)
        else:
            logger.warning(
                f"Could not resolve date_to expression: '{date_to}'",
                extra={"expression": date_to},
            )

    date_filter = DateFilter(start=start, end=end)
    if date_filter.is_reversed:
        # Bounds kept as given; BETWEEN with start > end matches no rows
        logger.warning(
            f"Reversed date filter: {start} > {end}",
            extra={"expression": f"{date_from} / {date_to}"},
        )
    return date_filter


def build_date_predicate(
    column: ColumnElement,
    date_filter: DateFilter,
) -> Optional[ColumnElement]:
    """
    Build a SQLAlchemy predicate restricting `column` to the filter's bounds.

    Returns:
        column BETWEEN start AND end, column >= start, column <= end,
        or None when the filter has no bounds

    Example:
        >>> stmt = select(User).where(build_date_predicate(User.dh_edita, date_filter))
    """
    if date_filter.start is not None and date_filter.end is not None:
        return column.between(date_filter.start, date_filter.end)
    if date_filter.start is not None:
        return column >= date_filter.start
    if date_filter.end is not None:
        return column <= date_filter.end
    return None


def describe_date_filter(date_filter: DateFilter) -> str:
    """
    Describe the filter in Portuguese for chat replies.

    "entre 01/11/2025 e 30/11/2025", "a partir de 01/11/2025", "até 30/11/2025",
    or "" for an empty filter.
    """
    if date_filter.start is not None and date_filter.end is not None:
        return f"entre {format_br_date(date_filter.start)} e {format_br_date(date_filter.end)}"
    if date_filter.start is not None:
        return f"a partir de {format_br_date(date_filter.start)}"
    if date_filter.end is not None:
        return f"até {format_br_date(date_filter.end)}"
    return ""
