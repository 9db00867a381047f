"""
Natural Date Parser for Brazilian Portuguese.

Parses natural language date expressions in Portuguese (with the common English
keywords) into calendar dates and closed date ranges. Used by the user listing,
audit and commission report tools to turn free-text `date_from`/`date_to`
arguments like "ontem", "últimos 7 dias" or "entre 01/11/2025 e 30/11/2025"
into precise boundaries for SQL predicates.

Two resolvers, both driven by ordered rule tables (first match wins):
- parse_natural_date(): one calendar date at local midnight
- parse_date_range(): a DateRange from 00:00:00.000 to 23:59:59.999

The current moment is read once per call (or taken from `reference_date`) and
threaded through every calculation of that call, including the single-date
lookups made by "entre X e Y" ranges.

Month arithmetic clamps to the last valid day of the target month
("mês passado" on March 31 is February 28/29), via dateutil.relativedelta.
"""

import calendar
import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

from shared.config import get_settings

logger = logging.getLogger(__name__)

BRAZIL_TZ = ZoneInfo("America/Sao_Paulo")

# Portuguese month names without diacritics (input is normalized before matching),
# indexed by month number - 1
PORTUGUESE_MONTHS = [
    "janeiro", "fevereiro", "marco", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]
MONTH_NUMBERS = {name: index + 1 for index, name in enumerate(PORTUGUESE_MONTHS)}
_MONTHS_PATTERN = "|".join(PORTUGUESE_MONTHS)


@dataclass(frozen=True)
class DateRange:
    """
    Closed interval bounding a reporting window.

    Attributes:
        start: First instant of the window (normally 00:00:00.000)
        end: Last instant of the window, inclusive (normally 23:59:59.999)
    """
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"DateRange start {self.start} is after end {self.end}")

    @property
    def days(self) -> int:
        """Number of calendar days touched by the range (inclusive)."""
        return (self.end.date() - self.start.date()).days + 1

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


# ============================================================================
# Helpers
# ============================================================================


def get_default_timezone() -> ZoneInfo:
    """Timezone used when callers don't pass one (settings.TIMEZONE)."""
    return ZoneInfo(get_settings().TIMEZONE)


def normalize_text(text: str) -> str:
    """
    Lowercase, trim, collapse whitespace and strip diacritics.

    "  Últimos   7 DIAS " -> "ultimos 7 dias", "março" -> "marco"
    """
    decomposed = unicodedata.normalize("NFKD", text.strip().lower())
    without_marks = "".join(char for char in decomposed if not unicodedata.combining(char))
    return re.sub(r"\s+", " ", without_marks)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    # Millisecond precision: 23:59:59.999
    return moment.replace(hour=23, minute=59, second=59, microsecond=999000)


def _current_moment(
    timezone: Optional[ZoneInfo],
    reference_date: Optional[datetime],
) -> datetime:
    """Snapshot "now" (or the given reference) in the target timezone."""
    tz = timezone or get_default_timezone()
    if reference_date is None:
        return datetime.now(tz)
    if reference_date.tzinfo is None:
        return reference_date.replace(tzinfo=tz)
    return reference_date.astimezone(tz)


def _calendar_date(moment: datetime, year: int, month: int, day: int) -> Optional[datetime]:
    """Local midnight of year/month/day in moment's timezone, None if not a real date."""
    try:
        return datetime(year, month, day, tzinfo=moment.tzinfo)
    except ValueError:
        return None


def _full_month(moment: datetime, year: int, month: int) -> Optional[DateRange]:
    first_day = _calendar_date(moment, year, month, 1)
    if first_day is None:
        return None
    last_day = first_day.replace(day=calendar.monthrange(year, month)[1])
    return DateRange(start=first_day, end=end_of_day(last_day))


# ============================================================================
# Single-date rules
# ============================================================================


@dataclass(frozen=True)
class DateRule:
    """One entry of the single-date rule table."""
    name: str
    pattern: re.Pattern
    resolve: Callable[[re.Match, datetime], Optional[datetime]]


def _resolve_br_date(match: re.Match, today: datetime) -> Optional[datetime]:
    day, month, year = (int(group) for group in match.groups())
    return _calendar_date(today, year, month, day)


def _resolve_iso_date(match: re.Match, today: datetime) -> Optional[datetime]:
    year, month, day = (int(group) for group in match.groups())
    return _calendar_date(today, year, month, day)


def _resolve_written_date(match: re.Match, today: datetime) -> Optional[datetime]:
    # "15 de novembro de 2025"; current year when omitted
    year = int(match.group(3)) if match.group(3) else today.year
    return _calendar_date(today, year, MONTH_NUMBERS[match.group(2)], int(match.group(1)))


DATE_RULES: list[DateRule] = [
    DateRule("today", re.compile(r"^(?:hoje|today)$"), lambda m, today: today),
    DateRule(
        "yesterday",
        re.compile(r"^(?:ontem|yesterday)$"),
        lambda m, today: today - timedelta(days=1),
    ),
    DateRule(
        "tomorrow",
        re.compile(r"^(?:amanha|tomorrow)$"),
        lambda m, today: today + timedelta(days=1),
    ),
    DateRule(
        "last_week",
        re.compile(r"semana passada|last week"),
        lambda m, today: today - timedelta(days=7),
    ),
    DateRule(
        "last_month",
        re.compile(r"mes passado|ultimo mes|last month"),
        lambda m, today: today - relativedelta(months=1),
    ),
    DateRule(
        "last_year",
        re.compile(r"ano passado|last year"),
        lambda m, today: today - relativedelta(years=1),
    ),
    DateRule(
        "days_ago",
        re.compile(r"(\d+)\s*(?:dia|dias|day|days)\s*(?:atras|ago)"),
        lambda m, today: today - timedelta(days=int(m.group(1))),
    ),
    DateRule(
        "weeks_ago",
        re.compile(r"(\d+)\s*(?:semana|semanas|week|weeks)\s*(?:atras|ago)"),
        lambda m, today: today - timedelta(weeks=int(m.group(1))),
    ),
    DateRule(
        "months_ago",
        re.compile(r"(\d+)\s*(?:mes|meses|month|months)\s*(?:atras|ago)"),
        lambda m, today: today - relativedelta(months=int(m.group(1))),
    ),
    DateRule("br_date", re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})/(\d{4})(?!\d)"), _resolve_br_date),
    DateRule("iso_date", re.compile(r"(?<!\d)(\d{4})-(\d{2})-(\d{2})(?!\d)"), _resolve_iso_date),
    DateRule(
        "written_date",
        re.compile(rf"(?<!\d)(\d{{1,2}})\s+de\s+({_MONTHS_PATTERN})(?:\s+de\s+(\d{{4}}))?\b"),
        _resolve_written_date,
    ),
]


def match_date_rule(text: str) -> Optional[str]:
    """Name of the single-date rule that decides `text`, None if only the generic parser is left."""
    if not isinstance(text, str) or not text.strip():
        return None
    normalized = normalize_text(text)
    for rule in DATE_RULES:
        if rule.pattern.search(normalized):
            return rule.name
    return None


def _parse_generic(text: str, today: datetime) -> Optional[datetime]:
    """
    Last resort: dateutil on the original text ("Nov 15 2025", "15 November 2025").

    The text must name the day and the month itself. It is parsed against two
    defaults that differ in both, and rejected when the results disagree, so
    fragments like "2025", "10h" or "sun" are not completed from today.
    A missing year is taken from today.
    """
    results = []
    for month, day in ((1, 1), (2, 2)):
        try:
            parsed = dateutil_parser.parse(
                text.strip(), dayfirst=True, default=today.replace(month=month, day=day)
            )
        except (ValueError, OverflowError):
            return None
        results.append(parsed.date())

    if results[0] != results[1]:
        logger.debug(f"Generic parse of '{text}' relies on defaults, rejected")
        return None

    # The date as written, before any offset in the text is applied
    written = results[0]
    return _calendar_date(today, written.year, written.month, written.day)


def parse_natural_date(
    text: str,
    timezone: Optional[ZoneInfo] = None,
    reference_date: Optional[datetime] = None,
) -> Optional[datetime]:
    """
    Parse a natural language date expression to a local-midnight datetime.

    Accepted forms (case and accent insensitive):
    - Keywords: "hoje", "ontem", "amanhã" (today, yesterday, tomorrow)
    - Relative: "semana passada", "mês passado", "último mês", "ano passado"
    - N units ago: "3 dias atrás", "2 semanas atrás", "6 meses atrás", "5 days ago"
    - Brazilian format: "15/11/2025"
    - ISO 8601: "2025-11-25"
    - Written out: "15 de novembro de 2025", "15 de novembro" (current year)
    - Anything dateutil understands: "Nov 15 2025", "15 November 2025"

    Args:
        text: Date expression
        timezone: Timezone for the result (default: settings.TIMEZONE)
        reference_date: Moment treated as "now" (default: current time in timezone)

    Returns:
        datetime at 00:00 in the timezone, or None if the expression is not
        recognized or names an impossible date ("32/13/2025"). Never raises.

    Examples:
        Assuming today = 2025-11-20:

        >>> parse_natural_date("ontem")
        datetime(2025, 11, 19, 0, 0, tzinfo=ZoneInfo('America/Sao_Paulo'))

        >>> parse_natural_date("2 semanas atrás")
        datetime(2025, 11, 6, 0, 0, tzinfo=ZoneInfo('America/Sao_Paulo'))

    Rules are tried in DATE_RULES order and the first pattern that matches
    decides the result, even when that result is None.
    """
    if not isinstance(text, str) or not text.strip():
        return None

    today = start_of_day(_current_moment(timezone, reference_date))
    normalized = normalize_text(text)

    for rule in DATE_RULES:
        match = rule.pattern.search(normalized)
        if match:
            try:
                result = rule.resolve(match, today)
            except (OverflowError, ValueError):
                # "99999 meses atrás" and similar fall outside datetime's range
                result = None
            logger.debug(f"Date expression '{text}' matched rule '{rule.name}': {result}")
            return start_of_day(result) if result is not None else None

    result = _parse_generic(text, today)
    if result is None:
        logger.debug(f"Date expression '{text}' not recognized")
    return result


# ============================================================================
# Range rules
# ============================================================================


@dataclass(frozen=True)
class RangeRule:
    """One entry of the range rule table."""
    name: str
    pattern: re.Pattern
    resolve: Callable[[re.Match, datetime], Optional[DateRange]]


def _resolve_last_n_days(match: re.Match, now: datetime) -> DateRange:
    days = int(match.group(1) or match.group(2))
    return DateRange(start=start_of_day(now - timedelta(days=days)), end=now)


def _resolve_this_week(match: re.Match, now: datetime) -> DateRange:
    # Weeks start on Sunday
    days_since_sunday = (now.weekday() + 1) % 7
    return DateRange(start=start_of_day(now - timedelta(days=days_since_sunday)), end=now)


def _resolve_this_month(match: re.Match, now: datetime) -> DateRange:
    return DateRange(start=start_of_day(now.replace(day=1)), end=now)


def _resolve_last_month(match: re.Match, now: datetime) -> DateRange:
    first_of_this_month = start_of_day(now.replace(day=1))
    start = first_of_this_month - relativedelta(months=1)
    end = end_of_day(first_of_this_month - timedelta(days=1))
    return DateRange(start=start, end=end)


def _resolve_this_year(match: re.Match, now: datetime) -> DateRange:
    return DateRange(start=start_of_day(now.replace(month=1, day=1)), end=now)


def _resolve_month_of_year(match: re.Match, now: datetime) -> Optional[DateRange]:
    return _full_month(now, int(match.group(2)), MONTH_NUMBERS[match.group(1)])


def _resolve_bare_month(match: re.Match, now: datetime) -> Optional[DateRange]:
    return _full_month(now, now.year, MONTH_NUMBERS[match.group(1)])


def _resolve_between(match: re.Match, now: datetime) -> Optional[DateRange]:
    start_text = match.group(1) or match.group(3)
    end_text = match.group(2) or match.group(4)

    # Same snapshot for both sides
    start = parse_natural_date(start_text.strip(), timezone=now.tzinfo, reference_date=now)
    end = parse_natural_date(end_text.strip(), timezone=now.tzinfo, reference_date=now)
    if start is None or end is None:
        return None

    start, end = start_of_day(start), end_of_day(end)
    if start > end:
        logger.debug(f"Reversed range '{start_text}' .. '{end_text}' rejected")
        return None
    return DateRange(start=start, end=end)


RANGE_RULES: list[RangeRule] = [
    RangeRule(
        "last_n_days",
        re.compile(r"ultimos?\s*(\d+)\s*dias?|last\s*(\d+)\s*days?"),
        _resolve_last_n_days,
    ),
    RangeRule("this_week", re.compile(r"esta semana|this week"), _resolve_this_week),
    RangeRule("this_month", re.compile(r"este mes|this month"), _resolve_this_month),
    RangeRule("last_month", re.compile(r"mes passado|last month"), _resolve_last_month),
    RangeRule("this_year", re.compile(r"este ano|esse ano|this year"), _resolve_this_year),
    RangeRule(
        "month_of_year",
        re.compile(rf"(?<!\d de )\b({_MONTHS_PATTERN})\s+de\s+(\d{{4}})\b"),
        _resolve_month_of_year,
    ),
    RangeRule("bare_month", re.compile(rf"^({_MONTHS_PATTERN})$"), _resolve_bare_month),
    RangeRule(
        "between",
        re.compile(r"entre\s+(.+?)\s+e\s+(.+)|between\s+(.+?)\s+and\s+(.+)"),
        _resolve_between,
    ),
]


def match_range_rule(text: str) -> Optional[str]:
    """Name of the range rule that decides `text`, None if no rule applies."""
    if not isinstance(text, str) or not text.strip():
        return None
    normalized = normalize_text(text)
    for rule in RANGE_RULES:
        if rule.pattern.search(normalized):
            return rule.name
    return None


def parse_date_range(
    text: str,
    timezone: Optional[ZoneInfo] = None,
    reference_date: Optional[datetime] = None,
) -> Optional[DateRange]:
    """
    Parse a natural language period to a closed DateRange.

    Accepted forms (case and accent insensitive):
    - "últimos 7 dias", "last 30 days"
    - "esta semana" (Sunday to today), "este mês", "este ano"/"neste ano"
    - "mês passado" (the whole previous calendar month)
    - "setembro de 2025", "setembro" (whole month; current year when omitted)
    - "entre 01/11/2025 e 30/11/2025", "between yesterday and today"

    Relative ranges end at 23:59:59.999 of today so same-day activity is
    included. "entre" ranges resolve each side with parse_natural_date();
    if either side is not recognized, or the start falls after the end, the
    whole expression is rejected.

    Args:
        text: Period expression
        timezone: Timezone for the boundaries (default: settings.TIMEZONE)
        reference_date: Moment treated as "now" (default: current time in timezone)

    Returns:
        DateRange, or None if the expression is not recognized. Never raises.

    Example:
        Assuming today = 2025-03-10:

        >>> parse_date_range("mês passado")
        DateRange(start=2025-02-01 00:00:00-03:00, end=2025-02-28 23:59:59.999000-03:00)
    """
    if not isinstance(text, str) or not text.strip():
        return None

    now = end_of_day(_current_moment(timezone, reference_date))
    normalized = normalize_text(text)

    for rule in RANGE_RULES:
        match = rule.pattern.search(normalized)
        if match:
            try:
                result = rule.resolve(match, now)
            except (OverflowError, ValueError):
                result = None
            logger.debug(f"Range expression '{text}' matched rule '{rule.name}': {result}")
            return result

    logger.debug(f"Range expression '{text}' not recognized")
    return None
