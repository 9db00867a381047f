"""
Date utilities shared by the admin agent tools.

This module contains:
- date_parser: Natural language date and period parsing for Portuguese (BR)
- date_formatting: DD/MM/YYYY display, YYYY-MM-DD persistence, relative time
- date_filters: date_from/date_to resolution and SQLAlchemy predicates
"""

from agent.utils.date_parser import (
    BRAZIL_TZ,
    DateRange,
    parse_date_range,
    parse_natural_date,
)
from agent.utils.date_formatting import (
    format_br_date,
    format_br_datetime,
    format_br_range,
    get_relative_time,
    to_postgres_date,
)
from agent.utils.date_filters import (
    DateFilter,
    build_date_predicate,
    describe_date_filter,
    resolve_date_expression,
    resolve_date_filter,
)

__all__ = [
    # Date parsing
    "BRAZIL_TZ",
    "DateRange",
    "parse_natural_date",
    "parse_date_range",
    # Formatting
    "format_br_date",
    "format_br_datetime",
    "format_br_range",
    "to_postgres_date",
    "get_relative_time",
    # Query filters
    "DateFilter",
    "resolve_date_filter",
    "resolve_date_expression",
    "build_date_predicate",
    "describe_date_filter",
]
