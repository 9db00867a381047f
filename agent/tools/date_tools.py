"""
Date filter tool for the admin agent.

The intent classifier extracts `date_from`/`date_to` from requests such as
"usuários editados ontem" or "alterações entre 01/11 e 15/11/2025" and passes
them here unmodified. The tool resolves them with the natural date parser and
returns SQL-ready bounds plus a Portuguese description for the reply.

When an expression can't be resolved the result carries an "error" key so the
agent asks the user to rephrase instead of guessing.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from langchain_core.tools import tool
from pydantic import BaseModel, Field

from agent.utils.date_filters import describe_date_filter, resolve_date_filter
from agent.utils.date_formatting import format_br_date, to_postgres_date

logger = logging.getLogger(__name__)


class ResolveDateFilterSchema(BaseModel):
    """Schema for resolve_date_filter_tool parameters."""

    date_from: str | None = Field(
        default=None,
        description=(
            "Start date or whole period in natural language. Accepts:\n"
            "- Keywords: 'hoje', 'ontem', 'semana passada', 'mês passado'\n"
            "- Periods: 'últimos 7 dias', 'esta semana', 'este mês', 'setembro de 2025'\n"
            "- Ranges: 'entre 01/11/2025 e 30/11/2025'\n"
            "- Dates: '15/11/2025', '2025-11-15'"
        )
    )
    date_to: str | None = Field(
        default=None,
        description="Optional end date ('hoje', '30/11/2025'). Ignored when date_from is a full period."
    )


def build_date_filter_result(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    reference_date: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Resolve date_from/date_to into the tool's result payload.

    Returns:
        Dict with:
        - start / end: ISO 8601 timestamps (None for an open bound)
        - start_date / end_date: YYYY-MM-DD for date-typed columns
        - description: "entre 01/11/2025 e 30/11/2025" style text
        - error: present when an expression was given but nothing resolved,
          or when the start falls after the end
    """
    date_filter = resolve_date_filter(date_from, date_to, reference_date=reference_date)

    result: dict[str, Any] = {
        "start": date_filter.start.isoformat() if date_filter.start else None,
        "end": date_filter.end.isoformat() if date_filter.end else None,
        "start_date": to_postgres_date(date_filter.start),
        "end_date": to_postgres_date(date_filter.end),
        "description": describe_date_filter(date_filter),
    }

    if date_filter.is_empty and (date_from or date_to):
        expressions = " / ".join(expr for expr in (date_from, date_to) if expr)
        result["error"] = (
            f"Não consegui entender a data \"{expressions}\". "
            f"Tente algo como 'ontem', 'últimos 7 dias' ou '15/11/2025'."
        )
        logger.info(
            f"Date filter unresolved for: {expressions}",
            extra={"tool_name": "resolve_date_filter_tool", "expression": expressions},
        )
    elif date_filter.is_reversed:
        result["error"] = (
            f"A data inicial ({format_br_date(date_filter.start)}) é posterior "
            f"à data final ({format_br_date(date_filter.end)})."
        )

    return result


@tool(args_schema=ResolveDateFilterSchema)
def resolve_date_filter_tool(
    date_from: str | None = None,
    date_to: str | None = None,
) -> dict[str, Any]:
    """
    Resolve natural language date filters into timestamp bounds.

    Use before listing users, audit entries or commissions filtered by date.
    Pass the user's words as they are ("ontem", "últimos 30 dias",
    "entre 01/11/2025 e 30/11/2025"); do not convert them yourself.

    Args:
        date_from: Start date or whole period
        date_to: Optional end date

    Returns:
        Dict with start, end, start_date, end_date, description and, when the
        dates could not be understood, error.

    Example:
        >>> resolve_date_filter_tool.invoke({"date_from": "entre 01/11/2025 e 30/11/2025"})
        {"start_date": "2025-11-01", "end_date": "2025-11-30",
         "description": "entre 01/11/2025 e 30/11/2025", ...}
    """
    return build_date_filter_result(date_from, date_to)
