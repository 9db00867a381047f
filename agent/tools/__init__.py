"""
Agent Tools for the chat admin layer.

Date handling exposed to the tool-dispatch layer:
1. resolve_date_filter_tool - date_from/date_to natural language → timestamp bounds

Utilities (not exposed as tools): date_parser, date_formatting, date_filters
"""

from agent.tools.date_tools import resolve_date_filter_tool

__all__ = [
    "resolve_date_filter_tool",
]
