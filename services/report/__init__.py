"""
FSS Report Service
Weekly filters and totals over enriched tickets
"""

from .weekly import (
    ALL_AGENTS,
    WeekRange,
    WeeklySummary,
    agent_names,
    current_week,
    filter_by_agent,
    filter_by_week,
    generate_weeks,
    summarize_week,
    ticket_url,
)

__all__ = [
    "ALL_AGENTS",
    "WeekRange",
    "WeeklySummary",
    "agent_names",
    "current_week",
    "filter_by_agent",
    "filter_by_week",
    "generate_weeks",
    "summarize_week",
    "ticket_url",
]
