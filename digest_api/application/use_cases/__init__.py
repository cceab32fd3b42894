"""Aggregate application use cases."""

from .notifications import compose_summary, get_notification_breakdown, get_summary_breakdown

__all__ = [
    "compose_summary",
    "get_notification_breakdown",
    "get_summary_breakdown",
]
