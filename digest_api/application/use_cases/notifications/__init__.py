"""Use cases for building and inspecting notification digests."""

from .aggregators import (
    ActivitySnapshot,
    SummarySources,
    aggregate_activity,
    aggregate_community_questions,
    aggregate_direct_messages,
    aggregate_job_fairs,
)
from .breakdown import (
    get_notification_breakdown,
    get_summary_breakdown,
    resolve_breakdown_since,
)
from .compose_summary import (
    SUMMARY_TITLE,
    build_summary_clauses,
    build_summary_message,
    compose_summary,
)
from .errors import SummaryError, SummaryPersistenceError, SummarySourceUnavailableError
from .summary_window import parse_summary_time, resolve_since

__all__ = [
    "ActivitySnapshot",
    "SummarySources",
    "aggregate_activity",
    "aggregate_community_questions",
    "aggregate_direct_messages",
    "aggregate_job_fairs",
    "get_notification_breakdown",
    "get_summary_breakdown",
    "resolve_breakdown_since",
    "SUMMARY_TITLE",
    "build_summary_clauses",
    "build_summary_message",
    "compose_summary",
    "SummaryError",
    "SummaryPersistenceError",
    "SummarySourceUnavailableError",
    "parse_summary_time",
    "resolve_since",
]
