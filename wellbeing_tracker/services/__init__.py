"""Service layer for the Wellbeing Tracker.

This package contains the business logic that sits between the
Flask route handlers and the storage layer: the activity store that
owns the log collection, and the functions that derive statistics
from it.

Nothing in this package should perform any HTTP handling.
Services return domain objects from ``wellbeing_tracker.models`` and
raise exceptions defined in ``wellbeing_tracker.errors`` when
something goes wrong.
"""

from .activity_store import ActivityStore, DEFAULT_STORAGE_KEY, generate_log_id, validate_log
from .stats_service import (
    calculate_activity_stats,
    calculate_wellbeing_stats,
    filter_logs_by_type,
    session_duration,
    sort_logs_newest_first,
)

__all__ = [
    "ActivityStore",
    "DEFAULT_STORAGE_KEY",
    "generate_log_id",
    "validate_log",
    "calculate_activity_stats",
    "calculate_wellbeing_stats",
    "filter_logs_by_type",
    "session_duration",
    "sort_logs_newest_first",
]
