"""Activity statistics computation utilities.

These functions derive per-activity statistics from a log collection.
Nothing here is cached: every call walks the collection it is given,
so the cost is linear in the number of logs. The functions never
mutate their input.
"""
from __future__ import annotations

from typing import Iterable, List

from ..models import ActivityStats, ActivityType, WellbeingLog, WellbeingStats


def session_duration(log: WellbeingLog) -> float:
    """Return the duration of a logged session in minutes.

    Training and meditation record ``details.duration``; stretching
    records ``details.total_duration``.
    """
    if log.activity_type is ActivityType.TRAINING:
        return log.details.duration
    if log.activity_type is ActivityType.STRETCHING:
        return log.details.total_duration
    if log.activity_type is ActivityType.MEDITATION:
        return log.details.duration
    raise ValueError(f"Unknown activity type: {log.activity_type!r}")


def filter_logs_by_type(logs: Iterable[WellbeingLog], activity_type: ActivityType) -> List[WellbeingLog]:
    """Return the logs of ``activity_type`` in their original order."""
    return [log for log in logs if log.activity_type is activity_type]


def sort_logs_newest_first(logs: Iterable[WellbeingLog]) -> List[WellbeingLog]:
    """Return a copy of ``logs`` ordered by date, most recent first.

    The sort is stable, so logs sharing a timestamp keep their
    insertion order.
    """
    return sorted(logs, key=lambda log: log.date, reverse=True)


def calculate_activity_stats(logs: Iterable[WellbeingLog], activity_type: ActivityType) -> ActivityStats:
    """Compute session count, total duration and recency for one type.

    Parameters
    ----------
    logs: Iterable[WellbeingLog]
        The full log collection.
    activity_type: ActivityType
        The activity type to summarise.

    Returns
    -------
    ActivityStats
        ``total_sessions=0`` and ``total_duration=0`` with no
        ``last_session`` when there are no logs of that type.
    """
    filtered = filter_logs_by_type(logs, activity_type)
    if not filtered:
        return ActivityStats(total_sessions=0, total_duration=0)
    total_duration = sum(session_duration(log) for log in filtered)
    last_session = sort_logs_newest_first(filtered)[0].date
    return ActivityStats(
        total_sessions=len(filtered),
        total_duration=total_duration,
        last_session=last_session,
    )


def calculate_wellbeing_stats(logs: Iterable[WellbeingLog]) -> WellbeingStats:
    """Compute statistics for every activity type at once."""
    logs = list(logs)
    return WellbeingStats(
        training=calculate_activity_stats(logs, ActivityType.TRAINING),
        stretching=calculate_activity_stats(logs, ActivityType.STRETCHING),
        meditation=calculate_activity_stats(logs, ActivityType.MEDITATION),
        total_activities=len(logs),
    )
