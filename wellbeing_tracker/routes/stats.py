"""Routes for derived statistics.

Statistics are recomputed from the full log collection on every
request. The heavy lifting is delegated to
``wellbeing_tracker.services.stats_service``.
"""
from __future__ import annotations

from flask import Blueprint, current_app

from ..errors import ValidationError
from ..models import ActivityType
from ..schemas import dump_activity_stats, dump_wellbeing_stats
from ..services import ActivityStore
from ..util.formatting import format_duration, format_last_session

stats_bp = Blueprint("stats", __name__)


def _store() -> ActivityStore:
    return current_app.extensions["activity_store"]


@stats_bp.route("/stats", methods=["GET"])
def all_stats() -> tuple[dict, int]:
    """Return statistics for every activity type and the total log count."""
    return dump_wellbeing_stats(_store().stats()), 200


@stats_bp.route("/stats/summary", methods=["GET"])
def stats_summary() -> tuple[dict, int]:
    """Return per-type statistics with display labels for the dashboard."""
    stats = _store().stats()
    summary = {"totalActivities": stats.total_activities}
    for activity_type in ActivityType:
        activity_stats = stats.for_type(activity_type)
        entry = dump_activity_stats(activity_stats)
        entry["durationLabel"] = format_duration(activity_stats.total_duration)
        entry["lastSessionLabel"] = format_last_session(activity_stats.last_session)
        summary[activity_type.value] = entry
    return summary, 200


@stats_bp.route("/stats/<activity_type>", methods=["GET"])
def activity_stats(activity_type: str) -> tuple[dict, int]:
    """Return statistics for a single activity type."""
    try:
        parsed = ActivityType(activity_type)
    except ValueError:
        choices = ", ".join(t.value for t in ActivityType)
        raise ValidationError(f"Unknown activity type '{activity_type}'. Choose one of: {choices}.")
    return dump_activity_stats(_store().activity_stats(parsed)), 200
