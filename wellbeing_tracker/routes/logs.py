"""
Routes for recording and browsing wellbeing logs.

Every handler works on the ``ActivityStore`` owned by the current
application. Request bodies use the same camelCase format as the
persisted collection, e.g.::

    {"activityType": "meditation", "date": "2024-01-10",
     "details": {"type": "breathing", "duration": 10}}
"""

from __future__ import annotations

from flask import Blueprint, current_app, request

from ..errors import InvalidLogError, NotFoundError, ValidationError
from ..schemas import dump_log, dump_logs, load_log, load_log_changes, parse_activity_type
from ..services import ActivityStore
from ..util.sanitization import clean_notes


logs_bp = Blueprint("logs", __name__)


def _store() -> ActivityStore:
    return current_app.extensions["activity_store"]


def _get_log_or_404(log_id: str):
    log = _store().get_log(log_id)
    if log is None:
        raise NotFoundError(f"Log {log_id} not found.")
    return log


@logs_bp.route("/logs", methods=["GET"])
def list_logs() -> tuple[list[dict], int]:
    """List logs in the order they were recorded.

    Accepts an optional ``type`` query parameter to limit the list to
    one activity type, and ``order=newest`` to sort by date with the
    most recent session first.
    """
    store = _store()
    activity_type = request.args.get("type")
    order = request.args.get("order", "recorded")
    if order not in ("recorded", "newest"):
        raise ValidationError(
            "order must be 'recorded' or 'newest'.",
            fields={"order": ["Must be one of: recorded, newest."]},
        )
    parsed_type = parse_activity_type(activity_type) if activity_type else None
    if order == "newest":
        logs = store.history(parsed_type)
    elif parsed_type is not None:
        logs = store.logs_by_type(parsed_type)
    else:
        logs = store.logs
    return dump_logs(logs), 200


@logs_bp.route("/logs", methods=["POST"])
def create_log() -> tuple[dict, int]:
    """Record a new session.

    Requires ``activityType``, ``date`` and ``details``. Training logs
    need at least one exercise, stretching logs at least one pose, and
    meditation logs a positive duration. Returns the stored log,
    including its generated ``id``.
    """
    data = request.get_json(silent=True)
    candidate = load_log(data)
    candidate.notes = clean_notes(candidate.notes)
    log = _store().add_log(candidate)
    return dump_log(log), 201


@logs_bp.route("/logs/<log_id>", methods=["GET"])
def get_log(log_id: str) -> tuple[dict, int]:
    """Retrieve a single log."""
    return dump_log(_get_log_or_404(log_id)), 200


@logs_bp.route("/logs/<log_id>", methods=["PUT"])
def update_log(log_id: str) -> tuple[dict, int]:
    """Update a log.

    Accepts any of ``date``, ``notes`` and ``details``. ``details``
    replaces the existing details as a whole. The activity type of a
    log cannot be changed.
    """
    existing = _get_log_or_404(log_id)
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidLogError("Request body must be a JSON object.")
    changes = load_log_changes(existing.activity_type, data)
    if "notes" in changes:
        changes["notes"] = clean_notes(changes["notes"])
    log = _store().update_log(log_id, changes)
    if log is None:
        raise NotFoundError(f"Log {log_id} not found.")
    return dump_log(log), 200


@logs_bp.route("/logs/<log_id>", methods=["DELETE"])
def delete_log(log_id: str) -> tuple[dict, int]:
    """Delete a log.

    Deleting a log that does not exist succeeds, so repeating the
    request is harmless.
    """
    removed = _store().remove_log(log_id)
    message = "Log deleted." if removed else "Log already absent."
    return {"message": message}, 200
