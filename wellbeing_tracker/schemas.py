"""
Serialization schemas using Marshmallow for the Wellbeing Tracker.

These schemas convert the domain dataclasses in ``models`` to and
from JSON-friendly dictionaries. Wire keys use camelCase
(``activityType``, ``holdDuration`` ...) so the HTTP payloads and the
persisted collection share one format. Optional values that are unset
are left out of the output rather than written as ``null``.

The log union is dispatched on ``activityType``: ``load_log`` picks the
variant schema and returns the matching log dataclass. Loading failures
surface as ``InvalidLogError`` carrying marshmallow's per-field messages.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable, List

from dateutil.parser import parse as parse_date  # type: ignore
from marshmallow import Schema, fields, validate, post_dump, post_load, pre_load
from marshmallow import ValidationError as MarshmallowValidationError

from .errors import InvalidLogError, StorageVersionError
from .models import (
    ActivityStats,
    ActivityType,
    Exercise,
    MeditationDetails,
    MeditationLog,
    MeditationType,
    Pose,
    StretchingDetails,
    StretchingLog,
    TrainingDetails,
    TrainingLog,
    WellbeingLog,
    WellbeingStats,
)

# Version written into the persisted collection blob
SCHEMA_VERSION = 1


class LogDate(fields.DateTime):
    """Timestamp field accepting ISO 8601 strings or plain calendar dates.

    Aware values are converted to naive UTC so that every stored date
    can be compared with every other one.
    """

    def _deserialize(self, value, attr, data, **kwargs) -> datetime:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str) and value.strip():
            try:
                parsed = parse_date(value)
            except (ValueError, OverflowError) as err:
                raise self.make_error("invalid", input=value, obj_type=self.OBJ_TYPE) from err
        else:
            raise self.make_error("invalid", input=value, obj_type=self.OBJ_TYPE)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed


class CompactSchema(Schema):
    """Base schema that omits unset optional values when dumping."""

    @post_dump
    def remove_unset(self, data: dict, **kwargs) -> dict:
        return {key: value for key, value in data.items() if value is not None}


class ExerciseSchema(CompactSchema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    sets = fields.Integer(required=True, validate=validate.Range(min=1))
    reps = fields.Integer(required=True, validate=validate.Range(min=1))
    weight = fields.Float(allow_none=True, load_default=None, validate=validate.Range(min=0))

    @post_load
    def make_exercise(self, data: dict, **kwargs) -> Exercise:
        return Exercise(**data)


class PoseSchema(CompactSchema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    hold_duration = fields.Integer(
        required=True, data_key="holdDuration", validate=validate.Range(min=0)
    )
    target_muscles = fields.List(
        fields.String(validate=validate.Length(min=1, max=50)),
        data_key="targetMuscles",
        load_default=list,
    )

    @pre_load
    def drop_blank_muscles(self, data, **kwargs):
        # comma-separated form input leaves empty entries behind
        muscles = data.get("targetMuscles") if isinstance(data, dict) else None
        if isinstance(muscles, list):
            cleaned = [
                muscle.strip() if isinstance(muscle, str) else muscle
                for muscle in muscles
                if not (isinstance(muscle, str) and not muscle.strip())
            ]
            data = {**data, "targetMuscles": cleaned}
        return data

    @post_load
    def make_pose(self, data: dict, **kwargs) -> Pose:
        # target muscles behave like a set; keep first occurrences in order
        data["target_muscles"] = list(dict.fromkeys(data.get("target_muscles", [])))
        return Pose(**data)


class TrainingDetailsSchema(CompactSchema):
    exercises = fields.Nested(ExerciseSchema, many=True, required=True)
    duration = fields.Float(required=True, validate=validate.Range(min=0))

    @post_load
    def make_details(self, data: dict, **kwargs) -> TrainingDetails:
        return TrainingDetails(**data)


class StretchingDetailsSchema(CompactSchema):
    poses = fields.Nested(PoseSchema, many=True, required=True)
    total_duration = fields.Float(
        required=True, data_key="totalDuration", validate=validate.Range(min=0)
    )

    @post_load
    def make_details(self, data: dict, **kwargs) -> StretchingDetails:
        return StretchingDetails(**data)


class MeditationDetailsSchema(CompactSchema):
    type = fields.Enum(MeditationType, by_value=True, required=True)
    duration = fields.Float(required=True)
    technique = fields.String(allow_none=True, load_default=None, validate=validate.Length(max=100))
    guided_session = fields.Boolean(allow_none=True, load_default=None, data_key="guidedSession")

    @post_load
    def make_details(self, data: dict, **kwargs) -> MeditationDetails:
        return MeditationDetails(**data)


class LogSchema(CompactSchema):
    """Fields shared by every log variant."""

    log_class: type = None

    id = fields.String(allow_none=True, load_default=None)
    activity_type = fields.Enum(ActivityType, by_value=True, required=True, data_key="activityType")
    date = LogDate(required=True)
    notes = fields.String(allow_none=True, load_default=None, validate=validate.Length(max=1000))

    @post_load
    def make_log(self, data: dict, **kwargs):
        # partial loads are update payloads and stay as plain dictionaries
        if kwargs.get("partial"):
            return data
        data.pop("activity_type", None)
        return self.log_class(**data)


class TrainingLogSchema(LogSchema):
    log_class = TrainingLog
    details = fields.Nested(TrainingDetailsSchema, required=True)


class StretchingLogSchema(LogSchema):
    log_class = StretchingLog
    details = fields.Nested(StretchingDetailsSchema, required=True)


class MeditationLogSchema(LogSchema):
    log_class = MeditationLog
    details = fields.Nested(MeditationDetailsSchema, required=True)


LOG_SCHEMAS = {
    ActivityType.TRAINING: TrainingLogSchema,
    ActivityType.STRETCHING: StretchingLogSchema,
    ActivityType.MEDITATION: MeditationLogSchema,
}

UPDATABLE_FIELDS = ("id", "activity_type", "date", "notes", "details")


class ActivityStatsSchema(CompactSchema):
    total_sessions = fields.Integer(data_key="totalSessions")
    total_duration = fields.Float(data_key="totalDuration")
    last_session = fields.DateTime(data_key="lastSession")


class WellbeingStatsSchema(Schema):
    training = fields.Nested(ActivityStatsSchema)
    stretching = fields.Nested(ActivityStatsSchema)
    meditation = fields.Nested(ActivityStatsSchema)
    total_activities = fields.Integer(data_key="totalActivities")


def parse_activity_type(value: Any) -> ActivityType:
    """Return the ``ActivityType`` named by ``value``.

    Raises
    ------
    InvalidLogError
        If ``value`` is not one of the known activity types.
    """
    if isinstance(value, ActivityType):
        return value
    try:
        return ActivityType(value)
    except ValueError:
        choices = ", ".join(t.value for t in ActivityType)
        raise InvalidLogError(
            "Unknown activity type.",
            fields={"activityType": [f"Must be one of: {choices}."]},
        ) from None


def load_log(data: Any) -> WellbeingLog:
    """Load a single log dictionary into the matching variant dataclass."""
    if not isinstance(data, dict):
        raise InvalidLogError("Log data must be an object.")
    activity_type = parse_activity_type(data.get("activityType"))
    try:
        return LOG_SCHEMAS[activity_type]().load(data)
    except MarshmallowValidationError as err:
        raise InvalidLogError("Invalid log data.", fields=err.messages) from err


def load_log_changes(activity_type: ActivityType, data: Any) -> dict:
    """Load a partial update payload for a log of ``activity_type``.

    Any subset of the top-level fields may be given. ``details``, when
    present, must be complete because it replaces the existing details.
    The result maps attribute names to loaded values.
    """
    if not isinstance(data, dict):
        raise InvalidLogError("Log data must be an object.")
    try:
        return LOG_SCHEMAS[activity_type]().load(data, partial=UPDATABLE_FIELDS)
    except MarshmallowValidationError as err:
        raise InvalidLogError("Invalid log data.", fields=err.messages) from err


def dump_log(log: WellbeingLog) -> dict:
    return LOG_SCHEMAS[log.activity_type]().dump(log)


def dump_logs(logs: Iterable[WellbeingLog]) -> List[dict]:
    return [dump_log(log) for log in logs]


def dump_activity_stats(stats: ActivityStats) -> dict:
    return ActivityStatsSchema().dump(stats)


def dump_wellbeing_stats(stats: WellbeingStats) -> dict:
    return WellbeingStatsSchema().dump(stats)


def serialize_collection(logs: Iterable[WellbeingLog]) -> str:
    """Serialise the whole log collection into the persisted blob format."""
    return json.dumps({"version": SCHEMA_VERSION, "logs": dump_logs(logs)})


def deserialize_collection(blob: str) -> List[WellbeingLog]:
    """Rebuild a log collection from a persisted blob.

    Blobs written before the version marker existed are read as
    version 1, as are browser exports shaped
    ``{"state": {"logs": [...]}, "version": 0}``. A blob from a newer
    version raises ``StorageVersionError`` so that it is never
    overwritten by a build that cannot read it.
    """
    payload = json.loads(blob)
    if isinstance(payload, list):
        return [load_log(item) for item in payload]
    if not isinstance(payload, dict):
        raise InvalidLogError("Stored log collection is malformed.")
    version = payload.get("version", SCHEMA_VERSION)
    if not isinstance(version, int) or version > SCHEMA_VERSION:
        raise StorageVersionError(version, SCHEMA_VERSION)
    if "logs" in payload:
        items = payload["logs"]
    else:
        items = (payload.get("state") or {}).get("logs", [])
    return [load_log(item) for item in items]
