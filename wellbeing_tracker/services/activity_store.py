"""The persisted collection of wellbeing logs.

``ActivityStore`` owns the ordered list of logs and is the only thing
that mutates it. Each application creates its own store, loads it from
a storage slot once, and passes it to whoever needs it; there is no
module-level instance.

Every mutation re-serialises the whole collection and overwrites the
slot. With ``autosave=False`` writes are deferred until ``flush()`` or
``close()``, which is handy when loading many logs at once.

A store is safe to share between threads of one process. Separate
processes holding stores on the same slot overwrite each other's
writes, so the service must run as a single worker process.
"""
from __future__ import annotations

import secrets
import string
import threading
import time
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Mapping, Optional

from loguru import logger

from ..errors import InvalidLogError
from ..models import DETAILS_CLASSES, LOG_CLASSES, ActivityStats, ActivityType, WellbeingLog, WellbeingStats
from ..schemas import (
    deserialize_collection,
    dump_log,
    load_log,
    parse_activity_type,
    serialize_collection,
)
from ..storage import Storage
from .stats_service import (
    calculate_activity_stats,
    calculate_wellbeing_stats,
    filter_logs_by_type,
    sort_logs_newest_first,
)

DEFAULT_STORAGE_KEY = "wellbeing-storage"

_ID_ALPHABET = string.digits + string.ascii_lowercase
_UPDATABLE = {"id", "activity_type", "date", "notes", "details"}


def generate_log_id() -> str:
    """Return a millisecond timestamp joined to nine random base-36 characters."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


def validate_log(log) -> Dict[str, List[str]]:
    """Check a log against the rules of its variant.

    Returns a mapping of field name to error messages, empty when the
    log is valid.
    """
    activity_type = getattr(log, "activity_type", None)
    if activity_type not in LOG_CLASSES or type(log) is not LOG_CLASSES[activity_type]:
        return {"activityType": ["Unknown activity type."]}

    errors: Dict[str, List[str]] = {}
    if not isinstance(log.date, datetime):
        errors["date"] = ["A date is required."]

    details = log.details
    if not isinstance(details, DETAILS_CLASSES[activity_type]):
        errors["details"] = [f"Details must describe a {activity_type.value} session."]
        return errors

    if activity_type is ActivityType.TRAINING:
        if not details.exercises:
            errors["details.exercises"] = ["At least one exercise is required."]
    elif activity_type is ActivityType.STRETCHING:
        if not details.poses:
            errors["details.poses"] = ["At least one pose is required."]
    elif activity_type is ActivityType.MEDITATION:
        if details.duration is None or details.duration <= 0:
            errors["details.duration"] = ["Duration must be greater than zero."]
    else:
        raise ValueError(f"Unknown activity type: {activity_type!r}")
    return errors


def normalise_log(log: WellbeingLog) -> WellbeingLog:
    """Return a fresh copy of ``log`` exactly as it will read back from storage.

    The copy passes through the persistence schemas, so it obeys every
    field rule ``load`` enforces (sets and reps of at least one, no
    negative durations, non-blank names) and its date is naive UTC.
    Nothing in the copy is shared with ``log``.

    Raises
    ------
    InvalidLogError
        If the log cannot be serialised or would not load back.
    """
    try:
        data = dump_log(log)
    except (AttributeError, TypeError, ValueError) as err:
        raise InvalidLogError("Invalid log data.") from err
    return load_log(data)


class ActivityStore:
    """An ordered, persisted collection of wellbeing logs.

    Logs returned by the store are the stored objects themselves and
    must be treated as read-only; change them through ``update_log``.
    Logs passed in are copied, so later changes to a candidate do not
    reach the store.

    Parameters
    ----------
    storage: Storage
        Backend holding the serialised collection.
    key: str, default "wellbeing-storage"
        Slot the collection is stored under.
    autosave: bool, default True
        Write the collection after every mutation. When ``False``,
        changes are written by ``flush()`` or ``close()``.
    """

    def __init__(self, storage: Storage, key: str = DEFAULT_STORAGE_KEY, autosave: bool = True) -> None:
        self.storage = storage
        self.key = key
        self.autosave = autosave
        self._logs: List[WellbeingLog] = []
        self._dirty = False
        # guards _logs and _dirty; reentrant because mutations flush
        self._lock = threading.RLock()

    @classmethod
    def open(cls, storage: Storage, key: str = DEFAULT_STORAGE_KEY, autosave: bool = True) -> "ActivityStore":
        """Create a store and load its collection from ``storage``."""
        store = cls(storage, key=key, autosave=autosave)
        store.load()
        return store

    def __enter__(self) -> "ActivityStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._logs)

    # Lifecycle

    def load(self) -> None:
        """Replace the in-memory collection with the persisted one."""
        with self._lock:
            blob = self.storage.read(self.key)
            self._logs = deserialize_collection(blob) if blob else []
            self._dirty = False
        logger.info(f"Loaded {len(self._logs)} wellbeing logs from '{self.key}'")

    def flush(self) -> None:
        """Write the collection if it has unsaved changes."""
        with self._lock:
            if not self._dirty:
                return
            self.storage.write(self.key, serialize_collection(self._logs))
            self._dirty = False
        logger.debug(f"Persisted {len(self._logs)} wellbeing logs to '{self.key}'")

    def close(self) -> None:
        self.flush()

    def _changed(self) -> None:
        self._dirty = True
        if self.autosave:
            self.flush()

    # Reads

    @property
    def logs(self) -> List[WellbeingLog]:
        """All logs in insertion order."""
        with self._lock:
            return list(self._logs)

    def get_log(self, log_id: str) -> Optional[WellbeingLog]:
        with self._lock:
            index = self._index_of(log_id)
            return None if index is None else self._logs[index]

    def _index_of(self, log_id: str) -> Optional[int]:
        for index, log in enumerate(self._logs):
            if log.id == log_id:
                return index
        return None

    # Mutations

    def add_log(self, candidate: WellbeingLog) -> WellbeingLog:
        """Validate ``candidate``, give it a fresh id and append it.

        Any id already set on the candidate is replaced. The candidate
        itself is not modified; a normalised copy is stored and
        returned.

        Raises
        ------
        InvalidLogError
            If the candidate breaks its variant's rules or would not
            load back from storage. The collection is left unchanged.
        """
        errors = validate_log(candidate)
        if errors:
            logger.warning(f"Rejected invalid wellbeing log: {errors}")
            raise InvalidLogError("Invalid log data.", fields=errors)
        log = normalise_log(candidate)

        with self._lock:
            existing = {entry.id for entry in self._logs}
            log_id = generate_log_id()
            while log_id in existing:
                log_id = generate_log_id()

            log = replace(log, id=log_id)
            self._logs.append(log)
            logger.debug(f"Added {log.activity_type.value} log {log_id}")
            self._changed()
        return log

    def remove_log(self, log_id: str) -> bool:
        """Remove the log with ``log_id``. Missing ids are ignored.

        Returns whether a log was removed.
        """
        with self._lock:
            index = self._index_of(log_id)
            if index is None:
                return False
            del self._logs[index]
            logger.debug(f"Removed log {log_id}")
            self._changed()
        return True

    def update_log(self, log_id: str, changes: Mapping) -> Optional[WellbeingLog]:
        """Merge ``changes`` into the log with ``log_id``.

        ``changes`` maps any of ``date``, ``notes`` and ``details`` to
        new values; ``details`` is replaced as a whole. The merged log
        is validated and normalised like a new one. Returns the updated
        log, or ``None`` when no log has that id.

        Raises
        ------
        InvalidLogError
            If the changes are unknown, try to alter ``id`` or
            ``activity_type``, or produce an invalid log. The stored
            log is left unchanged.
        """
        with self._lock:
            index = self._index_of(log_id)
            if index is None:
                return None
            current = self._logs[index]
            changes = dict(changes)

            unknown = set(changes) - _UPDATABLE
            if unknown:
                raise InvalidLogError(
                    "Unknown log fields.",
                    fields={name: ["Unknown field."] for name in sorted(unknown)},
                )
            if changes.pop("id", None) not in (None, log_id):
                raise InvalidLogError("A log id cannot be changed.", fields={"id": ["Cannot be changed."]})
            if "activity_type" in changes:
                new_type = parse_activity_type(changes.pop("activity_type"))
                if new_type is not current.activity_type:
                    raise InvalidLogError(
                        "A log's activity type cannot be changed.",
                        fields={"activityType": ["Cannot be changed."]},
                    )

            merged = replace(current, **changes)
            errors = validate_log(merged)
            if errors:
                logger.warning(f"Rejected update to log {log_id}: {errors}")
                raise InvalidLogError("Invalid log data.", fields=errors)
            merged = normalise_log(merged)

            self._logs[index] = merged
            logger.debug(f"Updated log {log_id}")
            self._changed()
        return merged

    # Selectors

    def logs_by_type(self, activity_type: ActivityType) -> List[WellbeingLog]:
        return filter_logs_by_type(self.logs, activity_type)

    def activity_stats(self, activity_type: ActivityType) -> ActivityStats:
        return calculate_activity_stats(self.logs, activity_type)

    def stats(self) -> WellbeingStats:
        return calculate_wellbeing_stats(self.logs)

    def history(self, activity_type: Optional[ActivityType] = None) -> List[WellbeingLog]:
        """Logs ordered newest first, optionally limited to one type."""
        logs = self.logs if activity_type is None else self.logs_by_type(activity_type)
        return sort_logs_newest_first(logs)
