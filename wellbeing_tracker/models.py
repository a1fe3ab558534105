"""
Domain models for the Wellbeing Tracker.

A wellbeing log records one session of a single activity. The three
activity shapes (training, stretching and meditation) share the base
fields ``id``, ``date`` and ``notes`` and differ in their ``details``
payload. ``ActivityType`` is the discriminant: every log class carries
it as a class attribute, so code that branches on the variant can check
``log.activity_type`` and know exactly which ``details`` type to expect.

Statistics (``ActivityStats`` and ``WellbeingStats``) are derived from
the log collection and never stored alongside it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, List, Optional, Union


class ActivityType(enum.Enum):
    """Enumeration of activity variants."""
    TRAINING = "training"
    STRETCHING = "stretching"
    MEDITATION = "meditation"


class MeditationType(enum.Enum):
    """Enumeration of meditation styles."""
    MINDFULNESS = "mindfulness"
    BREATHING = "breathing"
    VISUALIZATION = "visualization"
    BODY_SCAN = "body-scan"
    OTHER = "other"


@dataclass
class Exercise:
    """A single exercise performed during a training session."""

    name: str
    sets: int
    reps: int
    # weight in kilograms
    weight: Optional[float] = None


@dataclass
class Pose:
    """A stretching pose and how long it was held (seconds)."""

    name: str
    hold_duration: int
    target_muscles: List[str] = field(default_factory=list)


@dataclass
class TrainingDetails:
    exercises: List[Exercise]
    # minutes
    duration: float


@dataclass
class StretchingDetails:
    poses: List[Pose]
    # minutes
    total_duration: float


@dataclass
class MeditationDetails:
    type: MeditationType
    # minutes
    duration: float
    technique: Optional[str] = None
    guided_session: Optional[bool] = None


@dataclass
class TrainingLog:
    """A logged training session."""

    activity_type: ClassVar[ActivityType] = ActivityType.TRAINING

    date: datetime
    details: TrainingDetails
    notes: Optional[str] = None
    id: Optional[str] = None

    def __repr__(self) -> str:
        return f"<TrainingLog {self.id} {self.date}>"


@dataclass
class StretchingLog:
    """A logged stretching session."""

    activity_type: ClassVar[ActivityType] = ActivityType.STRETCHING

    date: datetime
    details: StretchingDetails
    notes: Optional[str] = None
    id: Optional[str] = None

    def __repr__(self) -> str:
        return f"<StretchingLog {self.id} {self.date}>"


@dataclass
class MeditationLog:
    """A logged meditation session."""

    activity_type: ClassVar[ActivityType] = ActivityType.MEDITATION

    date: datetime
    details: MeditationDetails
    notes: Optional[str] = None
    id: Optional[str] = None

    def __repr__(self) -> str:
        return f"<MeditationLog {self.id} {self.date}>"


WellbeingLog = Union[TrainingLog, StretchingLog, MeditationLog]

# Variant class and expected details type for each discriminant value
LOG_CLASSES = {
    ActivityType.TRAINING: TrainingLog,
    ActivityType.STRETCHING: StretchingLog,
    ActivityType.MEDITATION: MeditationLog,
}

DETAILS_CLASSES = {
    ActivityType.TRAINING: TrainingDetails,
    ActivityType.STRETCHING: StretchingDetails,
    ActivityType.MEDITATION: MeditationDetails,
}


@dataclass(frozen=True)
class ActivityStats:
    """Aggregate statistics for one activity type."""

    total_sessions: int = 0
    total_duration: float = 0
    last_session: Optional[datetime] = None


@dataclass(frozen=True)
class WellbeingStats:
    """Statistics for every activity type plus the overall log count."""

    training: ActivityStats
    stretching: ActivityStats
    meditation: ActivityStats
    total_activities: int

    def for_type(self, activity_type: ActivityType) -> ActivityStats:
        return getattr(self, activity_type.value)
