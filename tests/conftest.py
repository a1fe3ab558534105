"""Shared fixtures for the Wellbeing Tracker tests.

Applications are created through the ``create_app`` factory with an
in-memory SQLite database so that each test runs in isolation.
Factory fixtures build valid logs of each variant; override any field
by passing keyword arguments.
"""
from __future__ import annotations

from datetime import datetime

import pytest

from wellbeing_tracker import create_app
from wellbeing_tracker.models import (
    Exercise,
    MeditationDetails,
    MeditationLog,
    MeditationType,
    Pose,
    StretchingDetails,
    StretchingLog,
    TrainingDetails,
    TrainingLog,
)
from wellbeing_tracker.services import ActivityStore
from wellbeing_tracker.storage import MemoryStorage


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "LOG_LEVEL": "WARNING",
    })
    yield app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage) -> ActivityStore:
    return ActivityStore.open(storage)


@pytest.fixture
def training_log():
    def make(date=datetime(2024, 1, 1), duration=30, exercises=None, notes=None):
        if exercises is None:
            exercises = [Exercise(name="Squat", sets=3, reps=10, weight=40)]
        return TrainingLog(
            date=date,
            details=TrainingDetails(exercises=exercises, duration=duration),
            notes=notes,
        )
    return make


@pytest.fixture
def stretching_log():
    def make(date=datetime(2024, 1, 2), total_duration=15, poses=None, notes=None):
        if poses is None:
            poses = [Pose(name="Cobra", hold_duration=30, target_muscles=["abs", "lower back"])]
        return StretchingLog(
            date=date,
            details=StretchingDetails(poses=poses, total_duration=total_duration),
            notes=notes,
        )
    return make


@pytest.fixture
def meditation_log():
    def make(date=datetime(2024, 1, 3), duration=10, type=MeditationType.BREATHING, notes=None, **details):
        return MeditationLog(
            date=date,
            details=MeditationDetails(type=type, duration=duration, **details),
            notes=notes,
        )
    return make
