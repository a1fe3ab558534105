"""Seed script for demo data.

Running this script adds a handful of training, stretching and
meditation sessions from the past two weeks to the configured
storage slot, so that the history and statistics endpoints have
something to show. Run it with ``python -m seed.seed`` from the
repository root while the server is stopped, since a running server
would overwrite the seeded slot with its own copy.
"""
from __future__ import annotations

from datetime import datetime, timedelta

from wellbeing_tracker import create_app, db
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
from wellbeing_tracker.storage import DatabaseStorage


def demo_logs(today: datetime) -> list:
    """Return the demo sessions, dated relative to ``today``."""
    return [
        TrainingLog(
            date=today - timedelta(days=13),
            details=TrainingDetails(
                exercises=[
                    Exercise(name="Squat", sets=3, reps=8, weight=60),
                    Exercise(name="Push-up", sets=3, reps=15),
                ],
                duration=45,
            ),
            notes="Felt strong",
        ),
        StretchingLog(
            date=today - timedelta(days=10),
            details=StretchingDetails(
                poses=[
                    Pose(name="Forward fold", hold_duration=45, target_muscles=["hamstrings", "lower back"]),
                    Pose(name="Pigeon", hold_duration=60, target_muscles=["hips", "glutes"]),
                ],
                total_duration=15,
            ),
        ),
        MeditationLog(
            date=today - timedelta(days=7),
            details=MeditationDetails(type=MeditationType.BREATHING, duration=10, technique="Box breathing"),
        ),
        TrainingLog(
            date=today - timedelta(days=4),
            details=TrainingDetails(
                exercises=[Exercise(name="Deadlift", sets=5, reps=5, weight=80)],
                duration=50,
            ),
        ),
        MeditationLog(
            date=today - timedelta(days=1),
            details=MeditationDetails(type=MeditationType.BODY_SCAN, duration=20, guided_session=True),
            notes="Evening wind-down",
        ),
    ]


def run_seeds() -> None:
    """Append the demo sessions to the application's storage slot."""
    app = create_app()
    with app.app_context():
        storage = DatabaseStorage(db)
        with ActivityStore.open(storage, key=app.config["WELLBEING_STORAGE_KEY"], autosave=False) as store:
            today = datetime.utcnow().replace(hour=8, minute=0, second=0, microsecond=0)
            for log in demo_logs(today):
                store.add_log(log)
        print(f"Seeded {len(store)} wellbeing logs.")


if __name__ == "__main__":
    run_seeds()
