"""Human-readable labels for dashboard statistics."""
from __future__ import annotations

from datetime import datetime
from typing import Optional


def format_duration(minutes: float) -> str:
    """Format a duration in minutes, e.g. ``"45 min"`` or ``"1 h 15 min"``."""
    minutes = int(round(minutes))
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    if mins:
        return f"{hours} h {mins} min"
    return f"{hours} h"


def format_last_session(last_session: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Describe how long ago the last session happened.

    Sessions within the past week are described relative to ``now``
    ("Today", "Yesterday", "3 days ago"); older ones by day and month.
    """
    if last_session is None:
        return "No data"
    now = now or datetime.utcnow()
    days = (now - last_session).days
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    return f"{last_session.day} {last_session:%b}"
