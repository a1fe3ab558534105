"""Sanitisation helpers.

Free-text notes attached to wellbeing logs are cleaned before they are
stored: HTML tags are stripped and surrounding whitespace trimmed, to
reduce the risk of XSS if the notes are ever rendered in a web page.
"""
from __future__ import annotations

import re
from typing import Optional

TAG_RE = re.compile(r"<[^>]+>")


def strip_tags(text: str) -> str:
    """Remove HTML tags from the given string and trim whitespace."""
    if not text:
        return ""
    no_tags = TAG_RE.sub("", text)
    return no_tags.strip()


def clean_notes(notes: Optional[str]) -> Optional[str]:
    """Return sanitised notes, or ``None`` when nothing is left.

    Parameters
    ----------
    notes: Optional[str]
        The notes as submitted by the user.

    Returns
    -------
    Optional[str]
        The cleaned notes. Blank input is treated as no notes at all.
    """
    cleaned = strip_tags(notes or "")
    return cleaned or None
