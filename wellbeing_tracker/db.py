"""Database setup utilities.

This module exposes the shared ``db`` object. The only table the
tracker owns is ``storage_slots`` (see ``wellbeing_tracker.storage``),
which holds the serialised activity log collection.

Import ``db`` from ``wellbeing_tracker`` rather than from this module
directly. The application factory binds it to the Flask app.
"""
from __future__ import annotations

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
