"""Durable key-value slots for persisted application state.

The activity store keeps its whole log collection as one serialised
blob under a fixed key. Two backends are provided:

``DatabaseStorage``
    One row per key in the ``storage_slots`` table. Writes overwrite
    the row and commit immediately. Requires an application context.
``MemoryStorage``
    A plain dictionary, useful for scripts and unit tests.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Protocol

from loguru import logger

from .db import db


class StorageSlot(db.Model):
    __allow_unmapped__ = True
    """A single persisted blob addressed by ``key``."""
    __tablename__ = "storage_slots"

    key: str = db.Column(db.String(100), primary_key=True)
    value: str = db.Column(db.Text, nullable=False)
    updated_at: datetime = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<StorageSlot {self.key}>"


class Storage(Protocol):
    """Interface shared by the storage backends."""

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """Dictionary-backed storage."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self.slots: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.slots.get(key)

    def write(self, key: str, value: str) -> None:
        self.slots[key] = value


class DatabaseStorage:
    """Storage backed by the ``storage_slots`` table."""

    def __init__(self, database=db) -> None:
        self.db = database

    def read(self, key: str) -> Optional[str]:
        slot = self.db.session.get(StorageSlot, key)
        if slot is None:
            return None
        return slot.value

    def write(self, key: str, value: str) -> None:
        slot = self.db.session.get(StorageSlot, key)
        if slot is None:
            slot = StorageSlot(key=key, value=value)
            self.db.session.add(slot)
        else:
            slot.value = value
        self.db.session.commit()
        logger.debug(f"Wrote {len(value)} bytes to storage slot '{key}'")
