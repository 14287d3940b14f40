"""Authoritative store access and hydration."""

from app.storage.hydrator import Hydrator
from app.storage.record_store import RecordStore

__all__ = [
    "Hydrator",
    "RecordStore",
]
