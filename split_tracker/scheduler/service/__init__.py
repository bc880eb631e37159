"""Split service package.

This package contains the persistence-facing components:
- store.py: key-value backends and the split/cursor codec
- service.py: SplitService and the auto-advance entry point
"""
from .service import SplitService, auto_advance_split_if_needed
from .store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SplitStore,
    SqliteKeyValueStore,
)

__all__ = [
    "SplitService",
    "auto_advance_split_if_needed",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SplitStore",
    "SqliteKeyValueStore",
]
