"""Storage backends for shifts, leave and recurring work."""

from careshift.store.base import ScheduleStore
from careshift.store.memory import InMemoryScheduleStore

__all__ = [
    "InMemoryScheduleStore",
    "ScheduleStore",
]
