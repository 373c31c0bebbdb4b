"""Recurrence date calculation, duplicate-safe creation and rollover."""

from careshift.recurrence.calculator import next_due_date, next_visible_from, resolve_kind
from careshift.recurrence.guard import DuplicateGuard, build_next_instance
from careshift.recurrence.rollover import complete_instance, rollover_overdue

__all__ = [
    "DuplicateGuard",
    "build_next_instance",
    "complete_instance",
    "next_due_date",
    "next_visible_from",
    "resolve_kind",
    "rollover_overdue",
]
