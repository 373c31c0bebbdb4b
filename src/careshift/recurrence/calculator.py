"""Next-occurrence arithmetic for recurring tasks, doses and leave.

Two independent dates are computed for the next instance of a chain:

- the due date, which advances from the current due date by the
  recurrence period;
- the visible-from date, which keeps the next instance out of default
  views until the start of the next period (tomorrow, next Monday, or
  the first of next month).
"""

import logging
from datetime import date, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from careshift.domain.errors import UnknownRecurrenceKindError
from careshift.domain.models import RecurrenceKind

logger = logging.getLogger(__name__)


def resolve_kind(
    kind: Union[RecurrenceKind, str, None],
    strict: bool = False,
) -> RecurrenceKind:
    """Resolve a recurrence kind, applying the unknown-kind fallback.

    Unknown kinds fall back to DAILY and log a warning. With strict=True
    they are rejected instead.

    Raises:
        UnknownRecurrenceKindError: If strict and the kind is not recognized.
    """
    if isinstance(kind, RecurrenceKind):
        return kind
    try:
        return RecurrenceKind(str(kind).strip().lower())
    except ValueError:
        if strict:
            raise UnknownRecurrenceKindError(f"Unknown recurrence kind: {kind!r}")
        logger.warning("Unknown recurrence kind %r, falling back to daily", kind)
        return RecurrenceKind.DAILY


def _require_recurring(kind: RecurrenceKind) -> None:
    if kind == RecurrenceKind.NONE:
        raise ValueError("Non-recurring entities have no next occurrence")


def next_due_date(
    current_due: Optional[date],
    kind: Union[RecurrenceKind, str],
    today: Optional[date] = None,
    strict: bool = False,
) -> date:
    """Compute the due date of the next instance.

    Args:
        current_due: Due date of the current instance. None means today.
        kind: Recurrence kind.
        today: Reference date used when current_due is None.
        strict: Reject unknown kinds instead of treating them as daily.

    Returns:
        daily: +1 day; weekly: +7 days; monthly: +1 calendar month, with
        the day of month clamped to the end of shorter months.
    """
    resolved = resolve_kind(kind, strict)
    _require_recurring(resolved)
    base = current_due if current_due is not None else (today or date.today())

    if resolved == RecurrenceKind.WEEKLY:
        return base + timedelta(days=7)
    if resolved == RecurrenceKind.MONTHLY:
        return base + relativedelta(months=1)
    return base + timedelta(days=1)


def next_visible_from(
    kind: Union[RecurrenceKind, str],
    today: Optional[date] = None,
    strict: bool = False,
) -> date:
    """Compute the date the next instance becomes visible.

    Args:
        kind: Recurrence kind.
        today: Reference date. Defaults to date.today().
        strict: Reject unknown kinds instead of treating them as daily.

    Returns:
        daily: tomorrow; weekly: the next Monday strictly after today;
        monthly: the first day of next month.
    """
    resolved = resolve_kind(kind, strict)
    _require_recurring(resolved)
    today = today or date.today()

    if resolved == RecurrenceKind.WEEKLY:
        # Monday is weekday 0, so a Monday today moves a full week ahead
        return today + timedelta(days=7 - today.weekday())
    if resolved == RecurrenceKind.MONTHLY:
        return today.replace(day=1) + relativedelta(months=1)
    return today + timedelta(days=1)
