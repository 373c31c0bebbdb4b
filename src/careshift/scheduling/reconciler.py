"""Merges shifts and approved leave into one calendar for a care network.

Reconciliation rules, applied in order:

1. The optional carer filter drops shifts and leave for other carers.
2. A logged time entry replaces scheduled instances for the same carer
   on the same day.
3. Approved leave replaces the carer's basic shifts on each leave day
   (the override rule); other shift kinds are kept.
4. Each leave day inside the window becomes a synthetic entry drawn at
   the policy's display window.
5. Entries are sorted by date, start time, then carer display name.
"""

import logging
from datetime import date
from typing import Callable, Optional, TypeVar

from careshift.domain.errors import UpstreamFetchError
from careshift.domain.models import (
    CalendarEntry,
    CarerIdentity,
    DateRange,
    LeaveRequest,
    ShiftEntry,
    ShiftSource,
)
from careshift.domain.policies import (
    DefaultLeaveDisplayPolicy,
    DefaultOverridePolicy,
    LeaveDisplayPolicy,
    OverridePolicy,
    resolve_display_name,
)
from careshift.scheduling.leave_index import LeaveOverlapIndex
from careshift.store.base import ScheduleStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def entry_sort_key(entry: CalendarEntry) -> tuple:
    """Ordering key: date, start time, carer name, then id for stable ties."""
    return (
        entry.entry_date,
        entry.start_time,
        entry.carer_name,
        entry.id,
    )


def fetch_or_raise(operation: str, fetch: Callable[..., T], *args) -> T:
    """Call a store fetch, converting any failure into UpstreamFetchError."""
    try:
        return fetch(*args)
    except UpstreamFetchError:
        raise
    except Exception as exc:
        logger.error("%s failed: %s", operation, exc)
        raise UpstreamFetchError(operation, str(exc)) from exc


class ShiftReconciler:
    """Builds the reconciled calendar for one care network.

    Example:
        >>> reconciler = ShiftReconciler(store)
        >>> entries = reconciler.shifts_for_window(
        ...     "n1", DateRange(date(2025, 6, 9), date(2025, 6, 15))
        ... )
    """

    def __init__(
        self,
        store: ScheduleStore,
        override_policy: Optional[OverridePolicy] = None,
        display_policy: Optional[LeaveDisplayPolicy] = None,
    ):
        """Initialize reconciler with a store and policies.

        Args:
            store: Source of shifts, leave and carer names.
            override_policy: Decides which shift kinds leave suppresses.
            display_policy: Leave display window, labels and fallback names.
        """
        self.store = store
        self.override_policy = override_policy or DefaultOverridePolicy()
        self.display_policy = display_policy or DefaultLeaveDisplayPolicy()

    def shifts_for_window(
        self,
        network_id: str,
        date_range: DateRange,
        carer_filter: Optional[CarerIdentity] = None,
    ) -> list[CalendarEntry]:
        """Get the reconciled, ordered calendar entries for a network.

        Args:
            network_id: Care network to load.
            date_range: Inclusive window of dates.
            carer_filter: Only include this carer's shifts and leave.

        Returns:
            Ordered calendar entries. An empty list means nothing is
            scheduled; fetch failures raise instead.

        Raises:
            UpstreamFetchError: If any fetch from the store fails.
        """
        shifts = fetch_or_raise("fetch_shifts", self.store.fetch_shifts, network_id, date_range)
        leave = fetch_or_raise(
            "fetch_approved_leave", self.store.fetch_approved_leave, network_id, date_range
        )
        return self.reconcile(shifts, leave, date_range, carer_filter)

    def reconcile(
        self,
        shifts: list[ShiftEntry],
        leave_requests: list[LeaveRequest],
        date_range: DateRange,
        carer_filter: Optional[CarerIdentity] = None,
    ) -> list[CalendarEntry]:
        """Reconcile already-fetched shifts and leave.

        Only carer display names are fetched here.
        """
        shifts = [s for s in shifts if date_range.contains(s.scheduled_date)]
        approved = [leave for leave in leave_requests if leave.is_approved]

        if carer_filter is not None:
            shifts = [s for s in shifts if s.carer == carer_filter]
            approved = [leave for leave in approved if leave.carer == carer_filter]

        shifts = self._prefer_logged(shifts)
        index = LeaveOverlapIndex(approved, date_range)

        kept = []
        suppressed = 0
        for shift in shifts:
            if (
                self.override_policy.is_suppressible(shift.kind)
                and index.is_on_leave(shift.carer, shift.scheduled_date)
            ):
                suppressed += 1
                continue
            kept.append(shift)

        carers = {s.carer for s in kept if s.carer is not None}
        carers.update(leave.carer for leave in approved)
        names = (
            fetch_or_raise(
                "fetch_carer_display_names",
                self.store.fetch_carer_display_names,
                sorted(carers, key=lambda c: c.key),
            )
            if carers
            else {}
        )

        entries = [self._shift_entry(shift, names) for shift in kept]
        for day in index.covered_days():
            for leave in index.leave_on(day):
                entries.append(self._leave_entry(leave, day, names))

        entries.sort(key=entry_sort_key)
        logger.debug(
            "Reconciled %d shifts and %d leave requests into %d entries (%d suppressed)",
            len(shifts),
            len(approved),
            len(entries),
            suppressed,
        )
        return entries

    def _prefer_logged(self, shifts: list[ShiftEntry]) -> list[ShiftEntry]:
        """Drop scheduled instances where the carer logged time that day."""
        logged = {
            (s.carer, s.scheduled_date)
            for s in shifts
            if s.source == ShiftSource.LOGGED and s.carer is not None
        }
        return [
            s for s in shifts
            if s.source != ShiftSource.SCHEDULED
            or s.carer is None
            or (s.carer, s.scheduled_date) not in logged
        ]

    def _shift_entry(self, shift: ShiftEntry, names: dict) -> CalendarEntry:
        name = resolve_display_name(
            shift.carer,
            names,
            shift.carer_name,
            self.display_policy.shift_fallback_name(),
        )
        return CalendarEntry(
            id=shift.id,
            network_id=shift.network_id,
            carer=shift.carer,
            carer_name=name,
            entry_date=shift.scheduled_date,
            start_time=shift.start_time,
            end_time=shift.display_end_time,
            kind=shift.kind,
            label=self.display_policy.compose_label(shift.kind, name),
            is_leave_derived=False,
            note=shift.note,
            pending_export=shift.pending_export,
        )

    def _leave_entry(self, leave: LeaveRequest, day: date, names: dict) -> CalendarEntry:
        name = resolve_display_name(
            leave.carer,
            names,
            leave.carer_name,
            self.display_policy.leave_fallback_name(),
        )
        start, end = self.display_policy.display_window()
        hours = None
        if leave.hours is not None:
            # Claimed hours are spread evenly over the days of the request
            span = (leave.end_date - leave.start_date).days + 1
            hours = leave.hours / span
        return CalendarEntry(
            id=f"leave-{leave.id}-{day.isoformat()}",
            network_id=leave.network_id,
            carer=leave.carer,
            carer_name=name,
            entry_date=day,
            start_time=start,
            end_time=end,
            kind=leave.kind,
            label=self.display_policy.compose_label(leave.kind, name),
            is_leave_derived=True,
            note=leave.note,
            hours=hours,
        )
