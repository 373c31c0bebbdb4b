"""Index of approved leave by carer and date."""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from careshift.domain.models import CarerIdentity, DateRange, LeaveRequest


class LeaveOverlapIndex:
    """Approved leave requests indexed by date and carer.

    Only the days of each request that fall inside the indexed window are
    recorded, so lookups cost O(overlap) regardless of request length.

    Example:
        >>> index = LeaveOverlapIndex(leave_requests, window)
        >>> index.is_on_leave(carer, date(2025, 6, 10))
        True
    """

    def __init__(self, leave_requests: Iterable[LeaveRequest], window: DateRange):
        self.window = window
        self._by_date: dict[date, list[LeaveRequest]] = defaultdict(list)
        self._carers_by_date: dict[date, set[CarerIdentity]] = defaultdict(set)

        for leave in leave_requests:
            if not leave.is_approved:
                continue
            for day in leave.dates_within(window):
                self._by_date[day].append(leave)
                self._carers_by_date[day].add(leave.carer)

    def is_on_leave(self, carer: Optional[CarerIdentity], day: date) -> bool:
        """Check if a carer has approved leave covering a date."""
        if carer is None:
            return False
        return carer in self._carers_by_date.get(day, ())

    def carers_on_leave(self, day: date) -> set[CarerIdentity]:
        """Carers with approved leave covering a date."""
        return set(self._carers_by_date.get(day, ()))

    def leave_on(self, day: date) -> list[LeaveRequest]:
        """Approved leave requests covering a date."""
        return list(self._by_date.get(day, ()))

    def covered_days(self) -> list[date]:
        """Dates in the window with at least one approved leave request."""
        return sorted(self._by_date)

    def __len__(self) -> int:
        return sum(len(requests) for requests in self._by_date.values())
