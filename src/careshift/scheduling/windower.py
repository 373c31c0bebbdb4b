"""Paging an ordered run of days for constrained displays.

A portrait tablet shows a week three days at a time. CalendarWindower
slices the week into pages and clamps page indices so navigation can
never step off either end.
"""

from datetime import date, timedelta
from typing import Sequence


def week_days(anchor: date, week_starts_on: int = 0) -> list[date]:
    """The seven dates of the week containing anchor.

    Args:
        anchor: Any date in the week.
        week_starts_on: Weekday the week starts on (0 = Monday).
    """
    start = anchor - timedelta(days=(anchor.weekday() - week_starts_on) % 7)
    return [start + timedelta(days=i) for i in range(7)]


class CalendarWindower:
    """Clamped pagination over an ordered sequence of days.

    The windower holds no navigation state; callers keep the current page
    index and use clamp/next_index/previous_index to move it.

    Example:
        >>> windower = CalendarWindower(week_days(date(2025, 6, 10)), page_size=3)
        >>> windower.total_pages()
        3
        >>> windower.page(5)  # clamps to the last page
        [datetime.date(2025, 6, 15)]
    """

    def __init__(self, days: Sequence[date], page_size: int = 3):
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self.days = list(days)
        self.page_size = page_size

    def total_pages(self) -> int:
        """Number of pages; an empty sequence still has one (empty) page."""
        if not self.days:
            return 1
        return -(-len(self.days) // self.page_size)

    def clamp(self, index: int) -> int:
        """Clamp a page index into [0, total_pages - 1]."""
        return max(0, min(index, self.total_pages() - 1))

    def page(self, index: int) -> list[date]:
        """Days on a page. Out-of-range indices clamp to the first/last page."""
        start = self.clamp(index) * self.page_size
        return self.days[start:start + self.page_size]

    def next_index(self, index: int) -> int:
        return self.clamp(index + 1)

    def previous_index(self, index: int) -> int:
        return self.clamp(index - 1)

    def page_of(self, day: date) -> int:
        """Index of the page containing a day.

        Raises:
            ValueError: If the day is not in the sequence.
        """
        return self.days.index(day) // self.page_size

    def is_first(self, index: int) -> bool:
        return self.clamp(index) == 0

    def is_last(self, index: int) -> bool:
        return self.clamp(index) == self.total_pages() - 1
