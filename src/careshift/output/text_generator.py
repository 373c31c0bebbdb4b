"""Plain-text rendering of reconciled calendars.

Produces the day-by-day listing the CLI prints:
- One section per day in the window, including empty days
- Entry time span, label and network
- A per-kind count summary
"""

from collections import Counter
from pathlib import Path
from typing import Iterable, Union

from careshift.domain.models import CalendarEntry, DateRange


class TextCalendarGenerator:
    """Generates text output for a calendar window."""

    def __init__(self, show_network: bool = False):
        self.show_network = show_network

    def generate(
        self,
        entries: Iterable[CalendarEntry],
        date_range: DateRange,
        output_path: Union[str, Path],
    ) -> str:
        """Generate text output and save to file.

        Returns:
            The generated text content.
        """
        content = self.generate_to_string(entries, date_range)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        entries: Iterable[CalendarEntry],
        date_range: DateRange,
    ) -> str:
        """Generate text output and return as string."""
        entries = list(entries)
        by_day: dict = {}
        for entry in entries:
            by_day.setdefault(entry.entry_date, []).append(entry)

        lines = []
        lines.append("=" * 72)
        lines.append(f"CALENDAR {date_range.start.isoformat()} to {date_range.end.isoformat()}")
        lines.append("=" * 72)

        for day in date_range.dates():
            lines.append("")
            lines.append(day.strftime("%A %d %B %Y"))
            lines.append("-" * 40)
            day_entries = by_day.get(day, [])
            if not day_entries:
                lines.append("  (no shifts)")
                continue
            for entry in day_entries:
                lines.append("  " + self._format_entry(entry))

        lines.append("")
        lines.append(self._summary(entries))
        return "\n".join(lines) + "\n"

    def _format_entry(self, entry: CalendarEntry) -> str:
        span = f"{entry.start_time.strftime('%H:%M')}-{entry.end_time.strftime('%H:%M')}"
        text = f"{span}  {entry.label}"
        if entry.is_leave_derived:
            text += " [leave]"
        if self.show_network and entry.network_name:
            text += f"  ({entry.network_name})"
        return text

    def _summary(self, entries: list[CalendarEntry]) -> str:
        counts = Counter(entry.kind.label for entry in entries)
        if not counts:
            return "Total entries: 0"
        parts = ", ".join(f"{label}: {count}" for label, count in sorted(counts.items()))
        return f"Total entries: {len(entries)} ({parts})"
