"""Weekly timesheet totals and CSV export.

Timesheets group a carer's reconciled calendar entries into weeks ending
on the period-ending weekday and total hours per column kind.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from careshift.domain.models import CalendarEntry, CarerIdentity, ShiftKind

logger = logging.getLogger(__name__)

TIMESHEET_COLUMNS = (
    ShiftKind.BASIC,
    ShiftKind.COVER,
    ShiftKind.SICKNESS,
    ShiftKind.ANNUAL_LEAVE,
    ShiftKind.PUBLIC_HOLIDAY,
)

# Worked time without its own column counts as basic
_COLUMN_FOR_KIND = {
    ShiftKind.TRAINING: ShiftKind.BASIC,
    ShiftKind.OTHER: ShiftKind.BASIC,
}

MAX_WEEKLY_HOURS = 168

_FORMULA_PREFIXES = ("=", "+", "-", "@")


@dataclass
class TimesheetWeek:
    """Hour totals for one week.

    Attributes:
        week_ending: Last date of the week (inclusive).
        hours: Hours per timesheet column kind.
    """

    week_ending: date
    hours: dict[ShiftKind, float] = field(
        default_factory=lambda: {kind: 0.0 for kind in TIMESHEET_COLUMNS}
    )

    @property
    def week_starting(self) -> date:
        return self.week_ending - timedelta(days=6)

    @property
    def total_hours(self) -> float:
        return sum(self.hours.values())

    def contains(self, day: date) -> bool:
        return self.week_starting <= day <= self.week_ending


@dataclass
class Timesheet:
    """A carer's timesheet over consecutive weeks."""

    carer_name: str
    period_ending: date
    weeks: list[TimesheetWeek] = field(default_factory=list)
    network_name: str = ""

    @property
    def totals(self) -> dict[ShiftKind, float]:
        """Hours per column kind across all weeks."""
        totals = {kind: 0.0 for kind in TIMESHEET_COLUMNS}
        for week in self.weeks:
            for kind, hours in week.hours.items():
                totals[kind] += hours
        return totals

    @property
    def total_hours(self) -> float:
        return sum(self.totals.values())

    def over_limit_weeks(self) -> list[TimesheetWeek]:
        """Weeks whose total exceeds the hours in a week."""
        return [w for w in self.weeks if w.total_hours > MAX_WEEKLY_HOURS]


def build_timesheet(
    entries: Iterable[CalendarEntry],
    period_ending: date,
    weeks: int = 4,
    carer: Optional[CarerIdentity] = None,
    carer_name: Optional[str] = None,
    network_name: str = "",
) -> Timesheet:
    """Total hours per week and kind from reconciled calendar entries.

    Args:
        entries: Reconciled entries (already override-filtered).
        period_ending: Last day of the final week.
        weeks: Number of weeks ending at period_ending.
        carer: Only count this carer's entries.
        carer_name: Name printed on the timesheet. Defaults to the first
            matching entry's carer name.
        network_name: Care network printed on the timesheet.

    Raises:
        ValueError: If weeks is less than 1.
    """
    if weeks < 1:
        raise ValueError(f"weeks must be at least 1, got {weeks}")

    sheet_weeks = [
        TimesheetWeek(week_ending=period_ending - timedelta(days=7 * i))
        for i in reversed(range(weeks))
    ]
    first_day = sheet_weeks[0].week_starting

    name = carer_name
    counted = 0
    for entry in entries:
        if carer is not None and entry.carer != carer:
            continue
        if not first_day <= entry.entry_date <= period_ending:
            continue
        if name is None:
            name = entry.carer_name

        column = _COLUMN_FOR_KIND.get(entry.kind, entry.kind)
        week = sheet_weeks[(entry.entry_date - first_day).days // 7]
        week.hours[column] += entry.duration_hours
        counted += 1

    logger.debug("Timesheet for %s: %d entries over %d weeks", name, counted, weeks)
    return Timesheet(
        carer_name=name or "",
        period_ending=period_ending,
        weeks=sheet_weeks,
        network_name=network_name,
    )


def escape_csv_cell(value) -> str:
    """Neutralize spreadsheet formulas in a cell value."""
    text = "" if value is None else str(value)
    if text.startswith(_FORMULA_PREFIXES):
        return "'" + text
    return text


def _format_hours(hours: float) -> str:
    return f"{hours:.2f}"


def timesheet_to_csv(timesheet: Timesheet) -> str:
    """Render a timesheet as CSV text.

    Cells starting with =, +, - or @ are prefixed with a quote so they are
    not evaluated as formulas; the csv module handles quoting of commas,
    quotes and newlines.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["Employee", escape_csv_cell(timesheet.carer_name)])
    writer.writerow(["Employer", escape_csv_cell(timesheet.network_name)])
    writer.writerow(["Period ending", timesheet.period_ending.isoformat()])
    writer.writerow([])

    writer.writerow(["Week ending"] + [kind.label for kind in TIMESHEET_COLUMNS] + ["Total"])
    for week in timesheet.weeks:
        writer.writerow(
            [week.week_ending.isoformat()]
            + [_format_hours(week.hours[kind]) for kind in TIMESHEET_COLUMNS]
            + [_format_hours(week.total_hours)]
        )

    totals = timesheet.totals
    writer.writerow(
        ["Total"]
        + [_format_hours(totals[kind]) for kind in TIMESHEET_COLUMNS]
        + [_format_hours(timesheet.total_hours)]
    )
    return buffer.getvalue()
