"""Tests for weekly timesheets and CSV export."""

import csv
import io
from datetime import date, time

import pytest

from careshift.domain.models import CalendarEntry, RealCarer, ShiftKind
from careshift.output.timesheet import (
    MAX_WEEKLY_HOURS,
    build_timesheet,
    escape_csv_cell,
    timesheet_to_csv,
)

C1 = RealCarer("C1")
C2 = RealCarer("C2")


def _entry(id_, day, start, end, kind=ShiftKind.BASIC, carer=C1, leave=False, hours=None):
    return CalendarEntry(
        id=id_,
        network_id="n1",
        carer=carer,
        carer_name="Chris" if carer == C1 else "Sam",
        entry_date=day,
        start_time=start,
        end_time=end,
        kind=kind,
        label=f"{kind.label} - Chris",
        is_leave_derived=leave,
        hours=hours,
    )


class TestBuildTimesheet:
    """Tests for build_timesheet."""

    @pytest.fixture
    def period_ending(self):
        return date(2025, 6, 29)  # Sunday

    def test_weeks_in_chronological_order(self, period_ending):
        sheet = build_timesheet([], period_ending, weeks=4)

        assert [w.week_ending for w in sheet.weeks] == [
            date(2025, 6, 8),
            date(2025, 6, 15),
            date(2025, 6, 22),
            date(2025, 6, 29),
        ]
        assert sheet.weeks[0].week_starting == date(2025, 6, 2)

    def test_hours_per_kind_and_week(self, period_ending):
        entries = [
            _entry("a", date(2025, 6, 23), time(8, 0), time(16, 0)),
            _entry("b", date(2025, 6, 24), time(8, 0), time(12, 30), ShiftKind.COVER),
            _entry("c", date(2025, 6, 16), time(9, 0), time(17, 0), ShiftKind.SICKNESS),
        ]

        sheet = build_timesheet(entries, period_ending, weeks=2)

        last = sheet.weeks[-1]
        assert last.hours[ShiftKind.BASIC] == 8.0
        assert last.hours[ShiftKind.COVER] == 4.5
        assert sheet.weeks[0].hours[ShiftKind.SICKNESS] == 8.0
        assert sheet.total_hours == 20.5

    def test_leave_hours_override_display_window(self, period_ending):
        entries = [
            _entry("L", date(2025, 6, 25), time(9, 0), time(17, 0), ShiftKind.ANNUAL_LEAVE, leave=True, hours=7.5),
        ]

        sheet = build_timesheet(entries, period_ending, weeks=1)

        assert sheet.totals[ShiftKind.ANNUAL_LEAVE] == 7.5

    def test_training_counts_as_basic(self, period_ending):
        entries = [_entry("t", date(2025, 6, 25), time(9, 0), time(11, 0), ShiftKind.TRAINING)]

        sheet = build_timesheet(entries, period_ending, weeks=1)

        assert sheet.totals[ShiftKind.BASIC] == 2.0

    def test_filters_by_carer_and_period(self, period_ending):
        entries = [
            _entry("mine", date(2025, 6, 25), time(9, 0), time(11, 0)),
            _entry("theirs", date(2025, 6, 25), time(9, 0), time(17, 0), carer=C2),
            _entry("too-early", date(2025, 6, 1), time(9, 0), time(17, 0)),
            _entry("too-late", date(2025, 6, 30), time(9, 0), time(17, 0)),
        ]

        sheet = build_timesheet(entries, period_ending, weeks=4, carer=C1)

        assert sheet.total_hours == 2.0
        assert sheet.carer_name == "Chris"

    def test_over_limit_weeks(self, period_ending):
        entries = [
            _entry(f"e{i}", date(2025, 6, 23), time(0, 0), time(23, 59))
            for i in range(8)
        ]

        sheet = build_timesheet(entries, period_ending, weeks=1)

        assert sheet.weeks[0].total_hours > MAX_WEEKLY_HOURS
        assert sheet.over_limit_weeks() == sheet.weeks

    def test_invalid_week_count(self, period_ending):
        with pytest.raises(ValueError):
            build_timesheet([], period_ending, weeks=0)


class TestCsvExport:
    """Tests for CSV export."""

    def test_formula_cells_escaped(self):
        assert escape_csv_cell("=SUM(A1)") == "'=SUM(A1)"
        assert escape_csv_cell("+44 7700") == "'+44 7700"
        assert escape_csv_cell("-1") == "'-1"
        assert escape_csv_cell("@home") == "'@home"
        assert escape_csv_cell("Chris") == "Chris"
        assert escape_csv_cell(None) == ""

    def test_csv_layout(self):
        entries = [_entry("a", date(2025, 6, 23), time(8, 0), time(16, 0))]
        sheet = build_timesheet(
            entries,
            date(2025, 6, 29),
            weeks=1,
            carer_name="=cmd|' /C calc'!A0",
            network_name="Smith, Family",
        )

        rows = list(csv.reader(io.StringIO(timesheet_to_csv(sheet))))

        assert rows[0] == ["Employee", "'=cmd|' /C calc'!A0"]
        assert rows[1] == ["Employer", "Smith, Family"]
        assert rows[2] == ["Period ending", "2025-06-29"]
        assert rows[3] == []
        assert rows[4] == ["Week ending", "Basic", "Cover", "Sickness", "Holiday", "Public Holiday", "Total"]
        assert rows[5] == ["2025-06-29", "8.00", "0.00", "0.00", "0.00", "0.00", "8.00"]
        assert rows[6][0] == "Total"
        assert rows[6][-1] == "8.00"
