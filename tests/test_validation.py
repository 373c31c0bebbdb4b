"""Tests for calendar validation."""

from dataclasses import replace
from datetime import date, time

import pytest

from careshift.domain.models import (
    CalendarEntry,
    DateRange,
    LeaveRequest,
    LeaveStatus,
    RealCarer,
    ShiftEntry,
    ShiftKind,
)
from careshift.scheduling.reconciler import ShiftReconciler
from careshift.store.memory import InMemoryScheduleStore
from careshift.validation.validator import CalendarValidator, ValidationErrorType

C1 = RealCarer("C1")


class TestCalendarValidator:
    """Tests for CalendarValidator."""

    @pytest.fixture
    def validator(self):
        """Create a validator with default policies."""
        return CalendarValidator()

    @pytest.fixture
    def week(self):
        return DateRange(date(2025, 6, 9), date(2025, 6, 15))

    @pytest.fixture
    def leave(self):
        return [
            LeaveRequest(
                id="L1",
                network_id="n1",
                carer=C1,
                start_date=date(2025, 6, 10),
                end_date=date(2025, 6, 10),
                status=LeaveStatus.APPROVED,
            )
        ]

    @pytest.fixture
    def basic_entry(self):
        return CalendarEntry(
            id="s1",
            network_id="n1",
            carer=C1,
            carer_name="C1",
            entry_date=date(2025, 6, 9),
            start_time=time(8, 0),
            end_time=time(16, 0),
            kind=ShiftKind.BASIC,
            label="Basic - C1",
        )

    def test_reconciled_calendar_is_valid(self, validator, week, leave):
        store = InMemoryScheduleStore()
        store.add_display_name(C1, "C1")
        for i, day in enumerate(week.dates()):
            store.add_shift(ShiftEntry(
                id=f"s{i}",
                network_id="n1",
                carer=C1,
                scheduled_date=day,
                start_time=time(8, 0),
                end_time=time(16, 0),
            ))
        for request in leave:
            store.add_leave(request)

        entries = ShiftReconciler(store).shifts_for_window("n1", week)
        result = validator.validate(entries, week, leave)

        assert result.is_valid, [str(e) for e in result.errors]
        assert len(entries) == 7

    def test_out_of_order_detected(self, validator, basic_entry):
        later = replace(basic_entry, id="s2", entry_date=date(2025, 6, 10))

        result = validator.validate([later, basic_entry])

        assert not result.is_valid
        assert result.errors[0].error_type == ValidationErrorType.OUT_OF_ORDER

    def test_shift_during_leave_detected(self, validator, week, leave, basic_entry):
        on_leave_day = replace(basic_entry, entry_date=date(2025, 6, 10))

        result = validator.validate([on_leave_day], week, leave)

        assert not result.is_valid
        assert result.errors[0].error_type == ValidationErrorType.SHIFT_DURING_LEAVE

    def test_cover_shift_during_leave_allowed(self, validator, week, leave, basic_entry):
        cover = replace(basic_entry, entry_date=date(2025, 6, 10), kind=ShiftKind.COVER)

        result = validator.validate([cover], week, leave)

        assert result.is_valid

    def test_leave_entry_without_request_detected(self, validator, week, basic_entry):
        leave_entry = replace(
            basic_entry,
            id="leave-L9-2025-06-09",
            kind=ShiftKind.ANNUAL_LEAVE,
            is_leave_derived=True,
        )

        result = validator.validate([leave_entry], week, [])

        assert result.errors[0].error_type == ValidationErrorType.LEAVE_WITHOUT_REQUEST

    def test_duplicate_ids_detected(self, validator, basic_entry):
        result = validator.validate([basic_entry, basic_entry])

        assert any(e.error_type == ValidationErrorType.DUPLICATE_ENTRY_ID for e in result.errors)

    def test_same_id_in_different_networks_allowed(self, validator, basic_entry):
        other = replace(basic_entry, network_id="n2")

        result = validator.validate([basic_entry, other])

        assert result.is_valid

    def test_end_before_start_detected(self, validator, basic_entry):
        bad = replace(basic_entry, start_time=time(16, 0), end_time=time(8, 0))

        result = validator.validate([bad])

        assert result.errors[0].error_type == ValidationErrorType.END_BEFORE_START

    def test_zero_duration_is_warning(self, validator, basic_entry):
        open_shift = replace(basic_entry, end_time=basic_entry.start_time)

        result = validator.validate([open_shift])

        assert result.is_valid
        assert len(result.warnings) == 1

    def test_entry_outside_window_detected(self, validator, week, basic_entry):
        outside = replace(basic_entry, entry_date=date(2025, 6, 20))

        result = validator.validate([outside], week)

        assert result.errors[0].error_type == ValidationErrorType.ENTRY_OUTSIDE_WINDOW

    def test_error_string_includes_type_and_entry(self, validator, basic_entry):
        result = validator.validate([basic_entry, basic_entry])

        text = str(result.errors[0])
        assert "[duplicate_entry_id]" in text
        assert "Entry s1:" in text
