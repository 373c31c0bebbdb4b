"""Validation module for verifying reconciled calendars.

This module checks a produced calendar against the invariants every
view relies on: ordering, the leave override rule, unique entry ids and
sane entry times. Calendars can be validated before they are rendered
or exported.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from careshift.domain.models import CalendarEntry, DateRange, LeaveRequest
from careshift.domain.policies import DefaultOverridePolicy, OverridePolicy
from careshift.scheduling.leave_index import LeaveOverlapIndex
from careshift.scheduling.reconciler import entry_sort_key


class ValidationErrorType(Enum):
    """Types of validation errors."""

    OUT_OF_ORDER = "out_of_order"
    SHIFT_DURING_LEAVE = "shift_during_leave"
    DUPLICATE_ENTRY_ID = "duplicate_entry_id"
    END_BEFORE_START = "end_before_start"
    ENTRY_OUTSIDE_WINDOW = "entry_outside_window"
    LEAVE_WITHOUT_REQUEST = "leave_without_request"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    entry_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.entry_id:
            parts.append(f"Entry {self.entry_id}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a calendar."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)


class CalendarValidator:
    """Validates reconciled calendars against the reconciliation invariants.

    Example:
        >>> validator = CalendarValidator()
        >>> result = validator.validate(entries, window, approved_leave)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(
        self,
        override_policy: Optional[OverridePolicy] = None,
        sort_key: Callable[[CalendarEntry], tuple] = entry_sort_key,
    ):
        self.override_policy = override_policy or DefaultOverridePolicy()
        self.sort_key = sort_key

    def validate(
        self,
        entries: list[CalendarEntry],
        date_range: Optional[DateRange] = None,
        leave_requests: Optional[list[LeaveRequest]] = None,
    ) -> ValidationResult:
        """Validate a complete calendar.

        Args:
            entries: Calendar entries in output order.
            date_range: Window the calendar was built for, if known.
            leave_requests: Leave the calendar was built from. When given,
                the override rule and leave-derived entries are checked
                against it.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult(is_valid=True)

        self._validate_ids(entries, result)
        self._validate_times(entries, result)
        self._validate_order(entries, result)

        if date_range is not None:
            for entry in entries:
                if not date_range.contains(entry.entry_date):
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.ENTRY_OUTSIDE_WINDOW,
                            message=f"Entry on {entry.entry_date} is outside {date_range.start}..{date_range.end}",
                            entry_id=entry.id,
                        )
                    )

        if leave_requests is not None and date_range is not None:
            self._validate_override(entries, date_range, leave_requests, result)

        return result

    def _validate_ids(self, entries: list[CalendarEntry], result: ValidationResult) -> None:
        seen = set()
        for entry in entries:
            key = (entry.network_id, entry.id)
            if key in seen:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_ENTRY_ID,
                        message="Entry id appears more than once",
                        entry_id=entry.id,
                    )
                )
            seen.add(key)

    def _validate_times(self, entries: list[CalendarEntry], result: ValidationResult) -> None:
        for entry in entries:
            if entry.end_time < entry.start_time:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.END_BEFORE_START,
                        message=(
                            f"Ends {entry.end_time.strftime('%H:%M')} before it starts "
                            f"{entry.start_time.strftime('%H:%M')}"
                        ),
                        entry_id=entry.id,
                    )
                )
            elif entry.start_time == entry.end_time and not entry.is_leave_derived:
                result.add_warning(f"Entry {entry.id} has zero duration (no end time)")

    def _validate_order(self, entries: list[CalendarEntry], result: ValidationResult) -> None:
        for previous, current in zip(entries, entries[1:]):
            if self.sort_key(current) < self.sort_key(previous):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.OUT_OF_ORDER,
                        message=f"Entry sorts before preceding entry {previous.id}",
                        entry_id=current.id,
                    )
                )

    def _validate_override(
        self,
        entries: list[CalendarEntry],
        date_range: DateRange,
        leave_requests: list[LeaveRequest],
        result: ValidationResult,
    ) -> None:
        """Check no suppressible shift shows on a day its carer is on leave."""
        index = LeaveOverlapIndex(leave_requests, date_range)
        for entry in entries:
            on_leave = index.is_on_leave(entry.carer, entry.entry_date)
            if entry.is_leave_derived:
                if not on_leave:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.LEAVE_WITHOUT_REQUEST,
                            message=f"Leave entry on {entry.entry_date} has no approved request",
                            entry_id=entry.id,
                        )
                    )
            elif on_leave and self.override_policy.is_suppressible(entry.kind):
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.SHIFT_DURING_LEAVE,
                        message=(
                            f"{entry.kind.value} shift for {entry.carer_name} on "
                            f"{entry.entry_date} overlaps approved leave"
                        ),
                        entry_id=entry.id,
                    )
                )
