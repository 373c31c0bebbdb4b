"""Domain models, errors and display rules for care scheduling."""

from careshift.domain.errors import (
    CareShiftError,
    InvalidDateRangeError,
    StoreError,
    UniqueConstraintViolation,
    UnknownRecurrenceKindError,
    UpstreamFetchError,
)
from careshift.domain.models import (
    CalendarEntry,
    CarerIdentity,
    CreationResult,
    DateRange,
    EntityKind,
    LeaveRequest,
    LeaveStatus,
    MembershipRole,
    NetworkMembership,
    PlaceholderCarer,
    RealCarer,
    RecurrenceKind,
    RecurringEntity,
    RolloverSummary,
    ShiftEntry,
    ShiftKind,
    ShiftSource,
    carer_from_ids,
    carer_from_key,
)
from careshift.domain.policies import (
    DefaultLeaveDisplayPolicy,
    DefaultOverridePolicy,
    LeaveDisplayPolicy,
    OverridePolicy,
    resolve_display_name,
)

__all__ = [
    # Models
    "CalendarEntry",
    "CarerIdentity",
    "CreationResult",
    "DateRange",
    "EntityKind",
    "LeaveRequest",
    "LeaveStatus",
    "MembershipRole",
    "NetworkMembership",
    "PlaceholderCarer",
    "RealCarer",
    "RecurrenceKind",
    "RecurringEntity",
    "RolloverSummary",
    "ShiftEntry",
    "ShiftKind",
    "ShiftSource",
    "carer_from_ids",
    "carer_from_key",
    # Errors
    "CareShiftError",
    "InvalidDateRangeError",
    "StoreError",
    "UniqueConstraintViolation",
    "UnknownRecurrenceKindError",
    "UpstreamFetchError",
    # Policies
    "DefaultLeaveDisplayPolicy",
    "DefaultOverridePolicy",
    "LeaveDisplayPolicy",
    "OverridePolicy",
    "resolve_display_name",
]
