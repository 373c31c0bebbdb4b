"""Domain models for the care scheduling core.

This module contains the data structures shared by the recurrence and
calendar reconciliation engines: shift entries, leave requests, recurring
entities, carer identities, network memberships and the flat calendar
entries handed to the presentation layer.
"""

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from enum import Enum
from typing import Optional, Union

from careshift.domain.errors import InvalidDateRangeError


class ShiftKind(Enum):
    """Tag describing what a shift (or leave entry) represents."""

    BASIC = "basic"
    COVER = "cover"
    ANNUAL_LEAVE = "annual_leave"
    SICKNESS = "sickness"
    PUBLIC_HOLIDAY = "public_holiday"
    TRAINING = "training"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Union[str, "ShiftKind", None]) -> "ShiftKind":
        """Parse a shift kind, accepting the legacy aliases.

        Args:
            value: Kind string such as "basic" or "holiday". None means basic.

        Raises:
            ValueError: If the value is not a known kind or alias.
        """
        if isinstance(value, cls):
            return value
        if not value:
            return cls.BASIC
        normalized = str(value).strip().lower()
        return cls(_SHIFT_KIND_ALIASES.get(normalized, normalized))

    @property
    def label(self) -> str:
        """Human-readable label used in composite calendar labels."""
        return _SHIFT_KIND_LABELS[self]

    @property
    def is_leave(self) -> bool:
        """Whether this kind represents absence rather than worked time."""
        return self in (
            ShiftKind.ANNUAL_LEAVE,
            ShiftKind.SICKNESS,
            ShiftKind.PUBLIC_HOLIDAY,
        )


_SHIFT_KIND_ALIASES = {
    "holiday": "annual_leave",
    "sick_leave": "sickness",
}

_SHIFT_KIND_LABELS = {
    ShiftKind.BASIC: "Basic",
    ShiftKind.COVER: "Cover",
    ShiftKind.ANNUAL_LEAVE: "Holiday",
    ShiftKind.SICKNESS: "Sickness",
    ShiftKind.PUBLIC_HOLIDAY: "Public Holiday",
    ShiftKind.TRAINING: "Training",
    ShiftKind.OTHER: "Other",
}


class ShiftSource(Enum):
    """Where a shift entry came from."""

    LOGGED = "logged"  # Clocked time entry
    SCHEDULED = "scheduled"  # Generated from a shift assignment


class LeaveStatus(Enum):
    """Approval status of a leave request."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class RecurrenceKind(Enum):
    """How often a recurring entity repeats."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class EntityKind(Enum):
    """The kind of thing a recurring chain generates."""

    TASK = "task"
    DOSE = "dose"
    LEAVE = "leave"


class MembershipRole(Enum):
    """Role of a user within a care network."""

    DISABLED_PERSON = "disabled_person"
    FAMILY_ADMIN = "family_admin"
    FAMILY_VIEWER = "family_viewer"
    CARER = "carer"
    MANAGER = "manager"


@dataclass(frozen=True)
class RealCarer:
    """A carer with a registered user account."""

    id: str

    @property
    def key(self) -> str:
        return f"user:{self.id}"


@dataclass(frozen=True)
class PlaceholderCarer:
    """A carer added before they have an account.

    Placeholders are later linked to a real account by matching email on
    signup. A placeholder and a real carer never compare equal, even when
    their ids coincide.
    """

    id: str

    @property
    def key(self) -> str:
        return f"placeholder:{self.id}"


CarerIdentity = Union[RealCarer, PlaceholderCarer]


def carer_from_ids(
    user_id: Optional[str] = None,
    placeholder_id: Optional[str] = None,
) -> Optional[CarerIdentity]:
    """Build a carer identity from the two nullable columns a row carries.

    A placeholder id wins when both are set, since rows keep the user id
    column empty until the placeholder is linked.
    """
    if placeholder_id:
        return PlaceholderCarer(placeholder_id)
    if user_id:
        return RealCarer(user_id)
    return None


def carer_from_key(key: Optional[str]) -> Optional[CarerIdentity]:
    """Parse a "user:<id>" or "placeholder:<id>" key. Bare ids are real carers."""
    if not key:
        return None
    prefix, sep, ident = key.partition(":")
    if not sep:
        return RealCarer(key)
    if prefix == "placeholder":
        return PlaceholderCarer(ident)
    if prefix == "user":
        return RealCarer(ident)
    raise ValueError(f"Unknown carer key prefix: {prefix!r}")


@dataclass(frozen=True)
class DateRange:
    """An inclusive range of calendar dates.

    Attributes:
        start: First date in the range.
        end: Last date in the range (inclusive).

    Raises:
        InvalidDateRangeError: If end is before start.
    """

    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise InvalidDateRangeError(
                f"Date range end {self.end} is before start {self.start}"
            )

    @classmethod
    def single(cls, day: date) -> "DateRange":
        """A range covering exactly one day."""
        return cls(day, day)

    @classmethod
    def week_of(cls, anchor: date, week_starts_on: int = 0) -> "DateRange":
        """The seven-day week containing anchor.

        Args:
            anchor: Any date in the week.
            week_starts_on: Weekday the week starts on (0 = Monday).
        """
        offset = (anchor.weekday() - week_starts_on) % 7
        start = anchor - timedelta(days=offset)
        return cls(start, start + timedelta(days=6))

    @property
    def num_days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, start: date, end: date) -> bool:
        """Check if the inclusive span [start, end] shares a day with this range."""
        return start <= self.end and self.start <= end

    def dates(self) -> list[date]:
        """List of all dates in the range."""
        return [self.start + timedelta(days=i) for i in range(self.num_days)]


@dataclass
class ShiftEntry:
    """A worked or scheduled shift for one carer on one day.

    Attributes:
        id: Unique identifier of the entry.
        network_id: Care network the shift belongs to.
        carer: Assigned carer, or None for an unassigned shift.
        scheduled_date: Date of the shift.
        start_time: Time of day the shift starts.
        end_time: Time of day the shift ends; None while still clocked in.
        kind: Shift kind tag.
        note: Free-text note.
        pending_export: Whether the entry is waiting for timesheet export.
        source: Whether the entry was logged or generated from a schedule.
        carer_name: Name cached on the row by the store, if any.
    """

    id: str
    network_id: str
    carer: Optional[CarerIdentity]
    scheduled_date: date
    start_time: time
    end_time: Optional[time] = None
    kind: ShiftKind = ShiftKind.BASIC
    note: str = ""
    pending_export: bool = False
    source: ShiftSource = ShiftSource.LOGGED
    carer_name: Optional[str] = None

    @property
    def display_end_time(self) -> time:
        """End time for display; an open shift is treated as zero-length."""
        return self.end_time if self.end_time is not None else self.start_time

    @property
    def duration_minutes(self) -> int:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.display_end_time.hour * 60 + self.display_end_time.minute
        return max(0, end - start)


@dataclass
class LeaveRequest:
    """A request for leave spanning one or more days.

    Attributes:
        id: Unique identifier of the request.
        network_id: Care network the request belongs to.
        carer: Carer requesting leave.
        start_date: First day of leave (inclusive).
        end_date: Last day of leave (inclusive).
        kind: Leave kind (annual leave, sickness, public holiday, cover).
        status: Approval status.
        hours: Hours of leave claimed, if recorded.
        carer_name: Name cached on the row by the store, if any.
        note: Free-text note.
    """

    id: str
    network_id: str
    carer: CarerIdentity
    start_date: date
    end_date: date
    kind: ShiftKind = ShiftKind.ANNUAL_LEAVE
    status: LeaveStatus = LeaveStatus.PENDING
    hours: Optional[float] = None
    carer_name: Optional[str] = None
    note: str = ""

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise InvalidDateRangeError(
                f"Leave request {self.id} ends {self.end_date} "
                f"before it starts {self.start_date}"
            )

    @property
    def is_approved(self) -> bool:
        return self.status == LeaveStatus.APPROVED

    def covers(self, day: date) -> bool:
        """Check if the leave covers a given date."""
        return self.start_date <= day <= self.end_date

    def dates_within(self, date_range: DateRange) -> list[date]:
        """Dates of this leave that fall inside date_range."""
        if not date_range.overlaps(self.start_date, self.end_date):
            return []
        first = max(self.start_date, date_range.start)
        last = min(self.end_date, date_range.end)
        return DateRange(first, last).dates()


@dataclass
class RecurringEntity:
    """One generated instance in a recurring chain (task, dose or leave).

    Attributes:
        id: Identifier of this instance.
        parent_chain_id: Identifier shared by every instance of the chain.
            None on the first instance, whose own id then names the chain.
        entity_kind: What the chain generates.
        network_id: Care network the chain belongs to.
        title: Display title.
        recurrence: How often the chain repeats.
        due_date: When this instance is due, if the chain tracks due dates.
        visible_from: Date before which this instance is hidden from views.
        completed: Whether the instance has been completed.
        archived: Whether the instance has been archived by rollover.
        assigned_to: User the instance is assigned to, if any.
        description: Optional description.
    """

    id: str
    parent_chain_id: Optional[str]
    entity_kind: EntityKind
    network_id: str
    title: str
    recurrence: RecurrenceKind = RecurrenceKind.NONE
    due_date: Optional[date] = None
    visible_from: Optional[date] = None
    completed: bool = False
    archived: bool = False
    assigned_to: Optional[str] = None
    description: str = ""

    @property
    def chain_id(self) -> str:
        """Identity of the chain this instance belongs to."""
        return self.parent_chain_id or self.id

    @property
    def due_key(self) -> Optional[date]:
        """Uniqueness key within the chain: due date, else visible-from."""
        return self.due_date if self.due_date is not None else self.visible_from

    @property
    def is_recurring(self) -> bool:
        return self.recurrence != RecurrenceKind.NONE

    def is_visible(self, today: date) -> bool:
        """Whether the instance should appear in default views on a date."""
        return self.visible_from is None or self.visible_from <= today


@dataclass(frozen=True)
class NetworkMembership:
    """Binds a user to a care network with a role."""

    caller_id: str
    network_id: str
    network_name: str
    role: MembershipRole = MembershipRole.CARER


@dataclass
class CalendarEntry:
    """A single entry in a reconciled calendar view.

    Entries are either real shifts or synthetic entries derived from
    approved leave (is_leave_derived). They flatten to plain records via
    to_record() for any transport the presentation layer chooses.
    """

    id: str
    network_id: str
    carer: Optional[CarerIdentity]
    carer_name: str
    entry_date: date
    start_time: time
    end_time: time
    kind: ShiftKind
    label: str
    is_leave_derived: bool = False
    network_name: str = ""
    note: str = ""
    hours: Optional[float] = None
    pending_export: bool = False

    @property
    def duration_minutes(self) -> int:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return max(0, end - start)

    @property
    def duration_hours(self) -> float:
        """Hours to count for this entry; leave hours win when recorded."""
        if self.is_leave_derived and self.hours is not None:
            return float(self.hours)
        return self.duration_minutes / 60.0

    def to_record(self) -> dict:
        """Flatten to a JSON-serializable dict."""
        return {
            "id": self.id,
            "network_id": self.network_id,
            "network_name": self.network_name,
            "carer_id": self.carer.key if self.carer else None,
            "display_name": self.carer_name,
            "date": self.entry_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "kind": self.kind.value,
            "label": self.label,
            "is_leave_derived": self.is_leave_derived,
            "note": self.note,
            "hours": self.hours,
            "pending_export": self.pending_export,
        }


@dataclass
class CreationResult:
    """Outcome of trying to create the next instance of a recurring chain."""

    created: bool
    reason: str = ""
    instance: Optional[RecurringEntity] = None


@dataclass
class RolloverSummary:
    """Counts reported by a rollover pass over overdue recurring instances."""

    found: int = 0
    archived: int = 0
    created: int = 0
    skipped: int = 0
    created_instances: list[RecurringEntity] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "overdue_found": self.found,
            "archived": self.archived,
            "new_instances_created": self.created,
            "skipped": self.skipped,
        }
