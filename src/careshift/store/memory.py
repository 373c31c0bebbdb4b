"""In-memory ScheduleStore, loadable from a JSON snapshot.

Used by the CLI and the test suite. The uniqueness constraint on
(parent chain, due key) is enforced under a lock, so concurrent inserts
behave like a database unique index.
"""

import json
import logging
import threading
from dataclasses import replace
from datetime import date, time
from pathlib import Path
from typing import Iterable, Optional, Union

from careshift.domain.errors import StoreError, UniqueConstraintViolation
from careshift.domain.models import (
    CarerIdentity,
    DateRange,
    EntityKind,
    LeaveRequest,
    LeaveStatus,
    MembershipRole,
    NetworkMembership,
    PlaceholderCarer,
    RealCarer,
    RecurringEntity,
    ShiftEntry,
    ShiftKind,
    ShiftSource,
    carer_from_ids,
)
from careshift.recurrence.calculator import resolve_kind
from careshift.store.base import ScheduleStore

logger = logging.getLogger(__name__)


class InMemoryScheduleStore(ScheduleStore):
    """ScheduleStore backed by plain Python collections.

    Example:
        >>> store = InMemoryScheduleStore.from_json("snapshot.json")
        >>> store.fetch_shifts("n1", DateRange(date(2025, 6, 9), date(2025, 6, 15)))
    """

    def __init__(self):
        self.shifts: list[ShiftEntry] = []
        self.leave_requests: list[LeaveRequest] = []
        self.display_names: dict[CarerIdentity, str] = {}
        self.memberships: list[NetworkMembership] = []
        self.recurring: dict[str, RecurringEntity] = {}
        self._unique_keys: set[tuple[str, Optional[date]]] = set()
        self._lock = threading.Lock()

    # Population

    def add_shift(self, shift: ShiftEntry) -> None:
        self.shifts.append(shift)

    def add_leave(self, leave: LeaveRequest) -> None:
        self.leave_requests.append(leave)

    def add_display_name(self, carer: CarerIdentity, name: str) -> None:
        self.display_names[carer] = name

    def add_membership(self, membership: NetworkMembership) -> None:
        self.memberships.append(membership)

    def add_recurring(self, entity: RecurringEntity) -> None:
        """Seed an existing instance, registering its uniqueness key."""
        with self._lock:
            self.recurring[entity.id] = entity
            self._unique_keys.add((entity.chain_id, entity.due_key))

    # ScheduleStore

    def fetch_shifts(self, network_id: str, date_range: DateRange) -> list[ShiftEntry]:
        return [
            s for s in self.shifts
            if s.network_id == network_id and date_range.contains(s.scheduled_date)
        ]

    def fetch_approved_leave(
        self,
        network_id: str,
        date_range: DateRange,
    ) -> list[LeaveRequest]:
        return [
            leave for leave in self.leave_requests
            if leave.network_id == network_id
            and leave.is_approved
            and date_range.overlaps(leave.start_date, leave.end_date)
        ]

    def fetch_carer_display_names(
        self,
        carers: Iterable[CarerIdentity],
    ) -> dict[CarerIdentity, str]:
        return {c: self.display_names[c] for c in carers if c in self.display_names}

    def fetch_network_memberships(self, caller_id: str) -> list[NetworkMembership]:
        return [m for m in self.memberships if m.caller_id == caller_id]

    def insert_recurring_instance(self, entity: RecurringEntity) -> bool:
        key = (entity.chain_id, entity.due_key)
        with self._lock:
            if entity.id in self.recurring:
                raise StoreError(f"Recurring instance id {entity.id} already used")
            if key in self._unique_keys:
                raise UniqueConstraintViolation(entity.chain_id, entity.due_key)
            self._unique_keys.add(key)
            self.recurring[entity.id] = entity
        logger.debug("Inserted recurring instance %s for chain %s", entity.id, entity.chain_id)
        return True

    def fetch_recurring_instance(self, instance_id: str) -> Optional[RecurringEntity]:
        with self._lock:
            entity = self.recurring.get(instance_id)
            return replace(entity) if entity is not None else None

    def update_recurring_instance(self, entity: RecurringEntity) -> None:
        with self._lock:
            if entity.id not in self.recurring:
                raise StoreError(f"Unknown recurring instance {entity.id}")
            self.recurring[entity.id] = replace(entity)

    def fetch_overdue_recurring(self, today: date) -> list[RecurringEntity]:
        return [
            e for e in self.recurring.values()
            if e.is_recurring
            and not e.completed
            and not e.archived
            and e.due_date is not None
            and e.due_date < today
        ]

    def instances_for_chain(self, chain_id: str) -> list[RecurringEntity]:
        """All instances of a chain, ordered by due key."""
        instances = [e for e in self.recurring.values() if e.chain_id == chain_id]
        return sorted(instances, key=lambda e: (e.due_key or date.min, e.id))

    # Snapshot loading

    @classmethod
    def from_json(
        cls,
        path: Union[str, Path],
        strict: bool = False,
    ) -> "InMemoryScheduleStore":
        """Load a store from a JSON snapshot file."""
        with Path(path).open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return cls.from_dict(data, strict)

    @classmethod
    def from_dict(cls, data: dict, strict: bool = False) -> "InMemoryScheduleStore":
        """Load a store from a snapshot dict.

        Expected keys (all optional): networks, memberships, carers,
        placeholder_carers, shifts, leave_requests, recurring.

        Args:
            data: Parsed snapshot.
            strict: Reject unknown recurrence kinds instead of treating
                them as daily.

        Raises:
            ValueError: If a record is malformed.
            UnknownRecurrenceKindError: If strict and a recurring row has
                an unknown recurrence kind.
        """
        store = cls()
        network_names = {n["id"]: n.get("name", n["id"]) for n in data.get("networks", [])}

        for row in data.get("memberships", []):
            network_id = row["network_id"]
            store.add_membership(NetworkMembership(
                caller_id=row["user_id"],
                network_id=network_id,
                network_name=row.get("network_name") or network_names.get(network_id, network_id),
                role=MembershipRole(row.get("role", "carer")),
            ))

        for row in data.get("carers", []):
            store.add_display_name(RealCarer(row["id"]), row["name"])
        for row in data.get("placeholder_carers", []):
            store.add_display_name(PlaceholderCarer(row["id"]), row["name"])

        for row in data.get("shifts", []):
            store.add_shift(ShiftEntry(
                id=str(row["id"]),
                network_id=row["network_id"],
                carer=carer_from_ids(row.get("carer_id"), row.get("placeholder_carer_id")),
                scheduled_date=_parse_date(row["date"]),
                start_time=_parse_time(row["start_time"]),
                end_time=_parse_time(row["end_time"]) if row.get("end_time") else None,
                kind=ShiftKind.parse(row.get("kind")),
                note=row.get("note") or "",
                pending_export=bool(row.get("pending_export", False)),
                source=ShiftSource(row.get("source", "logged")),
                carer_name=row.get("carer_name"),
            ))

        for row in data.get("leave_requests", []):
            carer = carer_from_ids(row.get("carer_id"), row.get("placeholder_carer_id"))
            if carer is None:
                raise ValueError(f"Leave request {row.get('id')} has no carer")
            start = _parse_date(row["start_date"])
            store.add_leave(LeaveRequest(
                id=str(row["id"]),
                network_id=row["network_id"],
                carer=carer,
                start_date=start,
                end_date=_parse_date(row["end_date"]) if row.get("end_date") else start,
                kind=ShiftKind.parse(row.get("kind", "annual_leave")),
                status=LeaveStatus(row.get("status", "pending")),
                hours=row.get("hours"),
                carer_name=row.get("carer_name"),
                note=row.get("note") or "",
            ))

        for row in data.get("recurring", []):
            store.add_recurring(RecurringEntity(
                id=str(row["id"]),
                parent_chain_id=row.get("parent_id"),
                entity_kind=EntityKind(row.get("entity_kind", "task")),
                network_id=row["network_id"],
                title=row.get("title", ""),
                recurrence=resolve_kind(row.get("recurrence") or "none", strict),
                due_date=_parse_date(row["due_date"]) if row.get("due_date") else None,
                visible_from=(
                    _parse_date(row["visible_from"]) if row.get("visible_from") else None
                ),
                completed=bool(row.get("completed", False)),
                archived=bool(row.get("archived", False)),
                assigned_to=row.get("assigned_to"),
                description=row.get("description") or "",
            ))

        logger.info(
            "Loaded snapshot: %d shifts, %d leave requests, %d memberships, %d recurring",
            len(store.shifts),
            len(store.leave_requests),
            len(store.memberships),
            len(store.recurring),
        )
        return store


def _parse_date(value: str) -> date:
    return date.fromisoformat(value)


def _parse_time(value: str) -> time:
    parts = value.split(":")
    return time(int(parts[0]), int(parts[1]))
