"""Tests for the in-memory store and snapshot loading."""

import json
from datetime import date, time

import pytest

from careshift.domain.errors import (
    StoreError,
    UniqueConstraintViolation,
    UnknownRecurrenceKindError,
)
from careshift.domain.models import (
    DateRange,
    EntityKind,
    LeaveStatus,
    MembershipRole,
    PlaceholderCarer,
    RealCarer,
    RecurrenceKind,
    RecurringEntity,
    ShiftKind,
    ShiftSource,
)
from careshift.recurrence.rollover import rollover_overdue
from careshift.store.memory import InMemoryScheduleStore

SNAPSHOT = {
    "networks": [{"id": "n1", "name": "Smith Family"}],
    "memberships": [
        {"user_id": "u1", "network_id": "n1", "role": "family_admin"},
    ],
    "carers": [{"id": "c1", "name": "Chris"}],
    "placeholder_carers": [{"id": "p1", "name": "Pat"}],
    "shifts": [
        {
            "id": "s1",
            "network_id": "n1",
            "carer_id": "c1",
            "date": "2025-06-10",
            "start_time": "08:00",
            "end_time": "16:00",
            "kind": "holiday",
        },
        {
            "id": "s2",
            "network_id": "n1",
            "carer_id": "c1",
            "placeholder_carer_id": "p1",
            "date": "2025-06-11",
            "start_time": "08:00:00",
            "source": "scheduled",
        },
    ],
    "leave_requests": [
        {
            "id": "L1",
            "network_id": "n1",
            "carer_id": "c1",
            "start_date": "2025-06-12",
            "end_date": "2025-06-13",
            "kind": "sick_leave",
            "status": "approved",
            "hours": 15,
        },
        {
            "id": "L2",
            "network_id": "n1",
            "carer_id": "c1",
            "start_date": "2025-06-14",
            "status": "pending",
        },
    ],
    "recurring": [
        {
            "id": "t1",
            "network_id": "n1",
            "title": "Evening meds",
            "entity_kind": "dose",
            "recurrence": "daily",
            "due_date": "2025-06-10",
        },
    ],
}


class TestSnapshotLoading:
    """Tests for InMemoryScheduleStore.from_dict/from_json."""

    @pytest.fixture
    def store(self):
        return InMemoryScheduleStore.from_dict(SNAPSHOT)

    def test_memberships_named_from_networks(self, store):
        membership = store.fetch_network_memberships("u1")[0]
        assert membership.network_name == "Smith Family"
        assert membership.role == MembershipRole.FAMILY_ADMIN

    def test_shift_kind_aliases(self, store):
        assert store.shifts[0].kind == ShiftKind.ANNUAL_LEAVE
        assert store.shifts[1].kind == ShiftKind.BASIC

    def test_placeholder_wins_over_user_id(self, store):
        assert store.shifts[1].carer == PlaceholderCarer("p1")
        assert store.shifts[1].end_time is None
        assert store.shifts[1].source == ShiftSource.SCHEDULED

    def test_leave_requests(self, store):
        approved = store.fetch_approved_leave("n1", DateRange(date(2025, 6, 9), date(2025, 6, 15)))
        assert [leave.id for leave in approved] == ["L1"]
        assert approved[0].kind == ShiftKind.SICKNESS
        assert store.leave_requests[1].end_date == date(2025, 6, 14)
        assert store.leave_requests[1].status == LeaveStatus.PENDING

    def test_display_names(self, store):
        names = store.fetch_carer_display_names([RealCarer("c1"), PlaceholderCarer("p1"), RealCarer("zz")])
        assert names == {RealCarer("c1"): "Chris", PlaceholderCarer("p1"): "Pat"}

    def test_recurring(self, store):
        entity = store.recurring["t1"]
        assert entity.entity_kind == EntityKind.DOSE
        assert entity.recurrence == RecurrenceKind.DAILY
        assert entity.chain_id == "t1"
        assert store.fetch_overdue_recurring(date(2025, 6, 11)) == [entity]
        assert store.fetch_overdue_recurring(date(2025, 6, 10)) == []

    def test_from_json(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(SNAPSHOT))

        store = InMemoryScheduleStore.from_json(path)

        assert len(store.shifts) == 2
        assert store.shifts[0].start_time == time(8, 0)

    def test_unknown_kind_rejected(self):
        data = {"shifts": [dict(SNAPSHOT["shifts"][0], kind="overtime")]}
        with pytest.raises(ValueError):
            InMemoryScheduleStore.from_dict(data)

    def test_unknown_recurrence_loads_as_daily(self, caplog):
        data = {"recurring": [dict(SNAPSHOT["recurring"][0], recurrence="fortnightly")]}
        with caplog.at_level("WARNING"):
            store = InMemoryScheduleStore.from_dict(data)

        assert store.recurring["t1"].recurrence == RecurrenceKind.DAILY
        assert "fortnightly" in caplog.text

    def test_unknown_recurrence_rejected_when_strict(self):
        data = {"recurring": [dict(SNAPSHOT["recurring"][0], recurrence="fortnightly")]}
        with pytest.raises(UnknownRecurrenceKindError):
            InMemoryScheduleStore.from_dict(data, strict=True)

    def test_unknown_recurrence_strict_from_json(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(
            {"recurring": [dict(SNAPSHOT["recurring"][0], recurrence="hourly")]}
        ))
        with pytest.raises(UnknownRecurrenceKindError):
            InMemoryScheduleStore.from_json(path, strict=True)

    def test_loaded_unknown_recurrence_rolls_over_daily(self):
        data = {"recurring": [dict(
            SNAPSHOT["recurring"][0], recurrence="fortnightly", due_date="2025-06-01"
        )]}
        store = InMemoryScheduleStore.from_dict(data)

        summary = rollover_overdue(store, today=date(2025, 6, 12))

        assert summary.created == 1
        assert summary.created_instances[0].due_date == date(2025, 6, 2)
        assert store.recurring["t1"].archived


class TestRecurringWrites:
    """Tests for recurring instance writes."""

    @pytest.fixture
    def entity(self):
        return RecurringEntity(
            id="t1",
            parent_chain_id=None,
            entity_kind=EntityKind.TASK,
            network_id="n1",
            title="Shopping",
            recurrence=RecurrenceKind.WEEKLY,
            due_date=date(2025, 6, 10),
        )

    def test_unique_chain_and_due_key(self, entity):
        store = InMemoryScheduleStore()
        store.add_recurring(entity)
        clash = RecurringEntity(
            id="t2",
            parent_chain_id="t1",
            entity_kind=EntityKind.TASK,
            network_id="n1",
            title="Shopping",
            due_date=date(2025, 6, 10),
        )

        with pytest.raises(UniqueConstraintViolation) as excinfo:
            store.insert_recurring_instance(clash)

        assert excinfo.value.parent_chain_id == "t1"
        assert excinfo.value.due_key == date(2025, 6, 10)

    def test_update_unknown_instance(self, entity):
        with pytest.raises(StoreError):
            InMemoryScheduleStore().update_recurring_instance(entity)
