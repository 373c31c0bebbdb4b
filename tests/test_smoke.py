"""Smoke tests for end-to-end calendar and recurrence flows."""

import json
from datetime import date

import pytest

from careshift.cli import main
from careshift.domain.models import DateRange, RealCarer
from careshift.output.timesheet import build_timesheet
from careshift.recurrence.rollover import complete_instance, rollover_overdue
from careshift.scheduling.aggregator import MultiNetworkAggregator
from careshift.scheduling.reconciler import ShiftReconciler
from careshift.scheduling.windower import CalendarWindower
from careshift.store.memory import InMemoryScheduleStore
from careshift.validation.validator import CalendarValidator

SNAPSHOT = {
    "networks": [
        {"id": "n1", "name": "Smith Family"},
        {"id": "n2", "name": "Jones Family"},
    ],
    "memberships": [
        {"user_id": "c1", "network_id": "n1", "role": "carer"},
        {"user_id": "c1", "network_id": "n2", "role": "carer"},
    ],
    "carers": [{"id": "c1", "name": "Chris"}, {"id": "c2", "name": "Sam"}],
    "placeholder_carers": [{"id": "p1", "name": "Pat"}],
    "shifts": [
        {"id": "s1", "network_id": "n1", "carer_id": "c1", "date": "2025-06-09",
         "start_time": "08:00", "end_time": "16:00", "kind": "basic"},
        {"id": "s2", "network_id": "n1", "carer_id": "c1", "date": "2025-06-10",
         "start_time": "08:00", "end_time": "16:00", "kind": "basic"},
        {"id": "s3", "network_id": "n1", "carer_id": "c2", "date": "2025-06-10",
         "start_time": "16:00", "end_time": "22:00", "kind": "cover"},
        {"id": "s4", "network_id": "n1", "placeholder_carer_id": "p1", "date": "2025-06-12",
         "start_time": "09:00", "end_time": "13:00"},
        {"id": "s5", "network_id": "n2", "carer_id": "c1", "date": "2025-06-10",
         "start_time": "18:00", "end_time": "21:00", "kind": "basic"},
    ],
    "leave_requests": [
        {"id": "L1", "network_id": "n1", "carer_id": "c1", "start_date": "2025-06-10",
         "end_date": "2025-06-10", "kind": "annual_leave", "status": "approved", "hours": 7.5},
    ],
    "recurring": [
        {"id": "t1", "network_id": "n1", "title": "Evening meds", "entity_kind": "dose",
         "recurrence": "daily", "due_date": "2025-06-10"},
        {"id": "t2", "network_id": "n1", "title": "Weekly shop", "entity_kind": "task",
         "recurrence": "weekly", "due_date": "2025-06-05"},
    ],
}


class TestSmoke:
    """End-to-end smoke tests for the scheduling core."""

    @pytest.fixture
    def store(self):
        return InMemoryScheduleStore.from_dict(SNAPSHOT)

    @pytest.fixture
    def week(self):
        return DateRange.week_of(date(2025, 6, 11))

    def test_week_reconciles_and_validates(self, store, week):
        entries = ShiftReconciler(store).shifts_for_window("n1", week)

        assert [e.label for e in entries] == [
            "Basic - Chris",
            "Holiday - Chris",
            "Cover - Sam",
            "Basic - Pat",
        ]
        leave = store.fetch_approved_leave("n1", week)
        assert CalendarValidator().validate(entries, week, leave).is_valid

    def test_paged_view(self, store, week):
        windower = CalendarWindower(week.dates(), page_size=3)
        days = windower.page(1)
        entries = ShiftReconciler(store).shifts_for_window("n1", DateRange(days[0], days[-1]))

        assert [e.id for e in entries] == ["s4"]

    def test_all_networks_for_carer(self, store, week):
        aggregator = MultiNetworkAggregator(ShiftReconciler(store))
        entries = aggregator.aggregated_shifts_for_window("c1", week, RealCarer("c1"))

        # Leave in Smith Family does not hide the Jones Family shift
        assert [(e.id, e.network_name) for e in entries] == [
            ("s1", "Smith Family"),
            ("leave-L1-2025-06-10", "Smith Family"),
            ("s5", "Jones Family"),
        ]

    def test_timesheet_from_reconciled_week(self, store, week):
        entries = ShiftReconciler(store).shifts_for_window("n1", week, RealCarer("c1"))
        sheet = build_timesheet(entries, week.end, weeks=1, network_name="Smith Family")

        assert sheet.carer_name == "Chris"
        assert sheet.total_hours == 15.5

    def test_complete_then_rollover(self, store):
        today = date(2025, 6, 10)
        result = complete_instance(store, store.recurring["t1"], today)
        assert result.created

        summary = rollover_overdue(store, today)

        # Only the weekly shop is overdue; the completed dose is left alone
        assert summary.found == 1
        assert summary.created == 1
        assert summary.created_instances[0].chain_id == "t2"


class TestCli:
    """Smoke tests for the command-line interface."""

    @pytest.fixture
    def snapshot(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(SNAPSHOT))
        return str(path)

    def test_week_command(self, snapshot, capsys):
        code = main(["week", "n1", "--snapshot", snapshot, "--date", "2025-06-11", "--validate"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Holiday - Chris [leave]" in out
        assert "Validation: PASSED" in out

    def test_week_json(self, snapshot, capsys):
        code = main(["week", "n1", "--snapshot", snapshot, "--date", "2025-06-11", "--json"])

        records = json.loads(capsys.readouterr().out)
        assert code == 0
        assert records[0]["display_name"] == "Chris"

    def test_all_networks_command(self, snapshot, capsys):
        code = main(["all-networks", "c1", "--snapshot", snapshot, "--date", "2025-06-11"])

        assert code == 0
        assert "(Jones Family)" in capsys.readouterr().out

    def test_next_command(self, capsys):
        code = main(["next", "weekly", "--due", "2025-06-10", "--today", "2025-06-10"])

        out = capsys.readouterr().out
        assert code == 0
        assert "2025-06-17" in out
        assert "2025-06-16" in out

    def test_rollover_command(self, snapshot, capsys):
        code = main(["rollover", "--snapshot", snapshot, "--today", "2025-06-12"])

        out = capsys.readouterr().out
        assert code == 0
        assert '"overdue_found": 2' in out

    def test_timesheet_command(self, snapshot, capsys):
        code = main([
            "timesheet", "n1", "user:c1",
            "--snapshot", snapshot,
            "--period-ending", "2025-06-15",
            "--weeks", "1",
        ])

        out = capsys.readouterr().out
        assert code == 0
        assert "Employer,Smith Family" in out

    def test_missing_snapshot_is_error(self, capsys, monkeypatch):
        monkeypatch.delenv("CARESHIFT_SNAPSHOT", raising=False)

        code = main(["rollover"])

        assert code == 1
        assert "No snapshot" in capsys.readouterr().err
