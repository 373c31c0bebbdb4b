"""Command-line interface for the careshift scheduling core."""

import argparse
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from careshift.config import Settings, get_settings
from careshift.domain.errors import CareShiftError
from careshift.domain.models import CalendarEntry, DateRange, RecurrenceKind, carer_from_key
from careshift.domain.policies import DefaultLeaveDisplayPolicy
from careshift.output.pdf_generator import PDFGenerator
from careshift.output.text_generator import TextCalendarGenerator
from careshift.output.timesheet import build_timesheet, timesheet_to_csv
from careshift.recurrence.calculator import next_due_date, next_visible_from
from careshift.recurrence.rollover import complete_instance, rollover_overdue
from careshift.scheduling.aggregator import MultiNetworkAggregator
from careshift.scheduling.reconciler import ShiftReconciler
from careshift.scheduling.windower import CalendarWindower
from careshift.store.memory import InMemoryScheduleStore
from careshift.validation.validator import CalendarValidator

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")


def load_store(snapshot: Optional[str], settings: Settings) -> InMemoryScheduleStore:
    """Load the snapshot named on the command line or in settings."""
    path = Path(snapshot) if snapshot else settings.snapshot_path
    if path is None:
        raise CareShiftError("No snapshot given; pass --snapshot or set CARESHIFT_SNAPSHOT")
    return InMemoryScheduleStore.from_json(path, settings.strict_recurrence)


def build_reconciler(store: InMemoryScheduleStore, settings: Settings) -> ShiftReconciler:
    return ShiftReconciler(
        store,
        display_policy=DefaultLeaveDisplayPolicy.from_settings(settings),
    )


def _print_entries(
    entries: list[CalendarEntry],
    date_range: DateRange,
    as_json: bool,
    show_network: bool = False,
) -> None:
    if as_json:
        print(json.dumps([entry.to_record() for entry in entries], indent=2))
    else:
        print(TextCalendarGenerator(show_network=show_network).generate_to_string(
            entries, date_range
        ), end="")


def run_week(args: argparse.Namespace, settings: Settings) -> int:
    """Print the reconciled week for one network."""
    store = load_store(args.snapshot, settings)
    reconciler = build_reconciler(store, settings)
    anchor = args.date or date.today()
    week = DateRange.week_of(anchor, settings.week_starts_on)

    date_range = week
    if args.page is not None:
        windower = CalendarWindower(week.dates(), settings.window_page_size)
        days = windower.page(args.page)
        date_range = DateRange(days[0], days[-1])
        if not args.json:
            print(f"Page {windower.clamp(args.page) + 1} of {windower.total_pages()}")

    carer = carer_from_key(args.carer)
    entries = reconciler.shifts_for_window(args.network, date_range, carer)
    _print_entries(entries, date_range, args.json)

    if args.validate:
        leave = store.fetch_approved_leave(args.network, date_range)
        if carer is not None:
            leave = [request for request in leave if request.carer == carer]
        result = CalendarValidator().validate(entries, date_range, leave)
        if result.is_valid:
            print("\nValidation: PASSED")
        else:
            print(f"\nValidation: FAILED ({len(result.errors)} errors)")
            for error in result.errors[:5]:
                print(f"    - {error}")
        for warning in result.warnings:
            print(f"    ! {warning}")

    if args.pdf:
        PDFGenerator().generate_calendar(entries, date_range, args.pdf, title=args.network)
        print(f"\nPDF written to: {args.pdf}")
    return 0


def run_all_networks(args: argparse.Namespace, settings: Settings) -> int:
    """Print the merged week across every network the caller belongs to."""
    store = load_store(args.snapshot, settings)
    aggregator = MultiNetworkAggregator(build_reconciler(store, settings))
    date_range = DateRange.week_of(args.date or date.today(), settings.week_starts_on)

    entries = aggregator.aggregated_shifts_for_window(
        args.caller, date_range, carer_from_key(args.carer)
    )
    _print_entries(entries, date_range, args.json, show_network=True)
    return 0


def run_next(args: argparse.Namespace, settings: Settings) -> int:
    """Print the next due and visible-from dates for a recurrence kind."""
    today = args.today or date.today()
    strict = args.strict or settings.strict_recurrence
    due = next_due_date(args.due, args.kind, today, strict)
    visible = next_visible_from(args.kind, today, strict)
    print(f"Next due:      {due.isoformat()} ({due.strftime('%a')})")
    print(f"Visible from:  {visible.isoformat()} ({visible.strftime('%a')})")
    return 0


def run_complete(args: argparse.Namespace, settings: Settings) -> int:
    """Complete a recurring instance and report whether a successor was created."""
    store = load_store(args.snapshot, settings)
    entity = store.recurring.get(args.instance)
    if entity is None:
        print(f"Unknown recurring instance: {args.instance}", file=sys.stderr)
        return 1

    result = complete_instance(
        store,
        entity,
        args.today or date.today(),
        settings.strict_recurrence,
    )
    if result.created:
        instance = result.instance
        print(f"Created {instance.id}: due {instance.due_date}, visible from {instance.visible_from}")
    else:
        print(f"No instance created: {result.reason}")
    return 0


def run_rollover(args: argparse.Namespace, settings: Settings) -> int:
    """Archive overdue recurring instances and create their successors."""
    store = load_store(args.snapshot, settings)
    summary = rollover_overdue(store, args.today or date.today(), settings.strict_recurrence)
    print(json.dumps(summary.to_dict(), indent=2))
    for instance in summary.created_instances:
        print(f"  + {instance.title} ({instance.chain_id}) due {instance.due_date}")
    return 0


def run_timesheet(args: argparse.Namespace, settings: Settings) -> int:
    """Print or export a carer's weekly timesheet."""
    store = load_store(args.snapshot, settings)
    reconciler = build_reconciler(store, settings)
    period_ending = args.period_ending or date.today()
    carer = carer_from_key(args.carer)

    if args.weeks < 1:
        raise ValueError(f"--weeks must be at least 1, got {args.weeks}")
    period = DateRange(period_ending - timedelta(days=7 * args.weeks - 1), period_ending)
    entries = reconciler.shifts_for_window(args.network, period, carer)
    network_name = next(
        (m.network_name for m in store.memberships if m.network_id == args.network),
        args.network,
    )
    timesheet = build_timesheet(
        entries,
        period_ending,
        weeks=args.weeks,
        carer=carer,
        network_name=network_name,
    )

    csv_text = timesheet_to_csv(timesheet)
    if args.csv:
        Path(args.csv).write_text(csv_text, encoding="utf-8")
        print(f"CSV written to: {args.csv}")
    else:
        print(csv_text, end="")

    for week in timesheet.over_limit_weeks():
        logger.warning(
            "Week ending %s totals %.2f hours, more than a week holds",
            week.week_ending,
            week.total_hours,
        )

    if args.pdf:
        PDFGenerator().generate_timesheet(timesheet, args.pdf)
        print(f"PDF written to: {args.pdf}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="careshift - Care Scheduling and Recurrence Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s week n1 --snapshot data.json                 Week containing today
  %(prog)s week n1 --date 2025-06-10 --page 1           Middle page of that week
  %(prog)s week n1 --carer user:c1 --validate --pdf week.pdf

  %(prog)s all-networks u1 --snapshot data.json         Every network of user u1

  %(prog)s next weekly --today 2025-06-10               Next weekly dates
  %(prog)s complete t1 --snapshot data.json             Complete instance t1
  %(prog)s rollover --snapshot data.json                Roll over overdue work

  %(prog)s timesheet n1 user:c1 --period-ending 2025-06-29 --csv ts.csv
        """,
    )
    parser.add_argument(
        "--env-file",
        type=str,
        help="Path to a .env file (default: ./.env if present)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_snapshot(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--snapshot", "-s",
            type=str,
            help="JSON snapshot to load (default: $CARESHIFT_SNAPSHOT)",
        )

    # Week command
    week_parser = subparsers.add_parser("week", help="Show the reconciled week for a network")
    week_parser.add_argument("network", help="Care network id")
    add_snapshot(week_parser)
    week_parser.add_argument("--date", "-d", type=_parse_date, help="Any date in the week")
    week_parser.add_argument("--carer", "-c", type=str, help="Carer key (user:ID or placeholder:ID)")
    week_parser.add_argument(
        "--page", "-p",
        type=int,
        help="Show only this page of the week (page size from settings)",
    )
    week_parser.add_argument("--validate", action="store_true", help="Validate the calendar")
    week_parser.add_argument("--pdf", type=str, help="Output PDF file path")
    week_parser.add_argument("--json", action="store_true", help="Print entries as JSON")

    # All-networks command
    all_parser = subparsers.add_parser(
        "all-networks",
        help="Show the merged week across a user's networks",
    )
    all_parser.add_argument("caller", help="User id")
    add_snapshot(all_parser)
    all_parser.add_argument("--date", "-d", type=_parse_date, help="Any date in the week")
    all_parser.add_argument("--carer", "-c", type=str, help="Carer key (user:ID or placeholder:ID)")
    all_parser.add_argument("--json", action="store_true", help="Print entries as JSON")

    # Next command
    next_parser = subparsers.add_parser("next", help="Compute next recurrence dates")
    next_parser.add_argument(
        "kind",
        type=str,
        help=f"Recurrence kind ({', '.join(k.value for k in RecurrenceKind if k != RecurrenceKind.NONE)})",
    )
    next_parser.add_argument("--due", type=_parse_date, help="Current due date")
    next_parser.add_argument("--today", type=_parse_date, help="Reference date (default: today)")
    next_parser.add_argument("--strict", action="store_true", help="Reject unknown kinds")

    # Complete command
    complete_parser = subparsers.add_parser("complete", help="Complete a recurring instance")
    complete_parser.add_argument("instance", help="Recurring instance id")
    add_snapshot(complete_parser)
    complete_parser.add_argument("--today", type=_parse_date, help="Completion date")

    # Rollover command
    rollover_parser = subparsers.add_parser("rollover", help="Roll over overdue recurring work")
    add_snapshot(rollover_parser)
    rollover_parser.add_argument("--today", type=_parse_date, help="Date of the pass")

    # Timesheet command
    timesheet_parser = subparsers.add_parser("timesheet", help="Weekly timesheet for a carer")
    timesheet_parser.add_argument("network", help="Care network id")
    timesheet_parser.add_argument("carer", help="Carer key (user:ID or placeholder:ID)")
    add_snapshot(timesheet_parser)
    timesheet_parser.add_argument(
        "--period-ending",
        type=_parse_date,
        help="Last day of the final week (default: today)",
    )
    timesheet_parser.add_argument(
        "--weeks", "-w",
        type=int,
        default=4,
        help="Number of weeks (default: 4)",
    )
    timesheet_parser.add_argument("--csv", type=str, help="Output CSV file path")
    timesheet_parser.add_argument("--pdf", type=str, help="Output PDF file path")

    args = parser.parse_args(argv)

    try:
        settings = get_settings(args.env_file)
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "week": run_week,
        "all-networks": run_all_networks,
        "next": run_next,
        "complete": run_complete,
        "rollover": run_rollover,
        "timesheet": run_timesheet,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        return command(args, settings)
    except (CareShiftError, ValueError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
