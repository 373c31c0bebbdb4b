"""Completion and rollover of recurring instances.

Both paths end in DuplicateGuard, so a chain never gains two instances
for the same period however many times an instance is completed or
rolled over.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Optional

from careshift.domain.models import CreationResult, RecurringEntity, RolloverSummary
from careshift.recurrence.guard import DuplicateGuard, build_next_instance
from careshift.store.base import ScheduleStore

logger = logging.getLogger(__name__)


def complete_instance(
    store: ScheduleStore,
    entity: RecurringEntity,
    today: Optional[date] = None,
    strict: bool = False,
) -> CreationResult:
    """Mark an instance complete and create the next one in its chain.

    Args:
        store: Store holding the chain.
        entity: Instance being completed.
        today: Completion date. Defaults to date.today().
        strict: Reject unknown recurrence kinds.

    Returns:
        The guard's CreationResult. Non-recurring entities, and instances
        the store already holds as completed, return created=False
        without touching the chain.

    Raises:
        StoreError: If the store does not hold the instance.
    """
    today = today or date.today()
    stored = store.fetch_recurring_instance(entity.id)
    if stored is not None and stored.completed:
        logger.info("Instance %s already completed, not creating a successor", entity.id)
        return CreationResult(created=False, reason="instance already completed")

    store.update_recurring_instance(replace(entity, completed=True))

    if not entity.is_recurring:
        return CreationResult(created=False, reason="entity does not recur")

    next_instance = build_next_instance(entity, today, strict)
    return DuplicateGuard(store).try_create_next_instance(next_instance)


def rollover_overdue(
    store: ScheduleStore,
    today: Optional[date] = None,
    strict: bool = False,
) -> RolloverSummary:
    """Archive overdue recurring instances and create their successors.

    An instance is overdue when it recurs, is neither completed nor
    archived, and its due date is before today. It is archived as a
    missed completion and the next instance is requested from the guard.
    A failure on one instance is logged and the pass continues.

    Args:
        store: Store holding the recurring chains.
        today: Date of the pass. Defaults to date.today().
        strict: Reject unknown recurrence kinds.
    """
    today = today or date.today()
    summary = RolloverSummary()
    guard = DuplicateGuard(store)

    overdue = store.fetch_overdue_recurring(today)
    summary.found = len(overdue)
    logger.info("Rollover on %s: %d overdue recurring instances", today, len(overdue))

    for entity in overdue:
        try:
            store.update_recurring_instance(replace(entity, archived=True, completed=True))
        except Exception:
            logger.exception("Failed to archive instance %s", entity.id)
            summary.skipped += 1
            continue
        summary.archived += 1

        try:
            result = guard.try_create_next_instance(build_next_instance(entity, today, strict))
        except Exception:
            logger.exception("Failed to create next instance for %s", entity.id)
            summary.skipped += 1
            continue

        if result.created:
            summary.created += 1
            summary.created_instances.append(result.instance)
        else:
            summary.skipped += 1

    logger.info("Rollover complete: %s", summary.to_dict())
    return summary
