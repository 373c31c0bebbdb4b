"""At-most-once generation of the next instance in a recurring chain.

Completing the same instance twice, from two clients at once, must not
create two copies of the next instance. The guarantee comes from the
store's uniqueness constraint on (parent chain, due key): the guard
simply attempts the insert and reads a constraint violation as "already
created". There is no separate existence check to race against.
"""

import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Callable, Optional

from careshift.domain.errors import UniqueConstraintViolation
from careshift.domain.models import CreationResult, RecurringEntity
from careshift.recurrence.calculator import next_due_date, next_visible_from
from careshift.store.base import ScheduleStore

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def build_next_instance(
    entity: RecurringEntity,
    today: Optional[date] = None,
    strict: bool = False,
    id_factory: Callable[[], str] = _new_id,
) -> RecurringEntity:
    """Derive the next instance of a recurring chain.

    The due date is only advanced for chains that track due dates, so the
    due key of a dateless chain is its next visible-from date.

    Args:
        entity: The instance being completed or rolled over.
        today: Reference date for visible-from. Defaults to date.today().
        strict: Reject unknown recurrence kinds.
        id_factory: Callable returning a fresh instance id.

    Raises:
        ValueError: If the entity does not recur.
    """
    today = today or date.today()
    due = (
        next_due_date(entity.due_date, entity.recurrence, today, strict)
        if entity.due_date is not None
        else None
    )
    return replace(
        entity,
        id=id_factory(),
        parent_chain_id=entity.chain_id,
        due_date=due,
        visible_from=next_visible_from(entity.recurrence, today, strict),
        completed=False,
        archived=False,
    )


class DuplicateGuard:
    """Creates next instances through the store's uniqueness constraint.

    Example:
        >>> guard = DuplicateGuard(store)
        >>> result = guard.try_create_next_instance(next_instance)
        >>> if not result.created:
        ...     print(result.reason)
    """

    def __init__(self, store: ScheduleStore):
        self.store = store

    def try_create_next_instance(self, instance: RecurringEntity) -> CreationResult:
        """Insert instance unless its chain already has one at the same due key.

        Args:
            instance: Fully built next instance (see build_next_instance).

        Returns:
            CreationResult with created=True and the instance, or
            created=False and a reason when the instance already exists.

        Raises:
            StoreError: For store failures other than the uniqueness conflict.
        """
        try:
            self.store.insert_recurring_instance(instance)
        except UniqueConstraintViolation:
            reason = (
                f"instance already exists for chain {instance.chain_id} "
                f"at {instance.due_key}"
            )
            logger.info("Skipped creating next instance: %s", reason)
            return CreationResult(created=False, reason=reason)

        logger.info(
            "Created instance %s for chain %s at %s",
            instance.id,
            instance.chain_id,
            instance.due_key,
        )
        return CreationResult(created=True, reason="created", instance=instance)
