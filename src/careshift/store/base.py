"""Interface to the external data store.

The scheduling core performs no I/O of its own. Everything it needs is
read and written through a ScheduleStore, so deployments can back it
with any database that can enforce a uniqueness constraint.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Optional

from careshift.domain.models import (
    CarerIdentity,
    DateRange,
    LeaveRequest,
    NetworkMembership,
    RecurringEntity,
    ShiftEntry,
)


class ScheduleStore(ABC):
    """Abstract base class for the persistence collaborator.

    Fetch methods may raise any exception on failure; callers in the core
    wrap those into UpstreamFetchError. Returning an empty list always
    means there is nothing to return.
    """

    @abstractmethod
    def fetch_shifts(self, network_id: str, date_range: DateRange) -> list[ShiftEntry]:
        """Get shift entries for a network scheduled within a date range."""
        pass

    @abstractmethod
    def fetch_approved_leave(
        self,
        network_id: str,
        date_range: DateRange,
    ) -> list[LeaveRequest]:
        """Get approved leave for a network overlapping a date range."""
        pass

    @abstractmethod
    def fetch_carer_display_names(
        self,
        carers: Iterable[CarerIdentity],
    ) -> dict[CarerIdentity, str]:
        """Get display names for real and placeholder carers.

        Identities the store cannot resolve are simply absent from the
        returned mapping.
        """
        pass

    @abstractmethod
    def fetch_network_memberships(self, caller_id: str) -> list[NetworkMembership]:
        """Get every care network membership of a user."""
        pass

    @abstractmethod
    def insert_recurring_instance(self, entity: RecurringEntity) -> bool:
        """Insert a recurring instance.

        The store must enforce uniqueness on (entity.chain_id,
        entity.due_key) atomically.

        Returns:
            True when the row was written.

        Raises:
            UniqueConstraintViolation: If the chain already has an instance
                with the same due key.
            StoreError: For any other write failure.
        """
        pass

    @abstractmethod
    def fetch_recurring_instance(self, instance_id: str) -> Optional[RecurringEntity]:
        """Get a recurring instance by id, or None if it does not exist."""
        pass

    @abstractmethod
    def update_recurring_instance(self, entity: RecurringEntity) -> None:
        """Persist the completed/archived flags of an existing instance."""
        pass

    @abstractmethod
    def fetch_overdue_recurring(self, today: date) -> list[RecurringEntity]:
        """Get recurring instances that are incomplete, unarchived and due before today."""
        pass
