"""Calendar view across every care network a user belongs to."""

import logging
from dataclasses import replace
from typing import Optional

from careshift.domain.models import CalendarEntry, CarerIdentity, DateRange
from careshift.scheduling.reconciler import ShiftReconciler, fetch_or_raise

logger = logging.getLogger(__name__)


def aggregated_sort_key(entry: CalendarEntry) -> tuple:
    """Ordering key: date, start time, carer name, network name, then id."""
    return (
        entry.entry_date,
        entry.start_time,
        entry.carer_name,
        entry.network_name,
        entry.network_id,
        entry.id,
    )


class MultiNetworkAggregator:
    """Runs the reconciler for each of a caller's networks and merges results.

    Override logic stays per network: leave approved in one network never
    hides a shift in another.

    Example:
        >>> aggregator = MultiNetworkAggregator(ShiftReconciler(store))
        >>> entries = aggregator.aggregated_shifts_for_window("u1", window)
    """

    def __init__(self, reconciler: ShiftReconciler):
        self.reconciler = reconciler

    @property
    def store(self):
        return self.reconciler.store

    def aggregated_shifts_for_window(
        self,
        caller_id: str,
        date_range: DateRange,
        carer_filter: Optional[CarerIdentity] = None,
    ) -> list[CalendarEntry]:
        """Get reconciled entries from all of the caller's networks.

        Args:
            caller_id: User whose memberships decide the networks.
            date_range: Inclusive window of dates.
            carer_filter: Only include this carer's shifts and leave.

        Returns:
            Entries tagged with network id and name, ordered by date,
            start time, carer name and network name.

        Raises:
            UpstreamFetchError: If memberships or any network's data fail
                to load. No partial result is returned.
        """
        memberships = fetch_or_raise(
            "fetch_network_memberships",
            self.store.fetch_network_memberships,
            caller_id,
        )

        seen = set()
        entries = []
        for membership in memberships:
            if membership.network_id in seen:
                continue
            seen.add(membership.network_id)

            network_entries = self.reconciler.shifts_for_window(
                membership.network_id, date_range, carer_filter
            )
            entries.extend(
                replace(
                    entry,
                    network_id=membership.network_id,
                    network_name=membership.network_name,
                )
                for entry in network_entries
            )

        entries.sort(key=aggregated_sort_key)
        logger.debug(
            "Aggregated %d entries across %d networks for %s",
            len(entries),
            len(seen),
            caller_id,
        )
        return entries
