"""Shift reconciliation, aggregation and calendar paging."""

from careshift.scheduling.aggregator import MultiNetworkAggregator, aggregated_sort_key
from careshift.scheduling.leave_index import LeaveOverlapIndex
from careshift.scheduling.reconciler import ShiftReconciler, entry_sort_key
from careshift.scheduling.windower import CalendarWindower, week_days

__all__ = [
    "CalendarWindower",
    "LeaveOverlapIndex",
    "MultiNetworkAggregator",
    "ShiftReconciler",
    "aggregated_sort_key",
    "entry_sort_key",
    "week_days",
]
