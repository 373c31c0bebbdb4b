"""Policy definitions for calendar reconciliation rules.

This module contains configurable policies that decide which shifts
approved leave overrides and how leave and carer names are displayed.
Policies are kept separate from the reconciler to allow independent
testing and easy modification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import time
from typing import Optional

from careshift.domain.models import ShiftKind

UNASSIGNED_NAME = "Unassigned"
UNKNOWN_NAME = "Unknown"


class OverridePolicy(ABC):
    """Abstract base class for the leave override rule."""

    @abstractmethod
    def is_suppressible(self, kind: ShiftKind) -> bool:
        """Check if a shift of this kind is hidden by approved leave.

        Args:
            kind: Kind of the shift on a day the carer is on leave.

        Returns:
            True if the shift should be replaced by the leave entry.
        """
        pass


class LeaveDisplayPolicy(ABC):
    """Abstract base class for how leave and carers are displayed."""

    @abstractmethod
    def display_window(self) -> tuple[time, time]:
        """Get the (start, end) time of day used to render a leave day."""
        pass

    @abstractmethod
    def kind_label(self, kind: ShiftKind) -> str:
        """Get the label prefix for an entry kind (e.g. "Holiday")."""
        pass

    @abstractmethod
    def shift_fallback_name(self) -> str:
        """Name shown for a shift whose carer cannot be resolved."""
        pass

    @abstractmethod
    def leave_fallback_name(self) -> str:
        """Name shown for a leave request whose carer cannot be resolved."""
        pass

    def compose_label(self, kind: ShiftKind, carer_name: str) -> str:
        """Build the "<KindLabel> - <CarerName>" label for an entry."""
        return f"{self.kind_label(kind)} - {carer_name}"


@dataclass
class DefaultOverridePolicy(OverridePolicy):
    """Default override policy implementation.

    Only plain basic shifts are replaced by approved leave. Cover,
    sickness and other tagged shifts are authoritative records entered by
    an admin and stay visible alongside a parallel leave approval.
    """

    suppressible_kinds: frozenset = field(
        default_factory=lambda: frozenset({ShiftKind.BASIC})
    )

    def is_suppressible(self, kind: ShiftKind) -> bool:
        return kind in self.suppressible_kinds


@dataclass
class DefaultLeaveDisplayPolicy(LeaveDisplayPolicy):
    """Default leave display policy implementation.

    Leave days are shown 09:00-17:00. Labels follow ShiftKind.label, with
    optional per-kind overrides.
    """

    window_start: time = time(9, 0)
    window_end: time = time(17, 0)
    label_overrides: dict[ShiftKind, str] = field(default_factory=dict)
    unassigned_name: str = UNASSIGNED_NAME
    unknown_name: str = UNKNOWN_NAME

    @classmethod
    def from_settings(cls, settings) -> "DefaultLeaveDisplayPolicy":
        """Create a policy from careshift.config.Settings."""
        return cls(
            window_start=settings.leave_display_start,
            window_end=settings.leave_display_end,
        )

    def display_window(self) -> tuple[time, time]:
        return (self.window_start, self.window_end)

    def kind_label(self, kind: ShiftKind) -> str:
        return self.label_overrides.get(kind, kind.label)

    def shift_fallback_name(self) -> str:
        return self.unassigned_name

    def leave_fallback_name(self) -> str:
        return self.unknown_name


def resolve_display_name(
    carer,
    directory: dict,
    cached_name: Optional[str],
    fallback: str,
) -> str:
    """Resolve a carer's display name.

    Order: the directory name for the identity (real profile or
    placeholder record), then the name cached on the row, then fallback.
    An unresolved identity degrades to the fallback and never raises.

    Args:
        carer: RealCarer, PlaceholderCarer or None.
        directory: Mapping of carer identity to display name.
        cached_name: Name already carried by the source row, if any.
        fallback: Name to use when nothing else is known.
    """
    if carer is not None:
        name = directory.get(carer)
        if name:
            return name
    if cached_name:
        return cached_name
    return fallback
