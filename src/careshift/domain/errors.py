"""Exception types raised by the scheduling and recurrence core."""


class CareShiftError(Exception):
    """Base class for all careshift errors."""


class InvalidDateRangeError(CareShiftError, ValueError):
    """A date range whose end falls before its start."""


class UnknownRecurrenceKindError(CareShiftError, ValueError):
    """A recurrence kind that is not recognized (strict mode only)."""


class UpstreamFetchError(CareShiftError):
    """Fetching data from the store failed.

    Raised instead of returning an empty result so callers can tell
    "no shifts" apart from "could not load shifts".
    """

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        detail = f": {message}" if message else ""
        super().__init__(f"{operation} failed{detail}")


class StoreError(CareShiftError):
    """A write to the store failed."""


class UniqueConstraintViolation(StoreError):
    """An insert collided with an existing (parent chain, due key) row."""

    def __init__(self, parent_chain_id: str, due_key):
        self.parent_chain_id = parent_chain_id
        self.due_key = due_key
        super().__init__(
            f"Recurring instance already exists for chain {parent_chain_id} "
            f"at {due_key}"
        )
