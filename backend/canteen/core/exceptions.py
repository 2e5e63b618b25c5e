"""Domain exceptions.

Services raise these; route handlers translate them into HTTP errors.
"""

from decimal import Decimal
from typing import Any, Iterable, Optional


class InvalidTimeFormat(ValueError):
    """Raised when a session time-of-day value cannot be parsed."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid time of day {value!r}, expected HH:MM")


class InvalidStatusTransition(ValueError):
    """Raised when a status is not in the order kind's allowed set."""

    def __init__(self, kind: str, status: str, allowed: Iterable[str]):
        self.kind = kind
        self.status = status
        self.allowed = list(allowed)
        super().__init__(
            f"Status '{status}' is not valid for {kind} orders "
            f"(allowed: {', '.join(self.allowed)})"
        )


class StoreUnavailable(RuntimeError):
    """Raised when a read or write against the record store fails."""


class DuplicateRecord(StoreUnavailable):
    """A write was rejected by a unique or foreign-key constraint."""


class RecordNotFound(LookupError):
    """Raised when a record addressed by id does not exist."""

    def __init__(self, table: str, record_id: Any):
        self.table = table
        self.record_id = record_id
        super().__init__(f"{table} record {record_id} not found")


class DeductionWriteFailure(RuntimeError):
    """The status change was saved but its salary deduction was not.

    The status is not rolled back; ``order`` is the updated order so the
    caller can still report the new state.
    """

    def __init__(
        self,
        order: Any,
        amount: Optional[Decimal],
        cause: Exception,
        previous_status: Optional[str] = None,
    ):
        self.order = order
        self.amount = amount
        self.cause = cause
        self.previous_status = previous_status
        super().__init__(
            f"Status saved but salary deduction of {amount} could not be recorded: {cause}"
        )


class OrderingClosed(RuntimeError):
    """Raised when an order is placed outside its ordering window."""


class AdvanceNoticeRequired(ValueError):
    """Raised when an advance-notice order is placed too late."""

    def __init__(self, min_days: int):
        self.min_days = min_days
        super().__init__(f"Orders must be placed at least {min_days} days in advance")


class InsufficientStockError(Exception):
    """Raised when a stock subtraction would make stock negative."""

    def __init__(self, ingredient_name: str, available: Decimal, needed: Decimal, unit: str):
        self.ingredient_name = ingredient_name
        self.available = available
        self.needed = needed
        self.unit = unit
        super().__init__(
            f"Cannot subtract {needed} {unit} of '{ingredient_name}'. Only {available} {unit} available."
        )


class StatusChangeConflict(RuntimeError):
    """Raised when an order's status kept changing under a status update."""

    def __init__(self, kind: str, order_id: Any, attempts: int):
        self.kind = kind
        self.order_id = order_id
        self.attempts = attempts
        super().__init__(
            f"{kind} order {order_id} was modified concurrently {attempts} times; try again"
        )


class ItemUnavailable(ValueError):
    """Raised when a cart line refers to an item that cannot be ordered."""

    def __init__(self, item_name: str):
        self.item_name = item_name
        super().__init__(f"'{item_name}' is not available")


class SelfDemotionForbidden(PermissionError):
    """Raised when an administrator tries to remove their own admin role."""

    def __init__(self):
        super().__init__("Administrators cannot remove their own admin role")
