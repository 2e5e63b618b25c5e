"""Model-level validation utilities for data integrity.

Reusable validators that enforce business rules at the ORM level,
regardless of which endpoint or service writes the data.
"""

from decimal import Decimal


def non_negative(key: str, value):
    """Validate that a numeric value is >= 0."""
    if value is not None:
        v = Decimal(str(value)) if not isinstance(value, Decimal) else value
        if v < 0:
            raise ValueError(f"{key} cannot be negative, got {value}")
    return value


def positive(key: str, value):
    """Validate that a numeric value is > 0."""
    if value is not None:
        v = Decimal(str(value)) if not isinstance(value, Decimal) else value
        if v <= 0:
            raise ValueError(f"{key} must be positive, got {value}")
    return value


def day_of_week(key: str, value):
    """Validate a day index, Sunday = 0 through Saturday = 6."""
    if value is not None and not 0 <= int(value) <= 6:
        raise ValueError(f"{key} must be between 0 and 6, got {value}")
    return value
