"""Shared invariant checks for entity constructors and mutators"""

from typing import Optional

from .errors import ValidationError


def require_text(value, field: str) -> str:
    """Return value if it is a non-empty string"""
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field} must not be empty")
    return value


def require_timestamp(value, field: str = "timestamp") -> int:
    """Epoch milliseconds; 0 means unknown"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    if value < 0:
        raise ValidationError(f"{field} must be >= 0 but was {value}")
    return value


def require_non_negative_id(value, field: str = "id") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    if value < 0:
        raise ValidationError(f"{field} must be >= 0 but was {value}")
    return value


def require_positive_id(value, field: str = "id") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    if value <= 0:
        raise ValidationError(f"{field} must be > 0 but was {value}")
    return value


def optional_entity_id(value, field: str = "id") -> Optional[int]:
    """Normalise an issue/milestone id: None or 0 mean "not persisted yet"."""
    if value is None:
        return None
    value = require_non_negative_id(value, field)
    return value or None
