"""Issue status enumeration"""

import enum
from typing import Union

from .errors import ValidationError


class Status(str, enum.Enum):
    """Label-only issue lifecycle; every transition is allowed"""
    TO_BE_DONE = "To Be Done"
    IN_PROGRESS = "In Progress"
    DONE = "Done"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union["Status", str]) -> "Status":
        """Resolve a status from its literal text"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Invalid status: {value!r}") from None


# Numeric shortcuts accepted by update_issue_field only
STATUS_ALIASES = {
    "1": Status.TO_BE_DONE,
    "2": Status.IN_PROGRESS,
    "3": Status.DONE,
}

DEFAULT_STATUS = Status.TO_BE_DONE


def normalize_status(value: str) -> Status:
    """Resolve a status given either as literal text or as a 1/2/3 alias"""
    alias = STATUS_ALIASES.get(str(value).strip())
    if alias is not None:
        return alias
    return Status.parse(value)
