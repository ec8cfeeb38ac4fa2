"""Domain entities and error kinds"""

from .comment import Comment
from .errors import (
    BackendError,
    ConflictError,
    NotFoundError,
    TrackerError,
    ValidationError,
)
from .issue import HydratedIssue, Issue
from .milestone import Milestone
from .status import DEFAULT_STATUS, STATUS_ALIASES, Status, normalize_status
from .tag import Tag
from .user import KNOWN_ROLES, User

__all__ = [
    "BackendError",
    "Comment",
    "ConflictError",
    "DEFAULT_STATUS",
    "HydratedIssue",
    "Issue",
    "KNOWN_ROLES",
    "Milestone",
    "NotFoundError",
    "STATUS_ALIASES",
    "Status",
    "Tag",
    "TrackerError",
    "User",
    "ValidationError",
    "normalize_status",
]
