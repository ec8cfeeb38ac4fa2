"""SQLAlchemy row models for the relational backend"""

from .base import Base, NO_DESCRIPTION
from .issue import IssueRow
from .comment import CommentRow
from .tag import IssueTagRow
from .user import UserRow
from .milestone import MilestoneRow, MilestoneIssueRow

__all__ = [
    "Base",
    "NO_DESCRIPTION",
    "IssueRow",
    "CommentRow",
    "IssueTagRow",
    "UserRow",
    "MilestoneRow",
    "MilestoneIssueRow",
]
