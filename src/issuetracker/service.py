"""Issue tracker domain service"""

import functools
from datetime import date
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError as SchemaError

from .domain import (
    BackendError,
    Comment,
    HydratedIssue,
    Issue,
    Milestone,
    Status,
    Tag,
    TrackerError,
    User,
    ValidationError,
    normalize_status,
)
from .schemas import MilestoneStats, MilestoneUpdate
from .storage.repository import Repository

ISSUE_FIELDS = ("title", "description", "status", "assignedTo")
USER_FIELDS = ("role", "name")
MILESTONE_FIELDS = ("name", "description", "start_date", "end_date")


def soft_operation(func):
    """Turn tracker errors into ``False``; backend failures still propagate"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BackendError:
            raise
        except TrackerError:
            return False

    return wrapper


class IssueTrackerService:
    """Coarse-grained operations shared by every frontend.

    Holds nothing but its repository. ``create_*``, ``add_comment_to_issue``
    and the getters raise ``ValidationError`` / ``NotFoundError`` /
    ``ConflictError``; updates, deletes and membership edits answer with a
    boolean instead.
    """

    def __init__(self, repository: Repository):
        self.repository = repository

    # === Issues ===

    def create_issue(self, title: str, description: str, author_id: str) -> HydratedIssue:
        """Create an issue, storing a non-empty description as its first comment"""
        issue = Issue(author_id=author_id, title=title)
        self.repository.get_user(author_id)
        saved = self.repository.save_issue(issue)

        if description:
            comment = self.repository.save_comment(saved.id, Comment(author_id, description))
            saved.set_description_comment_id(comment.id)
            saved = self.repository.save_issue(saved)
        return saved

    def get_issue(self, issue_id: int) -> HydratedIssue:
        return self.repository.get_issue(issue_id)

    @soft_operation
    def update_issue_field(self, issue_id: int, field: str, value: str) -> bool:
        """Update one of ``title``, ``description``, ``status`` or ``assignedTo``"""
        if field not in ISSUE_FIELDS:
            return False
        if field == "assignedTo":
            if not value:
                return self.unassign_user_from_issue(issue_id)
            return self.assign_user_to_issue(issue_id, value)

        issue = self.repository.get_issue(issue_id)
        if field == "title":
            issue.set_title(value)
        elif field == "status":
            issue.set_status(normalize_status(value))
        elif field == "description":
            current = issue.find_comment(issue.description_comment_id)
            if current is not None:
                updated = current.copy()
                updated.set_text(value)
                self.repository.save_comment(issue_id, updated)
                return True
            comment = self.repository.save_comment(issue_id, Comment(issue.author_id, value))
            issue.set_description_comment_id(comment.id)
        self.repository.save_issue(issue)
        return True

    @soft_operation
    def assign_user_to_issue(self, issue_id: int, user_name: str) -> bool:
        self.repository.get_user(user_name)
        issue = self.repository.get_issue(issue_id)
        issue.assign_to(user_name)
        self.repository.save_issue(issue)
        return True

    @soft_operation
    def unassign_user_from_issue(self, issue_id: int) -> bool:
        issue = self.repository.get_issue(issue_id)
        issue.unassign()
        self.repository.save_issue(issue)
        return True

    @soft_operation
    def delete_issue(self, issue_id: int) -> bool:
        return self.repository.delete_issue(issue_id)

    # === Comments ===

    def add_comment_to_issue(self, issue_id: int, text: str, author_id: str) -> Comment:
        comment = Comment(author_id, text)
        issue = self.repository.get_issue(issue_id)
        self.repository.get_user(author_id)

        saved = self.repository.save_comment(issue_id, comment)
        issue.add_comment_id(saved.id)
        self.repository.save_issue(issue)
        return saved

    def get_comment(self, issue_id: int, comment_id: int) -> Comment:
        return self.repository.get_comment(issue_id, comment_id)

    def get_all_comments(self, issue_id: int) -> List[Comment]:
        return self.repository.get_all_comments(issue_id)

    @soft_operation
    def update_comment(self, issue_id: int, comment_id: int, new_text: str) -> bool:
        comment = self.repository.get_comment(issue_id, comment_id)
        comment.set_text(new_text)
        self.repository.save_comment(issue_id, comment)
        return True

    @soft_operation
    def delete_comment(self, issue_id: int, comment_id: int) -> bool:
        self.repository.get_comment(issue_id, comment_id)
        if not self.repository.delete_comment(issue_id, comment_id):
            return False
        issue = self.repository.get_issue(issue_id)
        issue.remove_comment_id(comment_id)
        self.repository.save_issue(issue)
        return True

    # === Users ===

    def create_user(self, name: str, role: str) -> User:
        """Create or overwrite a user"""
        return self.repository.save_user(User(name, role))

    def get_user(self, name: str) -> User:
        return self.repository.get_user(name)

    def list_users(self) -> List[User]:
        return self.repository.list_users()

    @soft_operation
    def update_user(self, name: str, field: str, value: str) -> bool:
        """Change a user's ``role``, or rename it with ``name``"""
        if field not in USER_FIELDS:
            return False
        if field == "name":
            self.repository.rename_user(name, value)
            return True
        user = self.repository.get_user(name)
        user.set_role(value)
        self.repository.save_user(user)
        return True

    @soft_operation
    def remove_user(self, name: str) -> bool:
        return self.repository.delete_user(name)

    # === Lookups ===

    def list_all(self) -> List[HydratedIssue]:
        return self.repository.list_issues()

    def list_unassigned(self) -> List[HydratedIssue]:
        return self.repository.list_unassigned()

    def find_by_user(self, user_name: str) -> List[HydratedIssue]:
        """Issues authored by ``user_name``, compared case-insensitively"""
        target = (user_name or "").lower()
        return self.repository.find_issues(lambda issue: issue.author_id.lower() == target)

    def find_by_status(self, status: Union[Status, str]) -> List[HydratedIssue]:
        try:
            wanted = Status.parse(status)
        except ValidationError:
            return []
        return self.repository.find_issues(lambda issue: issue.status is wanted)

    def find_by_tag(self, tag_name: str) -> List[HydratedIssue]:
        return self.repository.find_issues_by_tag(tag_name)

    def find_by_tags(self, tag_names: Iterable[str]) -> List[HydratedIssue]:
        return self.repository.find_issues_by_tags(tag_names)

    # === Tags ===

    @soft_operation
    def add_tag(self, issue_id: int, tag: Union[Tag, str]) -> bool:
        return self.repository.add_tag(issue_id, tag)

    @soft_operation
    def remove_tag(self, issue_id: int, tag_name: str) -> bool:
        return self.repository.remove_tag(issue_id, tag_name)

    def list_tags(self) -> List[Tag]:
        return self.repository.list_tags()

    # === Milestones ===

    def create_milestone(
        self, name: str, description: str, start_date: str, end_date: str
    ) -> Milestone:
        milestone = Milestone(name, start_date, end_date, description=description)
        return self.repository.save_milestone(milestone)

    def get_milestone(self, milestone_id: int) -> Milestone:
        return self.repository.get_milestone(milestone_id)

    def list_milestones(self) -> List[Milestone]:
        return self.repository.list_milestones()

    @soft_operation
    def update_milestone(
        self,
        milestone_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> bool:
        """Apply the given fields; False when none is given or one is invalid"""
        try:
            update = MilestoneUpdate(
                name=name, description=description, start_date=start_date, end_date=end_date
            )
        except SchemaError:
            return False

        milestone = self.repository.get_milestone(milestone_id)
        changes = update.changes()
        if "name" in changes:
            milestone.set_name(changes["name"])
        if "description" in changes:
            milestone.set_description(changes["description"])
        if "start_date" in changes:
            milestone.set_start_date(changes["start_date"])
        if "end_date" in changes:
            milestone.set_end_date(changes["end_date"])
        self.repository.save_milestone(milestone)
        return True

    def update_milestone_field(self, milestone_id: int, field: str, value: str) -> bool:
        if field not in MILESTONE_FIELDS:
            return False
        return self.update_milestone(milestone_id, **{field: value})

    @soft_operation
    def delete_milestone(self, milestone_id: int, cascade: bool = False) -> bool:
        return self.repository.delete_milestone(milestone_id, cascade)

    @soft_operation
    def add_issue_to_milestone(self, milestone_id: int, issue_id: int) -> bool:
        """True once the issue is a member, including when it already was"""
        self.repository.add_issue_to_milestone(milestone_id, issue_id)
        return True

    @soft_operation
    def remove_issue_from_milestone(self, milestone_id: int, issue_id: int) -> bool:
        """True once the issue is no longer a member, including when it never was"""
        self.repository.get_issue(issue_id)
        self.repository.remove_issue_from_milestone(milestone_id, issue_id)
        return True

    def get_issues_for_milestone(self, milestone_id: int) -> List[HydratedIssue]:
        return self.repository.get_issues_for_milestone(milestone_id)

    def get_milestone_stats(self, milestone_id: int) -> MilestoneStats:
        milestone = self.repository.get_milestone(milestone_id)
        issues = self.repository.get_issues_for_milestone(milestone_id)
        counts = {status.value: 0 for status in Status}
        for issue in issues:
            counts[issue.status.value] += 1

        completion = 0.0
        if issues:
            completion = round(counts[Status.DONE.value] * 100.0 / len(issues), 2)
        return MilestoneStats(
            milestone_id=milestone.id,
            name=milestone.name,
            issue_count=len(issues),
            status_counts=counts,
            completion_percentage=completion,
        )

    def find_milestones_by_date_range(self, start: str = "", end: str = "") -> List[Milestone]:
        """Milestones overlapping [start, end]; an empty bound is open"""
        return [
            m
            for m in self.repository.list_milestones()
            if (not start or m.end_date >= start) and (not end or m.start_date <= end)
        ]

    def get_active_milestones(self, today: Optional[str] = None) -> List[Milestone]:
        """Milestones whose schedule contains ``today`` (ISO date)"""
        today = today or date.today().isoformat()
        return [
            m for m in self.repository.list_milestones() if m.start_date <= today <= m.end_date
        ]

    def get_completed_milestones(self) -> List[Milestone]:
        """Milestones with at least one issue, all of them done"""
        completed = []
        for milestone in self.repository.list_milestones():
            issues = self.repository.get_issues_for_milestone(milestone.id)
            if issues and all(issue.status is Status.DONE for issue in issues):
                completed.append(milestone)
        return completed
