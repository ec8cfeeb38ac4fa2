"""Pure in-memory repository"""

import logging
from typing import Dict, List

from ..domain import (
    Comment,
    ConflictError,
    HydratedIssue,
    Issue,
    Milestone,
    NotFoundError,
    User,
)
from .repository import Repository
from .timeutil import current_time_millis

logger = logging.getLogger(__name__)


class InMemoryRepository(Repository):
    """Repository keeping every row in process-local dicts.

    Mirrors ``SqlRepository`` exactly: ids start at 1 and are never reused,
    listings are ordered by id, and stored objects never leave the
    repository (callers always receive copies).
    """

    def __init__(self):
        self._issues: Dict[int, Issue] = {}
        self._comments: Dict[int, Dict[int, Comment]] = {}
        self._users: Dict[str, User] = {}
        self._milestones: Dict[int, Milestone] = {}
        self._last_issue_id = 0
        self._last_milestone_id = 0

    def _hydrate(self, issue_id: int) -> HydratedIssue:
        row = self._issues[issue_id]
        comments = [self._comments[issue_id][cid] for cid in sorted(self._comments[issue_id])]
        description_id = row.description_comment_id
        if description_id not in self._comments[issue_id]:
            description_id = None
        return HydratedIssue(
            author_id=row.author_id,
            title=row.title,
            created_at=row.created_at,
            id=row.id,
            status=row.status,
            assigned_to=row.assigned_to,
            description_comment_id=description_id,
            comment_ids=[c.id for c in comments],
            tags=row.tags,
            comments=comments,
        )

    def _require_issue(self, issue_id: int) -> Issue:
        try:
            return self._issues[issue_id]
        except KeyError:
            raise NotFoundError("Issue", issue_id) from None

    def _require_milestone(self, milestone_id: int) -> Milestone:
        try:
            return self._milestones[milestone_id]
        except KeyError:
            raise NotFoundError("Milestone", milestone_id) from None

    # === Issues ===

    def save_issue(self, issue: Issue) -> HydratedIssue:
        stored = issue.to_row()
        if not stored.has_persistent_id():
            if not stored.created_at:
                stored.set_created_at(current_time_millis())
            self._last_issue_id += 1
            stored.assign_persistent_id(self._last_issue_id)
            self._issues[stored.id] = stored
            self._comments[stored.id] = {}
            logger.debug("Created issue %s", stored.id)
            return self._hydrate(stored.id)

        previous = self._require_issue(stored.id)
        if not stored.created_at:
            stored.set_created_at(previous.created_at)
        self._issues[stored.id] = stored
        return self._hydrate(stored.id)

    def get_issue(self, issue_id: int) -> HydratedIssue:
        self._require_issue(issue_id)
        return self._hydrate(issue_id)

    def delete_issue(self, issue_id: int) -> bool:
        if self._issues.pop(issue_id, None) is None:
            return False
        comments = self._comments.pop(issue_id, {})
        for milestone in self._milestones.values():
            milestone.remove_issue(issue_id)
        logger.debug("Deleted issue %s with %s comments", issue_id, len(comments))
        return True

    def list_issues(self) -> List[HydratedIssue]:
        return [self._hydrate(issue_id) for issue_id in sorted(self._issues)]

    # === Comments ===

    def save_comment(self, issue_id: int, comment: Comment) -> Comment:
        self._require_issue(issue_id)
        comments = self._comments[issue_id]
        stored = comment.copy()

        if stored.has_persistent_id():
            existing = comments.get(stored.id)
            if existing is not None:
                if not stored.timestamp:
                    stored.set_timestamp(existing.timestamp)
                comments[stored.id] = stored
                return stored.copy()
            if stored.id != 0:
                raise NotFoundError("Comment", (issue_id, stored.id))
        else:
            stored.assign_persistent_id(max(comments) + 1 if comments else 1)

        if not stored.timestamp:
            stored.set_timestamp(current_time_millis())
        comments[stored.id] = stored
        return stored.copy()

    def get_comment(self, issue_id: int, comment_id: int) -> Comment:
        comment = self._comments.get(issue_id, {}).get(comment_id)
        if comment is None:
            raise NotFoundError("Comment", (issue_id, comment_id))
        return comment.copy()

    def get_all_comments(self, issue_id: int) -> List[Comment]:
        self._require_issue(issue_id)
        comments = self._comments[issue_id]
        return [comments[cid].copy() for cid in sorted(comments)]

    def delete_comment(self, issue_id: int, comment_id: int) -> bool:
        issue = self._require_issue(issue_id)
        if issue.description_comment_id == comment_id:
            issue.clear_description()
        return self._comments[issue_id].pop(comment_id, None) is not None

    # === Users ===

    def save_user(self, user: User) -> User:
        self._users[user.name] = user.copy()
        return user.copy()

    def get_user(self, name: str) -> User:
        try:
            return self._users[name].copy()
        except KeyError:
            raise NotFoundError("User", name) from None

    def delete_user(self, name: str) -> bool:
        return self._users.pop(name, None) is not None

    def list_users(self) -> List[User]:
        return [self._users[name].copy() for name in sorted(self._users)]

    def rename_user(self, old_name: str, new_name: str) -> User:
        old = self.get_user(old_name)
        renamed = User(new_name, old.role)
        if old_name == new_name:
            return renamed
        if new_name in self._users:
            raise ConflictError(f"User {new_name!r} already exists")

        # Build every rewritten row first so a failure leaves the store untouched
        issues = {}
        for issue_id, row in self._issues.items():
            updated = row.to_row()
            if updated.author_id == old_name:
                updated.set_author(new_name)
            if updated.assigned_to == old_name:
                updated.assign_to(new_name)
            issues[issue_id] = updated
        comments = {}
        for issue_id, by_id in self._comments.items():
            comments[issue_id] = {}
            for comment_id, comment in by_id.items():
                updated = comment.copy()
                if updated.author_id == old_name:
                    updated.set_author(new_name)
                comments[issue_id][comment_id] = updated

        self._issues = issues
        self._comments = comments
        self._users[new_name] = renamed.copy()
        del self._users[old_name]
        logger.debug("Renamed user %s to %s", old_name, new_name)
        return renamed

    # === Milestones ===

    def save_milestone(self, milestone: Milestone) -> Milestone:
        if not milestone.has_persistent_id():
            stored = Milestone(
                name=milestone.name,
                start_date=milestone.start_date,
                end_date=milestone.end_date,
                description=milestone.description,
            )
            self._last_milestone_id += 1
            stored.assign_persistent_id(self._last_milestone_id)
            self._milestones[stored.id] = stored
            return stored.copy()

        stored = self._require_milestone(milestone.id)
        stored.set_name(milestone.name)
        stored.set_description(milestone.description)
        stored.set_schedule(milestone.start_date, milestone.end_date)
        return stored.copy()

    def get_milestone(self, milestone_id: int) -> Milestone:
        return self._require_milestone(milestone_id).copy()

    def delete_milestone(self, milestone_id: int, cascade: bool = False) -> bool:
        milestone = self._milestones.pop(milestone_id, None)
        if milestone is None:
            return False
        if cascade:
            for issue_id in milestone.issue_ids:
                self.delete_issue(issue_id)
        logger.debug(
            "Deleted milestone %s (cascade=%s, issues=%s)", milestone_id, cascade, milestone.issue_ids
        )
        return True

    def list_milestones(self) -> List[Milestone]:
        return [self._milestones[mid].copy() for mid in sorted(self._milestones)]

    def add_issue_to_milestone(self, milestone_id: int, issue_id: int) -> bool:
        milestone = self._require_milestone(milestone_id)
        self._require_issue(issue_id)
        return milestone.add_issue(issue_id)

    def remove_issue_from_milestone(self, milestone_id: int, issue_id: int) -> bool:
        return self._require_milestone(milestone_id).remove_issue(issue_id)

    def get_issues_for_milestone(self, milestone_id: int) -> List[HydratedIssue]:
        milestone = self._require_milestone(milestone_id)
        return [self._hydrate(issue_id) for issue_id in milestone.issue_ids]
