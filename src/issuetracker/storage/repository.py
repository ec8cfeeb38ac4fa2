"""Repository contract shared by every storage backend"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Union

from ..domain import Comment, HydratedIssue, Issue, Milestone, Tag, User

IssuePredicate = Callable[[HydratedIssue], bool]


class Repository(ABC):
    """Single interface through which all persistence flows.

    Backends must behave identically:

    * ``save_*`` on an entity without an id creates it and assigns a fresh
      id; on an entity with an id the row must already exist, otherwise
      ``NotFoundError`` is raised. Ids are never reused.
    * Reads return snapshots. Mutating a snapshot has no effect until it is
      passed back to the matching ``save_*`` call.
    * Issues are returned hydrated (``HydratedIssue``): row fields, tag set
      and comment snapshots ordered by id.
    * Listings are ordered by ascending primary key.
    * Missing rows raise ``NotFoundError``, bad input raises
      ``ValidationError`` and backend faults raise ``BackendError``.
    """

    # === Issues ===

    @abstractmethod
    def save_issue(self, issue: Issue) -> HydratedIssue:
        """Insert a new issue or replace the row fields and tags of an existing one.

        The comment table is never touched; comments are managed through
        ``save_comment`` / ``delete_comment``.
        """

    @abstractmethod
    def get_issue(self, issue_id: int) -> HydratedIssue:
        """Hydrated issue or ``NotFoundError``"""

    @abstractmethod
    def delete_issue(self, issue_id: int) -> bool:
        """Delete an issue with its comments, tags and milestone memberships.

        Returns True iff an issue row was removed.
        """

    @abstractmethod
    def list_issues(self) -> List[HydratedIssue]:
        """All issues ordered by ascending id"""

    def find_issues(self, predicate: IssuePredicate) -> List[HydratedIssue]:
        return [issue for issue in self.list_issues() if predicate(issue)]

    def find_issues_by_user(self, user_name: str) -> List[HydratedIssue]:
        """Issues assigned to ``user_name``"""
        return self.find_issues(lambda issue: issue.assigned_to == user_name)

    def list_unassigned(self) -> List[HydratedIssue]:
        return self.find_issues(lambda issue: not issue.has_assignee())

    def find_issues_by_tag(self, tag_name: str) -> List[HydratedIssue]:
        return self.find_issues(lambda issue: issue.has_tag(tag_name))

    def find_issues_by_tags(self, tag_names: Iterable[str]) -> List[HydratedIssue]:
        """Issues carrying every one of ``tag_names``"""
        wanted = set(tag_names)
        return self.find_issues(lambda issue: wanted.issubset(issue.tag_names))

    # === Comments ===

    @abstractmethod
    def save_comment(self, issue_id: int, comment: Comment) -> Comment:
        """Insert or update a comment on ``issue_id``.

        A comment without an id gets ``max(ids on the issue) + 1`` (``1`` on
        an issue without comments). An explicit id updates that comment in
        place; an unknown explicit id is rejected, except ``0`` which is
        inserted as the description placeholder.
        """

    @abstractmethod
    def get_comment(self, issue_id: int, comment_id: int) -> Comment:
        """Comment attached to ``issue_id`` or ``NotFoundError``"""

    @abstractmethod
    def get_all_comments(self, issue_id: int) -> List[Comment]:
        """Comments of an existing issue ordered by ascending id"""

    @abstractmethod
    def delete_comment(self, issue_id: int, comment_id: int) -> bool:
        """Delete a comment, unlinking it first if it is the description"""

    # === Users ===

    @abstractmethod
    def save_user(self, user: User) -> User:
        """Upsert by name"""

    @abstractmethod
    def get_user(self, name: str) -> User:
        """User or ``NotFoundError``"""

    @abstractmethod
    def delete_user(self, name: str) -> bool:
        """Raw removal without any cascade; False when the user is unknown"""

    @abstractmethod
    def list_users(self) -> List[User]:
        """All users ordered by name"""

    @abstractmethod
    def rename_user(self, old_name: str, new_name: str) -> User:
        """Move a user to a new name and rewrite every reference to it.

        Issue authors, issue assignees and comment authors naming
        ``old_name`` are rewritten, ``new_name`` is created with the old
        role and ``old_name`` is removed, all in one step.
        """

    # === Tags ===

    def add_tag(self, issue_id: int, tag: Union[Tag, str]) -> bool:
        """Attach (or recolor) a tag on an issue; False when already present"""
        issue = self.get_issue(issue_id)
        added = issue.add_tag(tag)
        if added:
            self.save_issue(issue)
        return added

    def remove_tag(self, issue_id: int, tag_name: str) -> bool:
        issue = self.get_issue(issue_id)
        removed = issue.remove_tag(tag_name)
        if removed:
            self.save_issue(issue)
        return removed

    def list_tags(self) -> List[Tag]:
        """Distinct tags in use, sorted by name"""
        seen = {}
        for issue in self.list_issues():
            for tag in issue.tags:
                seen.setdefault(tag.name, tag)
        return [seen[name] for name in sorted(seen)]

    # === Milestones ===

    @abstractmethod
    def save_milestone(self, milestone: Milestone) -> Milestone:
        """Insert or update name, description and dates; membership is untouched"""

    @abstractmethod
    def get_milestone(self, milestone_id: int) -> Milestone:
        """Milestone with its issue ids or ``NotFoundError``"""

    @abstractmethod
    def delete_milestone(self, milestone_id: int, cascade: bool = False) -> bool:
        """Delete a milestone; with ``cascade`` its member issues go too"""

    @abstractmethod
    def list_milestones(self) -> List[Milestone]:
        """All milestones ordered by ascending id"""

    @abstractmethod
    def add_issue_to_milestone(self, milestone_id: int, issue_id: int) -> bool:
        """Link an existing issue; False when it already was a member"""

    @abstractmethod
    def remove_issue_from_milestone(self, milestone_id: int, issue_id: int) -> bool:
        """Unlink an issue without deleting it; False when it was not a member"""

    @abstractmethod
    def get_issues_for_milestone(self, milestone_id: int) -> List[HydratedIssue]:
        """Hydrated member issues ordered by ascending id"""

    # === Lifecycle ===

    def close(self) -> None:
        """Release backend resources"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
