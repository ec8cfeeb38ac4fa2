"""Relational repository backed by SQLite through SQLAlchemy"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..domain import (
    Comment,
    ConflictError,
    HydratedIssue,
    Issue,
    Milestone,
    NotFoundError,
    Tag,
    User,
)
from ..models import (
    NO_DESCRIPTION,
    CommentRow,
    IssueRow,
    IssueTagRow,
    MilestoneIssueRow,
    MilestoneRow,
    UserRow,
)
from .database import Database
from .repository import Repository
from .timeutil import current_time_millis

logger = logging.getLogger(__name__)


class SqlRepository(Repository):
    """Repository persisting to a SQLite file or an in-process database.

    Every public operation runs in its own session, so each one commits as a
    single transaction or not at all.
    """

    def __init__(self, location: str, echo: bool = False):
        self.db = Database(location, echo=echo)
        self.db.create_schema()
        logger.debug("Opened issue store at %s", location)

    @property
    def location(self) -> str:
        return self.db.location

    def close(self) -> None:
        self.db.dispose()

    # ---- row <-> entity mapping ----

    @staticmethod
    def _to_comment(row: CommentRow) -> Comment:
        return Comment(row.author_id, row.text, row.timestamp, id=row.id)

    def _to_issue(self, row: IssueRow) -> HydratedIssue:
        comments = [self._to_comment(c) for c in row.comments]
        comment_ids = {c.id for c in comments}
        description_id = row.description_comment_id
        if description_id is None or description_id < 0 or description_id not in comment_ids:
            description_id = None
        return HydratedIssue(
            author_id=row.author_id,
            title=row.title,
            created_at=row.created_at,
            id=row.id,
            status=row.status,
            assigned_to=row.assigned_to,
            description_comment_id=description_id,
            comment_ids=comment_ids,
            tags=[Tag(t.name, t.color) for t in row.tags],
            comments=comments,
        )

    @staticmethod
    def _to_milestone(row: MilestoneRow) -> Milestone:
        return Milestone(
            name=row.name,
            start_date=row.start_date,
            end_date=row.end_date,
            description=row.description or "",
            id=row.id,
            issue_ids=[m.issue_id for m in row.memberships],
        )

    @staticmethod
    def _to_user(row: UserRow) -> User:
        return User(row.name, row.role)

    # ---- lookups used inside a session ----

    @staticmethod
    def _issue_row(session: Session, issue_id: int) -> IssueRow:
        row = session.get(IssueRow, issue_id)
        if row is None:
            raise NotFoundError("Issue", issue_id)
        return row

    @staticmethod
    def _milestone_row(session: Session, milestone_id: int) -> MilestoneRow:
        row = session.get(MilestoneRow, milestone_id)
        if row is None:
            raise NotFoundError("Milestone", milestone_id)
        return row

    @staticmethod
    def _comment_row(session: Session, issue_id: int, comment_id: int) -> Optional[CommentRow]:
        return (
            session.query(CommentRow)
            .filter(CommentRow.issue_id == issue_id, CommentRow.id == comment_id)
            .first()
        )

    @staticmethod
    def _sync_tags(row: IssueRow, issue: Issue) -> None:
        """Make the tag rows of ``row`` match the tag set of ``issue``"""
        wanted = {tag.name: tag.color for tag in issue.tags}
        for tag_row in list(row.tags):
            if tag_row.name not in wanted:
                row.tags.remove(tag_row)
            else:
                tag_row.color = wanted.pop(tag_row.name)
        for name, color in wanted.items():
            row.tags.append(IssueTagRow(name=name, color=color))

    @staticmethod
    def _delete_issue_rows(session: Session, issue_id: int) -> bool:
        """Remove an issue and every row depending on it"""
        session.query(MilestoneIssueRow).filter(
            MilestoneIssueRow.issue_id == issue_id
        ).delete(synchronize_session=False)
        session.query(IssueTagRow).filter(
            IssueTagRow.issue_id == issue_id
        ).delete(synchronize_session=False)
        comments = session.query(CommentRow).filter(
            CommentRow.issue_id == issue_id
        ).delete(synchronize_session=False)
        removed = session.query(IssueRow).filter(
            IssueRow.id == issue_id
        ).delete(synchronize_session=False)
        if removed:
            logger.debug("Deleted issue %s with %s comments", issue_id, comments)
        return removed > 0

    # === Issues ===

    def save_issue(self, issue: Issue) -> HydratedIssue:
        description_id = issue.description_comment_id
        with self.db.session() as session:
            if not issue.has_persistent_id():
                row = IssueRow(
                    author_id=issue.author_id,
                    title=issue.title,
                    description_comment_id=NO_DESCRIPTION if description_id is None else description_id,
                    assigned_to=issue.assigned_to,
                    status=issue.status.value,
                    created_at=issue.created_at or current_time_millis(),
                )
                self._sync_tags(row, issue)
                session.add(row)
                session.flush()
                logger.debug("Created issue %s", row.id)
                return self._to_issue(row)

            row = self._issue_row(session, issue.id)
            row.author_id = issue.author_id
            row.title = issue.title
            row.description_comment_id = NO_DESCRIPTION if description_id is None else description_id
            row.assigned_to = issue.assigned_to
            row.status = issue.status.value
            if issue.created_at:
                row.created_at = issue.created_at
            self._sync_tags(row, issue)
            session.flush()
            return self._to_issue(row)

    def get_issue(self, issue_id: int) -> HydratedIssue:
        with self.db.session() as session:
            return self._to_issue(self._issue_row(session, issue_id))

    def delete_issue(self, issue_id: int) -> bool:
        with self.db.session() as session:
            return self._delete_issue_rows(session, issue_id)

    def list_issues(self) -> List[HydratedIssue]:
        with self.db.session() as session:
            rows = (
                session.query(IssueRow)
                .options(selectinload(IssueRow.comments), selectinload(IssueRow.tags))
                .order_by(IssueRow.id)
                .all()
            )
            return [self._to_issue(row) for row in rows]

    # === Comments ===

    def save_comment(self, issue_id: int, comment: Comment) -> Comment:
        with self.db.session() as session:
            self._issue_row(session, issue_id)
            stored = comment.copy()

            if stored.has_persistent_id():
                row = self._comment_row(session, issue_id, stored.id)
                if row is not None:
                    row.author_id = stored.author_id
                    row.text = stored.text
                    if stored.timestamp:
                        row.timestamp = stored.timestamp
                    return self._to_comment(row)
                if stored.id != 0:
                    raise NotFoundError("Comment", (issue_id, stored.id))
                new_id = 0
            else:
                max_id = (
                    session.query(func.max(CommentRow.id))
                    .filter(CommentRow.issue_id == issue_id)
                    .scalar()
                )
                new_id = 1 if max_id is None else max_id + 1

            if not stored.timestamp:
                stored.set_timestamp(current_time_millis())
            session.add(
                CommentRow(
                    issue_id=issue_id,
                    id=new_id,
                    author_id=stored.author_id,
                    text=stored.text,
                    timestamp=stored.timestamp,
                )
            )
            session.flush()
            if not stored.has_persistent_id():
                stored.assign_persistent_id(new_id)
            return stored

    def get_comment(self, issue_id: int, comment_id: int) -> Comment:
        with self.db.session() as session:
            row = self._comment_row(session, issue_id, comment_id)
            if row is None:
                raise NotFoundError("Comment", (issue_id, comment_id))
            return self._to_comment(row)

    def get_all_comments(self, issue_id: int) -> List[Comment]:
        with self.db.session() as session:
            self._issue_row(session, issue_id)
            rows = (
                session.query(CommentRow)
                .filter(CommentRow.issue_id == issue_id)
                .order_by(CommentRow.id)
                .all()
            )
            return [self._to_comment(row) for row in rows]

    def delete_comment(self, issue_id: int, comment_id: int) -> bool:
        with self.db.session() as session:
            self._issue_row(session, issue_id)
            session.query(IssueRow).filter(
                IssueRow.id == issue_id,
                IssueRow.description_comment_id == comment_id,
            ).update({IssueRow.description_comment_id: NO_DESCRIPTION}, synchronize_session=False)
            removed = session.query(CommentRow).filter(
                CommentRow.issue_id == issue_id,
                CommentRow.id == comment_id,
            ).delete(synchronize_session=False)
            return removed > 0

    # === Users ===

    def save_user(self, user: User) -> User:
        with self.db.session() as session:
            session.merge(UserRow(name=user.name, role=user.role))
        return user.copy()

    def get_user(self, name: str) -> User:
        with self.db.session() as session:
            row = session.get(UserRow, name)
            if row is None:
                raise NotFoundError("User", name)
            return self._to_user(row)

    def delete_user(self, name: str) -> bool:
        with self.db.session() as session:
            removed = session.query(UserRow).filter(UserRow.name == name).delete(
                synchronize_session=False
            )
            return removed > 0

    def list_users(self) -> List[User]:
        with self.db.session() as session:
            rows = session.query(UserRow).order_by(UserRow.name).all()
            return [self._to_user(row) for row in rows]

    def rename_user(self, old_name: str, new_name: str) -> User:
        with self.db.session() as session:
            old_row = session.get(UserRow, old_name)
            if old_row is None:
                raise NotFoundError("User", old_name)
            renamed = User(new_name, old_row.role)
            if old_name == new_name:
                return renamed
            if session.get(UserRow, new_name) is not None:
                raise ConflictError(f"User {new_name!r} already exists")

            session.add(UserRow(name=new_name, role=old_row.role))
            session.query(IssueRow).filter(IssueRow.author_id == old_name).update(
                {IssueRow.author_id: new_name}, synchronize_session=False
            )
            session.query(IssueRow).filter(IssueRow.assigned_to == old_name).update(
                {IssueRow.assigned_to: new_name}, synchronize_session=False
            )
            session.query(CommentRow).filter(CommentRow.author_id == old_name).update(
                {CommentRow.author_id: new_name}, synchronize_session=False
            )
            session.flush()
            session.delete(old_row)
            logger.debug("Renamed user %s to %s", old_name, new_name)
        return renamed

    # === Milestones ===

    def save_milestone(self, milestone: Milestone) -> Milestone:
        with self.db.session() as session:
            if not milestone.has_persistent_id():
                row = MilestoneRow(
                    name=milestone.name,
                    description=milestone.description,
                    start_date=milestone.start_date,
                    end_date=milestone.end_date,
                )
                session.add(row)
                session.flush()
                return self._to_milestone(row)

            row = self._milestone_row(session, milestone.id)
            row.name = milestone.name
            row.description = milestone.description
            row.start_date = milestone.start_date
            row.end_date = milestone.end_date
            session.flush()
            return self._to_milestone(row)

    def get_milestone(self, milestone_id: int) -> Milestone:
        with self.db.session() as session:
            return self._to_milestone(self._milestone_row(session, milestone_id))

    def delete_milestone(self, milestone_id: int, cascade: bool = False) -> bool:
        with self.db.session() as session:
            row = session.get(MilestoneRow, milestone_id)
            if row is None:
                return False
            member_ids = [m.issue_id for m in row.memberships]
            session.query(MilestoneIssueRow).filter(
                MilestoneIssueRow.milestone_id == milestone_id
            ).delete(synchronize_session=False)
            if cascade:
                for issue_id in member_ids:
                    self._delete_issue_rows(session, issue_id)
            removed = session.query(MilestoneRow).filter(
                MilestoneRow.id == milestone_id
            ).delete(synchronize_session=False)
            logger.debug(
                "Deleted milestone %s (cascade=%s, issues=%s)", milestone_id, cascade, member_ids
            )
            return removed > 0

    def list_milestones(self) -> List[Milestone]:
        with self.db.session() as session:
            rows = (
                session.query(MilestoneRow)
                .options(selectinload(MilestoneRow.memberships))
                .order_by(MilestoneRow.id)
                .all()
            )
            return [self._to_milestone(row) for row in rows]

    def add_issue_to_milestone(self, milestone_id: int, issue_id: int) -> bool:
        with self.db.session() as session:
            self._milestone_row(session, milestone_id)
            self._issue_row(session, issue_id)
            existing = session.get(MilestoneIssueRow, (milestone_id, issue_id))
            if existing is not None:
                return False
            session.add(MilestoneIssueRow(milestone_id=milestone_id, issue_id=issue_id))
            return True

    def remove_issue_from_milestone(self, milestone_id: int, issue_id: int) -> bool:
        with self.db.session() as session:
            self._milestone_row(session, milestone_id)
            removed = session.query(MilestoneIssueRow).filter(
                MilestoneIssueRow.milestone_id == milestone_id,
                MilestoneIssueRow.issue_id == issue_id,
            ).delete(synchronize_session=False)
            return removed > 0

    def get_issues_for_milestone(self, milestone_id: int) -> List[HydratedIssue]:
        with self.db.session() as session:
            self._milestone_row(session, milestone_id)
            rows = (
                session.query(IssueRow)
                .join(MilestoneIssueRow, MilestoneIssueRow.issue_id == IssueRow.id)
                .filter(MilestoneIssueRow.milestone_id == milestone_id)
                .options(selectinload(IssueRow.comments), selectinload(IssueRow.tags))
                .order_by(IssueRow.id)
                .all()
            )
            return [self._to_issue(row) for row in rows]
