"""Issue aggregate and its hydrated read view"""

import copy
from typing import Iterable, List, Optional, Union

from .comment import Comment
from .errors import ConflictError, ValidationError
from .status import DEFAULT_STATUS, Status
from .tag import Tag
from .validation import (
    optional_entity_id,
    require_non_negative_id,
    require_positive_id,
    require_text,
    require_timestamp,
)


class Issue:
    """Issue row: scalar fields, the ids of its comments and its tag set.

    ``id`` is ``None`` until the repository assigns one on first save.
    Every mutator is an in-memory edit; changes reach the store only when
    the issue is passed back to ``Repository.save_issue``.
    """

    def __init__(
        self,
        author_id: str,
        title: str,
        created_at: int = 0,
        id: Optional[int] = None,
        status: Union[Status, str] = DEFAULT_STATUS,
        assigned_to: Optional[str] = None,
        description_comment_id: Optional[int] = None,
        comment_ids: Iterable[int] = (),
        tags: Iterable[Tag] = (),
    ):
        self._id = optional_entity_id(id, "issue id")
        self._author_id = require_text(author_id, "author_id")
        self._title = require_text(title, "title")
        self._created_at = require_timestamp(created_at, "created_at")
        self._status = Status.parse(status)
        self._assigned_to = None
        if assigned_to:
            self.assign_to(assigned_to)

        self._comment_ids = set()
        for comment_id in comment_ids:
            self.add_comment_id(comment_id)

        self._description_comment_id = None
        if description_comment_id is not None:
            self.set_description_comment_id(description_comment_id)

        self._tags = {}
        for tag in tags:
            self.add_tag(tag)

    # ---- identity ----

    @property
    def id(self) -> Optional[int]:
        return self._id

    def has_persistent_id(self) -> bool:
        return self._id is not None

    def assign_persistent_id(self, new_id: int) -> None:
        """Called once by a repository when the issue is first stored"""
        if self.has_persistent_id():
            raise ConflictError(f"issue id already set ({self._id})")
        self._id = require_positive_id(new_id, "issue id")

    # ---- accessors ----

    @property
    def author_id(self) -> str:
        return self._author_id

    @property
    def title(self) -> str:
        return self._title

    @property
    def created_at(self) -> int:
        return self._created_at

    @property
    def status(self) -> Status:
        return self._status

    @property
    def assigned_to(self) -> Optional[str]:
        return self._assigned_to

    def has_assignee(self) -> bool:
        return self._assigned_to is not None

    @property
    def description_comment_id(self) -> Optional[int]:
        return self._description_comment_id

    def has_description(self) -> bool:
        return self._description_comment_id is not None

    @property
    def comment_ids(self) -> List[int]:
        return sorted(self._comment_ids)

    @property
    def tags(self) -> List[Tag]:
        return [self._tags[name] for name in sorted(self._tags)]

    @property
    def tag_names(self) -> List[str]:
        return sorted(self._tags)

    # ---- mutators ----

    def set_title(self, title: str) -> None:
        self._title = require_text(title, "title")

    def set_author(self, author_id: str) -> None:
        self._author_id = require_text(author_id, "author_id")

    def set_created_at(self, created_at: int) -> None:
        self._created_at = require_timestamp(created_at, "created_at")

    def set_status(self, status: Union[Status, str]) -> None:
        self._status = Status.parse(status)

    def assign_to(self, user_name: str) -> None:
        self._assigned_to = require_text(user_name, "assigned_to")

    def unassign(self) -> None:
        self._assigned_to = None

    def add_comment_id(self, comment_id: int) -> None:
        self._comment_ids.add(require_non_negative_id(comment_id, "comment id"))

    def remove_comment_id(self, comment_id: int) -> bool:
        """Drop a comment id; unlinks the description if it pointed there"""
        if comment_id not in self._comment_ids:
            return False
        if self._description_comment_id == comment_id:
            self._description_comment_id = None
        self._comment_ids.discard(comment_id)
        return True

    def set_description_comment_id(self, comment_id: int) -> None:
        comment_id = require_non_negative_id(comment_id, "description comment id")
        self._comment_ids.add(comment_id)
        self._description_comment_id = comment_id

    def clear_description(self) -> None:
        self._description_comment_id = None

    def add_tag(self, tag: Union[Tag, str]) -> bool:
        """Add a tag or recolor an existing one; False when nothing changed"""
        if isinstance(tag, str):
            tag = Tag(tag)
        if not isinstance(tag, Tag):
            raise ValidationError(f"Not a tag: {tag!r}")
        existing = self._tags.get(tag.name)
        if existing is not None and existing.color == tag.color:
            return False
        self._tags[tag.name] = tag
        return True

    def remove_tag(self, tag_name: str) -> bool:
        return self._tags.pop(tag_name, None) is not None

    def has_tag(self, tag_name: str) -> bool:
        return tag_name in self._tags

    def copy(self) -> "Issue":
        clone = copy.copy(self)
        clone._comment_ids = set(self._comment_ids)
        clone._tags = dict(self._tags)
        return clone

    def to_row(self) -> "Issue":
        """Plain issue without any hydrated comment snapshots"""
        return Issue(
            author_id=self._author_id,
            title=self._title,
            created_at=self._created_at,
            id=self._id,
            status=self._status,
            assigned_to=self._assigned_to,
            description_comment_id=self._description_comment_id,
            comment_ids=self._comment_ids,
            tags=self._tags.values(),
        )

    # ---- comparison / serialization ----

    def _key(self):
        return (
            self._id,
            self._author_id,
            self._title,
            self._created_at,
            self._status,
            self._assigned_to,
            self._description_comment_id,
            frozenset(self._comment_ids),
            frozenset((t.name, t.color) for t in self._tags.values()),
        )

    def __eq__(self, other):
        if not isinstance(other, Issue):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None

    def __repr__(self):
        return f"<Issue(id={self._id}, title='{self._title[:50]}', status='{self._status.value}')>"

    def to_dict(self):
        return {
            "id": self._id,
            "author_id": self._author_id,
            "title": self._title,
            "description_comment_id": self._description_comment_id,
            "assigned_to": self._assigned_to,
            "status": self._status.value,
            "created_at": self._created_at,
            "comment_ids": self.comment_ids,
            "tags": [tag.to_dict() for tag in self.tags],
        }


class HydratedIssue(Issue):
    """Issue as returned by a repository, with snapshots of its comments.

    The snapshots are a read-only view ordered by comment id; saving a
    hydrated issue only writes its row fields.
    """

    def __init__(self, *args, comments: Iterable[Comment] = (), **kwargs):
        super().__init__(*args, **kwargs)
        self._comments = ()
        for comment in comments:
            self.upsert_comment(comment)

    @property
    def comments(self) -> tuple:
        return self._comments

    def upsert_comment(self, comment: Comment) -> None:
        """Insert or replace a comment snapshot, keeping the id set in sync"""
        if not comment.has_persistent_id():
            raise ValidationError("Only persisted comments can be attached to an issue")
        snapshot = comment.copy()
        others = [c for c in self._comments if c.id != snapshot.id]
        others.append(snapshot)
        self._comments = tuple(sorted(others, key=lambda c: c.id))
        self.add_comment_id(snapshot.id)

    def find_comment(self, comment_id: int) -> Optional[Comment]:
        for comment in self._comments:
            if comment.id == comment_id:
                return comment
        return None

    @property
    def description(self) -> str:
        """Text of the description comment, or an empty string"""
        if self._description_comment_id is None:
            return ""
        comment = self.find_comment(self._description_comment_id)
        return comment.text if comment else ""

    def remove_comment_id(self, comment_id: int) -> bool:
        self._comments = tuple(c for c in self._comments if c.id != comment_id)
        return super().remove_comment_id(comment_id)

    def copy(self) -> "HydratedIssue":
        clone = super().copy()
        clone._comments = tuple(c.copy() for c in self._comments)
        return clone

    def to_dict(self):
        data = super().to_dict()
        data["description"] = self.description
        data["comments"] = [comment.to_dict() for comment in self._comments]
        return data
