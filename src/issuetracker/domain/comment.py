"""Comment entity"""

from typing import Optional

from .errors import ConflictError
from .validation import require_non_negative_id, require_text, require_timestamp


class Comment:
    """A comment on one issue.

    ``id`` is ``None`` until the repository persists the comment. Ids are
    local to the owning issue and ``0`` is a valid id (reserved for a
    description placeholder inserted explicitly).
    """

    def __init__(
        self,
        author_id: str,
        text: str,
        timestamp: int = 0,
        id: Optional[int] = None,
    ):
        self._id = None if id is None else require_non_negative_id(id, "comment id")
        self._author_id = require_text(author_id, "author_id")
        self._text = require_text(text, "text")
        self._timestamp = require_timestamp(timestamp)

    @property
    def id(self) -> Optional[int]:
        return self._id

    @property
    def author_id(self) -> str:
        return self._author_id

    @property
    def text(self) -> str:
        return self._text

    @property
    def timestamp(self) -> int:
        return self._timestamp

    def has_persistent_id(self) -> bool:
        return self._id is not None

    def assign_persistent_id(self, new_id: int) -> None:
        """Called once by a repository when the comment is first stored"""
        if self.has_persistent_id():
            raise ConflictError(f"comment id already set ({self._id})")
        self._id = require_non_negative_id(new_id, "comment id")

    def set_text(self, text: str) -> None:
        self._text = require_text(text, "text")

    def set_author(self, author_id: str) -> None:
        self._author_id = require_text(author_id, "author_id")

    def set_timestamp(self, timestamp: int) -> None:
        self._timestamp = require_timestamp(timestamp)

    def copy(self) -> "Comment":
        return Comment(self._author_id, self._text, self._timestamp, id=self._id)

    def __eq__(self, other):
        if not isinstance(other, Comment):
            return NotImplemented
        return (
            self._id == other._id
            and self._author_id == other._author_id
            and self._text == other._text
            and self._timestamp == other._timestamp
        )

    __hash__ = None

    def __repr__(self):
        return f"<Comment(id={self._id}, author='{self._author_id}', text='{self._text[:30]}')>"

    def to_dict(self):
        return {
            "id": self._id,
            "author_id": self._author_id,
            "text": self._text,
            "timestamp": self._timestamp,
        }
