"""Milestone entity"""

from typing import Iterable, List, Optional

from .errors import ConflictError
from .validation import optional_entity_id, require_positive_id, require_text


class Milestone:
    """Date-bounded group of issues.

    Membership is a non-owning set of issue ids; dates are kept as the
    strings the caller supplied (ISO ``YYYY-MM-DD`` by convention).
    """

    def __init__(
        self,
        name: str,
        start_date: str,
        end_date: str,
        description: str = "",
        id: Optional[int] = None,
        issue_ids: Iterable[int] = (),
    ):
        self._id = optional_entity_id(id, "milestone id")
        self._name = require_text(name, "name")
        self._description = description or ""
        self._start_date = require_text(start_date, "start date")
        self._end_date = require_text(end_date, "end date")
        self._issue_ids = set()
        self.replace_issues(issue_ids)

    @property
    def id(self) -> Optional[int]:
        return self._id

    def has_persistent_id(self) -> bool:
        return self._id is not None

    def assign_persistent_id(self, new_id: int) -> None:
        if self.has_persistent_id():
            raise ConflictError(f"milestone id already set ({self._id})")
        self._id = require_positive_id(new_id, "milestone id")

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def start_date(self) -> str:
        return self._start_date

    @property
    def end_date(self) -> str:
        return self._end_date

    @property
    def issue_ids(self) -> List[int]:
        return sorted(self._issue_ids)

    def set_name(self, name: str) -> None:
        self._name = require_text(name, "name")

    def set_description(self, description: str) -> None:
        self._description = description or ""

    def set_start_date(self, start_date: str) -> None:
        self._start_date = require_text(start_date, "start date")

    def set_end_date(self, end_date: str) -> None:
        self._end_date = require_text(end_date, "end date")

    def set_schedule(self, start_date: str, end_date: str) -> None:
        self.set_start_date(start_date)
        self.set_end_date(end_date)

    def replace_issues(self, issue_ids: Iterable[int]) -> None:
        self._issue_ids = {require_positive_id(i, "issue id") for i in issue_ids}

    def add_issue(self, issue_id: int) -> bool:
        issue_id = require_positive_id(issue_id, "issue id")
        if issue_id in self._issue_ids:
            return False
        self._issue_ids.add(issue_id)
        return True

    def remove_issue(self, issue_id: int) -> bool:
        if issue_id not in self._issue_ids:
            return False
        self._issue_ids.discard(issue_id)
        return True

    def has_issue(self, issue_id: int) -> bool:
        return issue_id in self._issue_ids

    def copy(self) -> "Milestone":
        return Milestone(
            name=self._name,
            start_date=self._start_date,
            end_date=self._end_date,
            description=self._description,
            id=self._id,
            issue_ids=self._issue_ids,
        )

    def __eq__(self, other):
        if not isinstance(other, Milestone):
            return NotImplemented
        return (
            self._id == other._id
            and self._name == other._name
            and self._description == other._description
            and self._start_date == other._start_date
            and self._end_date == other._end_date
            and self._issue_ids == other._issue_ids
        )

    __hash__ = None

    def __repr__(self):
        return f"<Milestone(id={self._id}, name='{self._name}', issues={self.issue_ids})>"

    def to_dict(self):
        return {
            "id": self._id,
            "name": self._name,
            "description": self._description,
            "start_date": self._start_date,
            "end_date": self._end_date,
            "issue_ids": self.issue_ids,
        }
