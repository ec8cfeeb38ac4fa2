"""Tests for the issue tracker service layer"""

import pytest

from issuetracker.domain import (
    BackendError,
    ConflictError,
    NotFoundError,
    Status,
    Tag,
    ValidationError,
)
from issuetracker.schemas import MilestoneStats, MilestoneUpdate
from issuetracker.service import IssueTrackerService


@pytest.fixture
def described(users):
    """State after the first scenario's issue is created"""
    users.create_issue("Crash on save", "Repro: open, save, crash", "bob")
    return users


# ---- end-to-end scenarios ----

def test_create_describe_assign_done(users):
    """Test create, describe, assign and finish an issue"""
    service = users
    issue = service.create_issue("Crash on save", "Repro: open, save, crash", "bob")

    assert issue.id == 1
    assert issue.title == "Crash on save"
    assert issue.author_id == "bob"
    assert issue.status is Status.TO_BE_DONE
    assert issue.comment_ids == [1]
    assert issue.description_comment_id == 1
    assert issue.description == "Repro: open, save, crash"
    assert service.get_comment(1, 1).text == "Repro: open, save, crash"

    assert service.assign_user_to_issue(1, "alice")
    assert service.get_issue(1).assigned_to == "alice"

    assert service.update_issue_field(1, "status", "Done")
    assert service.get_issue(1).status is Status.DONE


def test_delete_cascades_to_comments(described):
    comment = described.add_comment_to_issue(1, "Hi", "alice")
    assert comment.id == 2
    assert described.get_issue(1).comment_ids == [1, 2]

    assert described.delete_issue(1)
    with pytest.raises(NotFoundError):
        described.get_issue(1)
    with pytest.raises(NotFoundError):
        described.get_comment(1, 2)


def test_description_update_reuses_comment(described):
    assert described.update_issue_field(1, "description", "New repro")
    issue = described.get_issue(1)
    assert issue.description_comment_id == 1
    assert issue.comment_ids == [1]
    assert described.get_comment(1, 1).text == "New repro"


def test_rename_propagates(service):
    service.create_user("carol", "Dev")
    service.create_issue("X", "d", "carol")
    assert service.update_user("carol", "name", "carole")

    with pytest.raises(NotFoundError):
        service.get_user("carol")
    assert service.get_user("carole").role == "Dev"
    issue = service.get_issue(1)
    assert issue.author_id == "carole"
    assert issue.comments[0].author_id == "carole"


def test_milestone_delete_with_and_without_cascade(users):
    service = users
    milestone = service.create_milestone("M1", "", "2024-01-01", "2024-02-01")
    assert milestone.id == 1
    issue = service.create_issue("A", "", "alice")
    assert issue.id == 1
    assert service.add_issue_to_milestone(1, 1)

    assert service.delete_milestone(1, False)
    assert service.get_issue(1).id == 1

    again = service.create_milestone("M1", "", "2024-01-01", "2024-02-01")
    assert service.add_issue_to_milestone(again.id, 1)
    assert service.delete_milestone(again.id, True)
    with pytest.raises(NotFoundError):
        service.get_issue(1)


def test_numeric_status_alias(users):
    issue = users.create_issue("t", "", "alice")
    assert issue.id == 1
    assert users.update_issue_field(1, "status", "2")
    assert users.get_issue(1).status is Status.IN_PROGRESS


# ---- issues ----

def test_create_issue_without_description(users):
    issue = users.create_issue("t", "", "alice")
    assert issue.comment_ids == []
    assert issue.description_comment_id is None


@pytest.mark.parametrize("title,author", [("", "alice"), ("t", "")])
def test_create_issue_rejects_empty_fields(users, title, author):
    with pytest.raises(ValidationError):
        users.create_issue(title, "d", author)
    assert users.list_all() == []


def test_create_issue_requires_known_author(users):
    with pytest.raises(NotFoundError):
        users.create_issue("t", "d", "mallory")
    assert users.list_all() == []


def test_update_title(described):
    assert described.update_issue_field(1, "title", "Crash on save as")
    assert described.get_issue(1).title == "Crash on save as"
    assert not described.update_issue_field(1, "title", "")
    assert described.get_issue(1).title == "Crash on save as"


def test_update_description_creates_comment(users):
    """Test an issue without description gets one authored by its author"""
    users.create_issue("t", "", "bob")
    users.add_comment_to_issue(1, "first", "alice")
    assert users.update_issue_field(1, "description", "Now described")
    issue = users.get_issue(1)
    assert issue.description_comment_id == 2
    assert issue.description == "Now described"
    assert users.get_comment(1, 2).author_id == "bob"


@pytest.mark.parametrize("field,value", [
    ("priority", "high"),
    ("status", "Closed"),
    ("status", "4"),
    ("description", ""),
    ("assignedTo", "mallory"),
])
def test_update_issue_field_failures_return_false(described, field, value):
    assert not described.update_issue_field(1, field, value)


def test_update_issue_field_missing_issue(users):
    assert not users.update_issue_field(9, "title", "x")


def test_update_assigned_to(described):
    assert described.update_issue_field(1, "assignedTo", "alice")
    assert described.get_issue(1).assigned_to == "alice"
    assert described.update_issue_field(1, "assignedTo", "")
    assert described.get_issue(1).assigned_to is None


def test_assign_requires_known_user_and_issue(described):
    assert not described.assign_user_to_issue(1, "mallory")
    assert not described.assign_user_to_issue(9, "alice")
    assert described.get_issue(1).assigned_to is None


def test_unassign(described):
    described.assign_user_to_issue(1, "alice")
    assert described.unassign_user_from_issue(1)
    assert described.list_unassigned()[0].id == 1
    assert not described.unassign_user_from_issue(9)


def test_delete_missing_issue(users):
    assert not users.delete_issue(3)


# ---- comments ----

def test_add_comment_validation(described):
    with pytest.raises(ValidationError):
        described.add_comment_to_issue(1, "", "alice")
    with pytest.raises(NotFoundError):
        described.add_comment_to_issue(1, "Hi", "mallory")
    with pytest.raises(NotFoundError):
        described.add_comment_to_issue(9, "Hi", "alice")
    assert described.get_issue(1).comment_ids == [1]


def test_update_comment(described):
    described.add_comment_to_issue(1, "Hi", "alice")
    assert described.update_comment(1, 2, "Hello")
    assert described.get_comment(1, 2).text == "Hello"
    assert not described.update_comment(1, 2, "")
    assert not described.update_comment(1, 9, "x")


def test_delete_comment(described):
    described.add_comment_to_issue(1, "Hi", "alice")
    assert described.delete_comment(1, 2)
    assert described.get_issue(1).comment_ids == [1]
    assert not described.delete_comment(1, 2)
    assert not described.delete_comment(9, 1)


def test_delete_description_comment(described):
    assert described.delete_comment(1, 1)
    issue = described.get_issue(1)
    assert issue.description_comment_id is None
    assert issue.description == ""


def test_get_all_comments(described):
    described.add_comment_to_issue(1, "Hi", "alice")
    assert [c.text for c in described.get_all_comments(1)] == [
        "Repro: open, save, crash",
        "Hi",
    ]


# ---- users ----

def test_create_user_validation(service):
    with pytest.raises(ValidationError):
        service.create_user("", "Owner")
    with pytest.raises(ValidationError):
        service.create_user("dave", "")


def test_update_user_role(users):
    assert users.update_user("alice", "role", "Owner")
    assert users.get_user("alice").role == "Owner"
    assert not users.update_user("alice", "role", "")
    assert not users.update_user("alice", "email", "a@example.com")
    assert not users.update_user("mallory", "role", "Owner")


def test_rename_to_taken_name_fails(users):
    users.create_issue("t", "", "alice")
    assert not users.update_user("alice", "name", "bob")
    assert users.get_issue(1).author_id == "alice"
    assert {u.name for u in users.list_users()} == {"alice", "bob"}


def test_rename_leaves_no_references(users):
    """Test no issue or comment mentions the old name after a rename"""
    users.create_issue("a", "desc", "alice")
    users.create_issue("b", "", "bob")
    users.assign_user_to_issue(2, "alice")
    users.add_comment_to_issue(2, "me", "alice")

    assert users.update_user("alice", "name", "alicia")
    for issue in users.list_all():
        assert issue.author_id != "alice"
        assert issue.assigned_to != "alice"
        assert all(c.author_id != "alice" for c in issue.comments)
    assert users.get_issue(2).assigned_to == "alicia"


def test_remove_user(users):
    assert users.remove_user("bob")
    assert not users.remove_user("bob")
    assert [u.name for u in users.list_users()] == ["alice"]


# ---- lookups ----

def test_find_by_user_is_case_insensitive(users):
    users.create_issue("a", "", "alice")
    users.create_issue("b", "", "bob")
    assert [i.title for i in users.find_by_user("ALICE")] == ["a"]
    assert users.find_by_user("nobody") == []


def test_find_by_status(users):
    users.create_issue("a", "", "alice")
    users.create_issue("b", "", "alice")
    users.update_issue_field(2, "status", "3")
    assert [i.id for i in users.find_by_status("Done")] == [2]
    assert [i.id for i in users.find_by_status(Status.TO_BE_DONE)] == [1]
    assert users.find_by_status("Closed") == []


def test_list_unassigned(users):
    users.create_issue("a", "", "alice")
    users.create_issue("b", "", "alice")
    users.assign_user_to_issue(1, "bob")
    assert [i.id for i in users.list_unassigned()] == [2]


# ---- tags ----

def test_tags(described):
    assert described.add_tag(1, "bug")
    assert described.add_tag(1, Tag("ui", "blue"))
    assert not described.add_tag(1, "bug")
    assert described.get_issue(1).tag_names == ["bug", "ui"]
    assert [i.id for i in described.find_by_tag("bug")] == [1]
    assert [i.id for i in described.find_by_tags(["bug", "ui"])] == [1]
    assert [t.name for t in described.list_tags()] == ["bug", "ui"]

    assert described.remove_tag(1, "bug")
    assert not described.remove_tag(1, "bug")
    assert described.find_by_tag("bug") == []


def test_tag_failures_return_false(described):
    assert not described.add_tag(9, "bug")
    assert not described.add_tag(1, "")
    assert not described.remove_tag(9, "bug")


# ---- milestones ----

def test_create_milestone_validation(service):
    with pytest.raises(ValidationError):
        service.create_milestone("", "d", "2024-01-01", "2024-02-01")
    with pytest.raises(ValidationError):
        service.create_milestone("M", "d", "", "2024-02-01")
    assert service.list_milestones() == []


def test_update_milestone(service):
    milestone = service.create_milestone("M1", "first", "2024-01-01", "2024-02-01")
    assert service.update_milestone(milestone.id, end_date="2024-03-01")
    updated = service.get_milestone(milestone.id)
    assert updated.name == "M1"
    assert updated.description == "first"
    assert updated.end_date == "2024-03-01"

    assert service.update_milestone(milestone.id, name="Renamed", description="")
    updated = service.get_milestone(milestone.id)
    assert updated.name == "Renamed"
    assert updated.description == ""


def test_update_milestone_failures(service):
    milestone = service.create_milestone("M1", "", "2024-01-01", "2024-02-01")
    assert not service.update_milestone(milestone.id)
    assert not service.update_milestone(milestone.id, name="")
    assert not service.update_milestone(99, name="x")
    assert service.get_milestone(milestone.id).name == "M1"


def test_update_milestone_field(service):
    milestone = service.create_milestone("M1", "", "2024-01-01", "2024-02-01")
    assert service.update_milestone_field(milestone.id, "start_date", "2023-12-01")
    assert service.get_milestone(milestone.id).start_date == "2023-12-01"
    assert not service.update_milestone_field(milestone.id, "owner", "alice")


def test_milestone_membership(users):
    users.create_issue("a", "", "alice")
    milestone = users.create_milestone("M1", "", "2024-01-01", "2024-02-01")
    assert users.add_issue_to_milestone(milestone.id, 1)
    assert users.add_issue_to_milestone(milestone.id, 1)
    assert users.get_milestone(milestone.id).issue_ids == [1]
    assert [i.id for i in users.get_issues_for_milestone(milestone.id)] == [1]

    assert not users.add_issue_to_milestone(milestone.id, 9)
    assert not users.add_issue_to_milestone(99, 1)

    assert users.remove_issue_from_milestone(milestone.id, 1)
    assert users.get_milestone(milestone.id).issue_ids == []
    assert not users.remove_issue_from_milestone(milestone.id, 9)
    assert not users.remove_issue_from_milestone(99, 1)


def test_delete_missing_milestone(service):
    assert not service.delete_milestone(4)


def test_milestone_stats(users):
    milestone = users.create_milestone("M1", "", "2024-01-01", "2024-02-01")
    for title in ["a", "b", "c", "d"]:
        issue = users.create_issue(title, "", "alice")
        users.add_issue_to_milestone(milestone.id, issue.id)
    users.update_issue_field(1, "status", "Done")
    users.update_issue_field(2, "status", "In Progress")

    stats = users.get_milestone_stats(milestone.id)
    assert isinstance(stats, MilestoneStats)
    assert stats.issue_count == 4
    assert stats.status_counts == {"To Be Done": 2, "In Progress": 1, "Done": 1}
    assert stats.completion_percentage == 25.0


def test_milestone_stats_empty(service):
    milestone = service.create_milestone("M1", "", "2024-01-01", "2024-02-01")
    stats = service.get_milestone_stats(milestone.id)
    assert stats.issue_count == 0
    assert stats.completion_percentage == 0.0
    with pytest.raises(NotFoundError):
        service.get_milestone_stats(99)


def test_find_milestones_by_date_range(service):
    service.create_milestone("Q1", "", "2024-01-01", "2024-03-31")
    service.create_milestone("Q2", "", "2024-04-01", "2024-06-30")
    service.create_milestone("Q3", "", "2024-07-01", "2024-09-30")

    def names(milestones):
        return [m.name for m in milestones]

    assert names(service.find_milestones_by_date_range("2024-03-15", "2024-04-15")) == ["Q1", "Q2"]
    assert names(service.find_milestones_by_date_range("2024-05-01", "")) == ["Q2", "Q3"]
    assert names(service.find_milestones_by_date_range("", "2024-01-15")) == ["Q1"]
    assert names(service.find_milestones_by_date_range()) == ["Q1", "Q2", "Q3"]


def test_active_milestones(service):
    service.create_milestone("Q1", "", "2024-01-01", "2024-03-31")
    service.create_milestone("Q2", "", "2024-04-01", "2024-06-30")
    assert [m.name for m in service.get_active_milestones("2024-03-31")] == ["Q1"]
    assert service.get_active_milestones("2025-01-01") == []


def test_completed_milestones(users):
    done = users.create_milestone("done", "", "2024-01-01", "2024-02-01")
    open_ = users.create_milestone("open", "", "2024-01-01", "2024-02-01")
    users.create_milestone("empty", "", "2024-01-01", "2024-02-01")
    for title, milestone in [("a", done), ("b", done), ("c", open_)]:
        issue = users.create_issue(title, "", "alice")
        users.add_issue_to_milestone(milestone.id, issue.id)
    for issue_id in (1, 2):
        users.update_issue_field(issue_id, "status", "Done")

    assert [m.name for m in users.get_completed_milestones()] == ["done"]


def test_milestone_update_schema():
    assert MilestoneUpdate(name="x").changes() == {"name": "x"}
    with pytest.raises(ValueError):
        MilestoneUpdate()
    with pytest.raises(ValueError):
        MilestoneUpdate(start_date="")


# ---- error policy ----

class FailingRepository:
    """Repository double whose every call fails in the backend"""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise BackendError("disk I/O error")
        return fail


def test_backend_errors_propagate_from_soft_operations():
    service = IssueTrackerService(FailingRepository())
    with pytest.raises(BackendError):
        service.delete_issue(1)
    with pytest.raises(BackendError):
        service.update_issue_field(1, "title", "x")
    with pytest.raises(BackendError):
        service.add_tag(1, "bug")


def test_conflict_is_a_tracker_error_not_validation():
    assert not issubclass(ConflictError, ValidationError)
