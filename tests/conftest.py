"""Test configuration and fixtures"""

import pytest

from issuetracker.service import IssueTrackerService
from issuetracker.storage import InMemoryRepository, SqlRepository

BACKENDS = ["sqlite-memory", "sqlite-file", "dict"]


@pytest.fixture
def db_path(tmp_path):
    """Database file inside a not-yet-created directory"""
    return tmp_path / "data" / "issues.db"


@pytest.fixture(params=BACKENDS)
def repository(request, db_path):
    """Every repository backend, each starting empty"""
    if request.param == "sqlite-memory":
        repo = SqlRepository(":memory:")
    elif request.param == "sqlite-file":
        repo = SqlRepository(str(db_path))
    else:
        repo = InMemoryRepository()

    yield repo

    repo.close()


@pytest.fixture
def sql_repository(db_path):
    """On-disk relational repository"""
    repo = SqlRepository(str(db_path))
    yield repo
    repo.close()


@pytest.fixture
def service(repository):
    return IssueTrackerService(repository)


@pytest.fixture
def users(service):
    """alice (Developer) and bob (Reporter)"""
    service.create_user("alice", "Developer")
    service.create_user("bob", "Reporter")
    return service
