"""Persistence layer: repository contract and its backends"""

from .config import RepositoryConfig
from .factory import create_repository
from .memory_repository import InMemoryRepository
from .repository import Repository
from .sql_repository import SqlRepository

__all__ = [
    "InMemoryRepository",
    "Repository",
    "RepositoryConfig",
    "SqlRepository",
    "create_repository",
]
