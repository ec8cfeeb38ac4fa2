"""Repository configuration"""

import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

BACKEND_ENV = "ISSUE_REPO_BACKEND"
DB_PATH_ENV = "ISSUE_DB_PATH"
DEFAULT_DB_PATH = "issues.db"
MEMORY_LOCATION = ":memory:"


class RepositoryConfig(BaseModel):
    """Explicit settings consumed by ``create_repository``.

    ``sqlite`` stores to ``db_path`` on disk, ``memory`` runs the same
    relational backend against an in-process database, and ``dict`` selects
    the pure in-memory backend.
    """

    model_config = ConfigDict(frozen=True)

    backend: Literal["sqlite", "memory", "dict"] = Field("sqlite", description="Storage backend")
    db_path: str = Field(DEFAULT_DB_PATH, min_length=1, description="On-disk database file")
    echo: bool = Field(False, description="Log every SQL statement")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "RepositoryConfig":
        """Build the configuration from ISSUE_REPO_BACKEND / ISSUE_DB_PATH"""
        source = os.environ if env is None else env
        backend = (source.get(BACKEND_ENV) or "").strip().lower()
        return cls(
            backend="memory" if backend == "memory" else "sqlite",
            db_path=source.get(DB_PATH_ENV) or DEFAULT_DB_PATH,
        )

    @property
    def is_in_memory(self) -> bool:
        return self.backend in ("memory", "dict")

    def database_location(self) -> str:
        """Path handed to SQLite (``:memory:`` for the in-process variant)"""
        if self.backend == "memory":
            return MEMORY_LOCATION
        return self.db_path

    def ensure_directories(self) -> None:
        if self.backend != "sqlite":
            return
        Path(self.db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
