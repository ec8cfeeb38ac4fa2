"""Repository construction from configuration"""

import logging
from typing import Optional

from .config import RepositoryConfig
from .memory_repository import InMemoryRepository
from .repository import Repository
from .sql_repository import SqlRepository

logger = logging.getLogger(__name__)


def create_repository(config: Optional[RepositoryConfig] = None) -> Repository:
    """Open the repository described by ``config`` (read from the environment when omitted)"""
    if config is None:
        config = RepositoryConfig.from_env()

    if config.backend == "dict":
        logger.info("Using in-memory repository")
        return InMemoryRepository()

    config.ensure_directories()
    location = config.database_location()
    logger.info("Using SQLite repository at %s", location)
    return SqlRepository(location, echo=config.echo)
