"""Base SQLAlchemy models and configuration"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# issues.description_comment_id value meaning "no description comment"
NO_DESCRIPTION = -1
