"""Issue tag row model"""

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from .base import Base


class IssueTagRow(Base):
    """Tag attached to one issue"""

    __tablename__ = "issue_tags"

    # Composite primary key
    issue_id = Column(Integer, ForeignKey("issues.id", ondelete="CASCADE"), primary_key=True)
    name = Column(Text, primary_key=True)

    color = Column(Text, nullable=False, default="", server_default="")

    issue = relationship("IssueRow", back_populates="tags")

    def __repr__(self):
        return f"<IssueTagRow(issue={self.issue_id}, name='{self.name}')>"
