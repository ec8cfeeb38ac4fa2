"""Comment row model"""

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlalchemy import text as sql_text
from sqlalchemy.orm import relationship

from .base import Base


class CommentRow(Base):
    """Comment keyed by (issue_id, id); ids are allocated per issue"""

    __tablename__ = "comments"

    # Composite primary key
    issue_id = Column(
        Integer, ForeignKey("issues.id", ondelete="CASCADE"), primary_key=True, autoincrement=False
    )
    id = Column(Integer, primary_key=True, autoincrement=False)

    author_id = Column(Text, nullable=False)
    text = Column(Text, nullable=False)
    timestamp = Column(Integer, nullable=False, default=0, server_default=sql_text("0"))  # epoch ms

    issue = relationship("IssueRow", back_populates="comments")

    __table_args__ = (
        Index("idx_comments_issue", "issue_id"),
    )

    def __repr__(self):
        return f"<CommentRow(issue={self.issue_id}, id={self.id}, author='{self.author_id}')>"
