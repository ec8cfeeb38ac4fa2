"""Issue row model"""

from sqlalchemy import Column, Integer, String, Text, text
from sqlalchemy.orm import relationship

from ..domain.status import DEFAULT_STATUS
from .base import Base, NO_DESCRIPTION


class IssueRow(Base):
    """Persistent issue row; comments and tags live in their own tables"""

    __tablename__ = "issues"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    author_id = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    description_comment_id = Column(
        Integer, nullable=False, default=NO_DESCRIPTION, server_default=text(str(NO_DESCRIPTION))
    )
    assigned_to = Column(Text, nullable=True)  # NULL when unassigned
    status = Column(
        String(32), nullable=False, default=DEFAULT_STATUS.value, server_default=DEFAULT_STATUS.value
    )
    created_at = Column(Integer, nullable=False, default=0, server_default=text("0"))  # epoch ms

    comments = relationship(
        "CommentRow",
        back_populates="issue",
        order_by="CommentRow.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tags = relationship(
        "IssueTagRow",
        back_populates="issue",
        order_by="IssueTagRow.name",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<IssueRow(id={self.id}, title='{(self.title or '')[:50]}', status='{self.status}')>"
