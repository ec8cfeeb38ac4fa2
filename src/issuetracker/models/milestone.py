"""Milestone row models"""

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from .base import Base


class MilestoneRow(Base):
    """Persistent milestone row"""

    __tablename__ = "milestones"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="", server_default="")
    start_date = Column(Text, nullable=False)
    end_date = Column(Text, nullable=False)

    memberships = relationship(
        "MilestoneIssueRow",
        order_by="MilestoneIssueRow.issue_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<MilestoneRow(id={self.id}, name='{self.name}')>"


class MilestoneIssueRow(Base):
    """Non-owning link between a milestone and an issue"""

    __tablename__ = "milestone_issues"

    # Composite primary key
    milestone_id = Column(
        Integer, ForeignKey("milestones.id", ondelete="CASCADE"), primary_key=True, autoincrement=False
    )
    issue_id = Column(
        Integer, ForeignKey("issues.id", ondelete="CASCADE"), primary_key=True, autoincrement=False
    )

    def __repr__(self):
        return f"<MilestoneIssueRow(milestone={self.milestone_id}, issue={self.issue_id})>"
