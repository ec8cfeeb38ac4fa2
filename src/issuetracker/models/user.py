"""User row model"""

from sqlalchemy import Column, Text

from .base import Base


class UserRow(Base):
    __tablename__ = "users"

    name = Column(Text, primary_key=True)
    role = Column(Text, nullable=False)

    def __repr__(self):
        return f"<UserRow(name='{self.name}', role='{self.role}')>"
