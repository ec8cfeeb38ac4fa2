"""Pydantic schemas for milestone edits and reports"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MilestoneUpdate(BaseModel):
    """Sparse milestone edit; at least one field must be given"""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, description="Milestone name")
    description: Optional[str] = Field(None, description="Free-form description")
    start_date: Optional[str] = Field(None, min_length=1, description="ISO start date")
    end_date: Optional[str] = Field(None, min_length=1, description="ISO end date")

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set or all(
            getattr(self, name) is None for name in self.model_fields_set
        ):
            raise ValueError("At least one milestone field must be provided")
        return self

    def changes(self) -> Dict[str, str]:
        """Fields that were actually provided"""
        return self.model_dump(exclude_none=True)


class MilestoneStats(BaseModel):
    """Progress summary of one milestone"""

    milestone_id: int
    name: str
    issue_count: int = Field(0, ge=0)
    status_counts: Dict[str, int] = Field(default_factory=dict)
    completion_percentage: float = Field(0.0, ge=0.0, le=100.0)
