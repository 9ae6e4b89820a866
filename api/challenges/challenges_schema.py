from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config.points_config import ChallengeType
from utils.clock import to_naive_utc


class ChallengeCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    type: ChallengeType
    crew_id: Optional[str] = Field(None, description="Defaults to the creator's crew")
    start_date: datetime
    end_date: datetime
    lower_score_is_better: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class ChallengeRecord(BaseModel):
    """Stored challenge fields, as cached."""
    id: str
    title: str
    description: Optional[str] = ""
    type: ChallengeType
    crew_id: str
    created_by: str
    start_date: datetime
    end_date: datetime
    duration_days: int
    lower_score_is_better: bool
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChallengeRead(ChallengeRecord):
    display_status: str = Field(..., description="Upcoming, Active, Expired or Completed")
    progress: float = Field(..., description="Percent of the challenge window elapsed")


class ChallengeClose(BaseModel):
    status: Literal["completed", "cancelled"] = "completed"

    model_config = ConfigDict(extra="forbid")


class ChallengeParticipant(BaseModel):
    user_id: str
    display_name: str
    score: float
    submissions: int


class ChallengeStats(BaseModel):
    total_submissions: int
    average_score: float
    best_score: float
    participation_rate: float
    top_participants: List[ChallengeParticipant] = Field(default_factory=list)
