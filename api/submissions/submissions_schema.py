from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from config.points_config import ChallengeType, MealType
from scoring.payloads import SubmissionPayload


# ----- Request Schemas -----
class SubmissionCreate(BaseModel):
    challenge_id: str
    payload: SubmissionPayload

    model_config = ConfigDict(extra="forbid")


class SubmissionPreviewRequest(BaseModel):
    payload: SubmissionPayload

    model_config = ConfigDict(extra="forbid")


# ----- Response Schemas -----
class SubmissionRead(BaseModel):
    id: str
    user_id: str
    challenge_id: str
    crew_id: str
    type: ChallengeType
    payload: dict
    score: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SubmissionResult(BaseModel):
    submission: SubmissionRead
    formatted_score: str
    total_score: float
    level: int
    level_progress: float
    unlocked_achievements: List[str] = Field(default_factory=list)


class ScorePreview(BaseModel):
    type: ChallengeType
    raw_score: float = Field(..., description="Score before per-submission caps")
    score: float = Field(..., description="Score that would be stored")
    formatted_score: str
    footprint_kg: Optional[float] = Field(None, description="Estimated kg CO2e for carbon and food payloads")


class MealFootprint(BaseModel):
    meal_type: MealType
    footprint_kg: float
    formatted: str


class MealBreakdown(BaseModel):
    submission_id: str
    meals: List[MealFootprint]
    total_kg: float
