from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


# ----- Response Schemas -----
class UserProfileResponse(BaseModel):
    id: str
    display_name: str
    email: Optional[str] = None
    total_score: float = Field(0, description="Sum of all submission scores")
    level: int = Field(1, description="floor(sqrt(total_score / 100)) + 1")
    level_progress: float = Field(0, description="Percent of the way to the next level")
    crew_id: Optional[str] = None
    achievements: List[str] = Field(default_factory=list, description="Unlocked achievement keys")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserStats(BaseModel):
    total_score: float
    level: int
    level_progress: float
    achievements: List[str]
    submissions_count: int
    average_score: float
    best_score: float
    last_submission: Optional[datetime] = None


# ----- Update Schema -----
class UserUpdate(BaseModel):
    display_name: str = Field(
        ...,
        min_length=2,
        max_length=50,
        description="Name shown on leaderboards, 2 to 50 chars"
    )

    model_config = ConfigDict(extra="forbid")


# ----- Rankings -----
class UserRankingEntry(BaseModel):
    user_id: str
    display_name: str
    score: float
    formatted_score: str
    position: int
    tied_with: Optional[int] = None
    level: int


# ----- Generic Response -----
class Message(BaseModel):
    message: str
