from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class LeaderboardEntryRead(BaseModel):
    user_id: str
    display_name: str
    score: float
    formatted_score: str
    position: int = Field(..., description="1-based competition rank")
    tied_with: Optional[int] = Field(None, description="Entries sharing this position, when more than one")
    crew_id: Optional[str] = None
    crew_name: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)


class CrewLeaderboard(BaseModel):
    crew_id: str
    challenge_id: Optional[str] = None
    lower_score_is_better: bool = False
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    entries: List[LeaderboardEntryRead]
