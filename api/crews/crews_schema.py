from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CrewCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=50)
    description: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(extra="forbid")


class CrewJoin(BaseModel):
    join_code: str = Field(..., min_length=4, max_length=12)

    model_config = ConfigDict(extra="forbid")


class CrewMemberRead(BaseModel):
    user_id: str
    display_name: str
    total_score: float
    level: int
    is_leader: bool
    joined_at: datetime


class CrewRead(BaseModel):
    id: str
    name: str
    description: str
    leader_id: str
    score: float
    member_count: int
    # only shown to members
    join_code: Optional[str] = None
    created_at: datetime


class CrewDetail(CrewRead):
    members: List[CrewMemberRead] = Field(default_factory=list)


class JoinCodeResponse(BaseModel):
    join_code: str


class TopPerformer(BaseModel):
    user_id: str
    display_name: str
    score: float


class RecentActivity(BaseModel):
    user_id: str
    display_name: str
    challenge_id: str
    score: float
    created_at: datetime


class CrewStats(BaseModel):
    total_score: float
    member_count: int
    average_score: float
    top_performer: Optional[TopPerformer] = None
    recent_activity: List[RecentActivity] = Field(default_factory=list)


class CrewRankingEntry(BaseModel):
    crew_id: str
    crew_name: str
    score: float
    formatted_score: str
    position: int
    tied_with: Optional[int] = None
    member_count: int
