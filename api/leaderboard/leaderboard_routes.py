from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.leaderboard.leaderboard_controller import LeaderboardController
from api.leaderboard.leaderboard_schema import CrewLeaderboard
from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from utils.cache_utils import CacheManager
from utils.deps import get_cache

router = APIRouter(prefix="/leaderboard", tags=["Leaderboard"])


@router.get("/crews/{crew_id}", response_model=CrewLeaderboard)
def crew_leaderboard(
    crew_id: str,
    challenge_id: Optional[str] = Query(None, description="Rank only this challenge's submissions"),
    start: Optional[datetime] = Query(None, description="Only submissions created at or after this time"),
    end: Optional[datetime] = Query(None, description="Only submissions created at or before this time"),
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    """
    Members ranked by summed submission score. Tied members share a position.
    Challenges marked lower_score_is_better rank ascending.
    """
    return LeaderboardController.crew_leaderboard(crew_id, challenge_id, start, end, db, cache, current_user["id"])
