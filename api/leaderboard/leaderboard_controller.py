# Controller
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from api.crews.crews_service import CrewService
from api.leaderboard.leaderboard_schema import CrewLeaderboard
from api.leaderboard.leaderboard_service import LeaderboardService
from utils.cache_utils import CacheManager
from utils.clock import to_naive_utc


class LeaderboardController:
    @staticmethod
    def crew_leaderboard(
        crew_id: str,
        challenge_id: Optional[str],
        start: Optional[datetime],
        end: Optional[datetime],
        db: Session,
        cache: CacheManager,
        user_id: str,
    ) -> CrewLeaderboard:
        start = to_naive_utc(start) if start else None
        end = to_naive_utc(end) if end else None
        if start and end and end < start:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="end must not be before start")

        crews = CrewService(db)
        crews.require_member(crews.get_crew_or_404(crew_id), user_id)
        return CrewLeaderboard(**LeaderboardService(db, cache).crew_leaderboard(crew_id, challenge_id, start, end))
