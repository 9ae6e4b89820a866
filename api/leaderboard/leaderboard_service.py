import logging
from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from api.achievements.achievements_service import keys_for_users
from api.challenges.challenges_service import ChallengeService
from api.crews.crews_service import CrewService
from api.submissions.submissions_model import Submission
from api.user.user_service import DisplayNameResolver
from scoring.formatting import format_score
from scoring.leaderboard import aggregate_leaderboard
from utils.cache_utils import CacheKeys, CacheManager

logger = logging.getLogger(__name__)


class LeaderboardService:
    """
    Ranked per-user views over a crew's submissions, optionally narrowed to
    one challenge and to a created_at window. Results are cached for the
    cache TTL and dropped whenever a submission in the crew is created or
    deleted.
    """

    def __init__(self, db: Session, cache: Optional[CacheManager] = None):
        self.db = db
        self.cache = cache

    def crew_leaderboard(
        self,
        crew_id: str,
        challenge_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> dict:
        """`start` and `end` bound submission created_at, both inclusive."""
        crew = CrewService(self.db).get_crew_or_404(crew_id)
        lower_is_better = False
        if challenge_id:
            challenge = ChallengeService(self.db).get_challenge_or_404(challenge_id)
            if challenge.crew_id != crew.id:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found in this crew")
            lower_is_better = challenge.lower_score_is_better

        def build() -> dict:
            return {
                "crew_id": crew.id,
                "challenge_id": challenge_id,
                "lower_score_is_better": lower_is_better,
                "start": start,
                "end": end,
                "entries": self._entries(crew, challenge_id, lower_is_better, start, end),
            }

        if not self.cache:
            return build()
        return self.cache.get_or_set(CacheKeys.leaderboard(crew_id, challenge_id, start, end), build)

    def _entries(
        self,
        crew,
        challenge_id: Optional[str],
        lower_is_better: bool,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[dict]:
        query = self.db.query(Submission.user_id, Submission.score).filter(Submission.crew_id == crew.id)
        if challenge_id:
            query = query.filter(Submission.challenge_id == challenge_id)
        if start:
            query = query.filter(Submission.created_at >= start)
        if end:
            query = query.filter(Submission.created_at <= end)
        submissions = [{"user_id": uid, "score": score} for uid, score in query.all()]

        user_ids = {s["user_id"] for s in submissions}
        names = DisplayNameResolver(self.db).resolve(user_ids)
        achievements = keys_for_users(self.db, user_ids)

        entries = aggregate_leaderboard(
            submissions,
            crew_id=crew.id,
            lower_score_is_better=lower_is_better,
            display_names=names,
        )
        rows = []
        for entry in entries:
            entry.crew_name = crew.name
            entry.achievements = achievements.get(entry.user_id, [])
            rows.append({**asdict(entry), "formatted_score": format_score(entry.score)})
        logger.debug("built leaderboard for crew %s (%d entries)", crew.id, len(rows))
        return rows
