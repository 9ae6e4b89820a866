import logging
import math
from datetime import datetime
from typing import Callable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from api.challenges.challenges_model import Challenge
from api.challenges.challenges_schema import ChallengeCreate, ChallengeRecord
from api.crews.crews_service import CrewService
from api.submissions.submissions_model import Submission
from api.user.user_service import DisplayNameResolver
from scoring.errors import UNKNOWN_USER
from scoring.validation import validate_challenge_description, validate_challenge_title
from utils.cache_utils import CacheKeys, CacheManager
from utils.clock import utcnow

logger = logging.getLogger(__name__)

TOP_PARTICIPANTS_LIMIT = 5


# ─── Derived state ──────────────────────────────────────────────────────────────

def is_challenge_active(challenge, now: datetime) -> bool:
    return challenge.status == "active" and challenge.start_date <= now <= challenge.end_date


def challenge_display_status(challenge, now: datetime) -> str:
    if challenge.status != "active":
        return "Completed"
    if now < challenge.start_date:
        return "Upcoming"
    if now > challenge.end_date:
        return "Expired"
    return "Active"


def challenge_progress(challenge, now: datetime) -> float:
    if challenge.status != "active":
        return 100.0
    total = (challenge.end_date - challenge.start_date).total_seconds()
    elapsed = (now - challenge.start_date).total_seconds()
    return min(100.0, max(0.0, elapsed / total * 100))


def duration_in_days(start: datetime, end: datetime) -> int:
    return max(1, math.ceil((end - start).total_seconds() / 86400))


class ChallengeService:
    def __init__(
        self,
        db: Session,
        cache: Optional[CacheManager] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.cache = cache
        self.clock = clock

    def get_challenge_or_404(self, challenge_id: str) -> Challenge:
        challenge = self.db.get(Challenge, challenge_id)
        if not challenge:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Challenge not found")
        return challenge

    def _invalidate(self, crew_id: str, challenge_id: Optional[str] = None) -> None:
        if not self.cache:
            return
        self.cache.delete(CacheKeys.challenges(crew_id))
        if challenge_id:
            self.cache.delete(CacheKeys.challenge_stats(challenge_id))

    def create_challenge(self, data: ChallengeCreate, user_id: str) -> Challenge:
        crews = CrewService(self.db)
        if data.crew_id:
            crew = crews.get_crew_or_404(data.crew_id)
        else:
            crew = crews.get_user_crew(user_id)
            if not crew:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Join a crew before creating challenges")
        crews.require_leader(crew, user_id)

        now = self.clock()
        challenge = Challenge(
            title=validate_challenge_title(data.title),
            description=validate_challenge_description(data.description),
            type=data.type,
            crew_id=crew.id,
            created_by=user_id,
            start_date=data.start_date,
            end_date=data.end_date,
            duration_days=duration_in_days(data.start_date, data.end_date),
            lower_score_is_better=data.lower_score_is_better,
            status="active",
            created_at=now,
            updated_at=now,
        )
        self.db.add(challenge)
        self.db.commit()
        self.db.refresh(challenge)
        self._invalidate(crew.id)
        logger.info("challenge %s (%s) created for crew %s", challenge.id, challenge.type.value, crew.id)
        return challenge

    def _active_records(self, crew_id: str) -> List[dict]:
        rows = (
            self.db.query(Challenge)
              .filter(Challenge.crew_id == crew_id, Challenge.status == "active")
              .order_by(Challenge.start_date.asc())
              .all()
        )
        return [ChallengeRecord.model_validate(c).model_dump(mode="json") for c in rows]

    def list_active(self, crew_id: str) -> List[ChallengeRecord]:
        if self.cache:
            rows = self.cache.get_or_set(CacheKeys.challenges(crew_id), lambda: self._active_records(crew_id))
        else:
            rows = self._active_records(crew_id)
        return [ChallengeRecord.model_validate(r) for r in rows]

    def close_challenge(self, challenge_id: str, user_id: str, new_status: str) -> Challenge:
        challenge = self.get_challenge_or_404(challenge_id)
        crews = CrewService(self.db)
        crews.require_leader(crews.get_crew_or_404(challenge.crew_id), user_id)
        if challenge.status != "active":
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Challenge is already {challenge.status}")
        challenge.status = new_status
        self.db.commit()
        self.db.refresh(challenge)
        self._invalidate(challenge.crew_id, challenge.id)
        return challenge

    def complete_expired(self) -> int:
        """Mark active challenges whose window has ended as completed."""
        now = self.clock()
        expired = (
            self.db.query(Challenge)
              .filter(Challenge.status == "active", Challenge.end_date < now)
              .all()
        )
        for challenge in expired:
            challenge.status = "completed"
        self.db.commit()
        for crew_id in {c.crew_id for c in expired}:
            self._invalidate(crew_id)
        return len(expired)

    # ─── Stats ──────────────────────────────────────────────────────────────────

    def _compute_stats(self, challenge: Challenge) -> dict:
        submissions = self.db.query(Submission).filter(Submission.challenge_id == challenge.id).all()
        member_count = len(challenge.crew.members) if challenge.crew else 0

        per_user = {}
        for s in submissions:
            entry = per_user.setdefault(s.user_id, {"score": 0.0, "submissions": 0})
            entry["score"] += s.score
            entry["submissions"] += 1

        names = DisplayNameResolver(self.db).resolve(per_user.keys())
        participants = sorted(
            (
                {
                    "user_id": uid,
                    "display_name": names.get(uid, UNKNOWN_USER),
                    "score": data["score"],
                    "submissions": data["submissions"],
                }
                for uid, data in per_user.items()
            ),
            key=lambda p: p["score"],
            reverse=not challenge.lower_score_is_better,
        )

        total = len(submissions)
        return {
            "total_submissions": total,
            "average_score": sum(s.score for s in submissions) / total if total else 0,
            "best_score": (
                (min if challenge.lower_score_is_better else max)(s.score for s in submissions)
                if total else 0
            ),
            "participation_rate": len(per_user) / member_count * 100 if member_count else 0,
            "top_participants": participants[:TOP_PARTICIPANTS_LIMIT],
        }

    def get_stats(self, challenge_id: str) -> dict:
        challenge = self.get_challenge_or_404(challenge_id)
        if not self.cache:
            return self._compute_stats(challenge)
        return self.cache.get_or_set(CacheKeys.challenge_stats(challenge_id), lambda: self._compute_stats(challenge))
