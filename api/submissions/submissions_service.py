import logging
from datetime import datetime
from typing import Callable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.achievements.achievements_service import submission_scored
from api.challenges.challenges_service import ChallengeService, is_challenge_active
from api.crews.crews_model import Crew
from api.crews.crews_service import adjust_crew_score, recompute_crew_score
from api.submissions.submissions_model import Submission
from api.user.user_model import User
from api.user.user_service import apply_score_delta, get_user_or_404, recompute_total
from config.points_config import ChallengeType
from config.settings import settings
from scoring.errors import SubmissionValidationError
from scoring.payloads import CarbonPayload, FoodPayload, RecyclingPayload, ShowerPayload
from scoring.rules import carbon_trip_footprint, food_footprint, persisted_score
from scoring.validation import check_recycling_daily_cap, check_shower_daily_cap, validate_payload
from utils.cache_utils import CacheKeys, CacheManager, RateLimiter
from utils.clock import day_bounds, utcnow
from utils.query_params import QueryParams

logger = logging.getLogger(__name__)

DELETABLE_TYPES = {ChallengeType.recycling, ChallengeType.shower}


def payload_footprint(payload) -> Optional[float]:
    if isinstance(payload, CarbonPayload):
        return sum(carbon_trip_footprint(t) for t in payload.trips)
    if isinstance(payload, FoodPayload):
        return food_footprint(payload.items)
    return None


class SubmissionService:
    def __init__(
        self,
        db: Session,
        cache: Optional[CacheManager] = None,
        limiter: Optional[RateLimiter] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.cache = cache
        self.limiter = limiter
        self.clock = clock

    # ─── Lookups ────────────────────────────────────────────────────────────────

    def get_submission_or_404(self, submission_id: str) -> Submission:
        submission = self.db.get(Submission, submission_id)
        if not submission:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")
        return submission

    def get_visible_submission(self, submission_id: str, user_id: str) -> Submission:
        """Own submissions, or submissions of a crew the user belongs to."""
        submission = self.get_submission_or_404(submission_id)
        if submission.user_id != user_id:
            crew = self.db.get(Crew, submission.crew_id)
            if not crew or user_id not in crew.member_ids:
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to view this submission")
        return submission

    def list_user_submissions(self, user_id: str, params: Optional[QueryParams] = None) -> List[Submission]:
        query = self.db.query(Submission).filter(Submission.user_id == user_id)
        if params:
            return params.apply(query, Submission).all()
        return query.order_by(Submission.created_at.desc()).all()

    def _today(self, user_id: str, submission_type: ChallengeType) -> List[Submission]:
        start, end = day_bounds(self.clock())
        return (
            self.db.query(Submission)
              .filter(
                  Submission.user_id == user_id,
                  Submission.type == submission_type,
                  Submission.created_at >= start,
                  Submission.created_at < end,
              )
              .all()
        )

    # ─── Checks ─────────────────────────────────────────────────────────────────

    def _check_daily_caps(self, user_id: str, payload) -> None:
        if isinstance(payload, ShowerPayload):
            today = self._today(user_id, ChallengeType.shower)
            skipped = sum(1 for s in today if s.payload.get("skipped"))
            check_shower_daily_cap(
                payload,
                completed_today=len(today) - skipped,
                skipped_today=skipped,
                max_completed=settings.SHOWER_DAILY_LIMIT,
                max_skips=settings.SHOWER_DAILY_SKIPS,
            )
        elif isinstance(payload, RecyclingPayload):
            items_today = sum(
                RecyclingPayload.model_validate(s.payload).total_items
                for s in self._today(user_id, ChallengeType.recycling)
            )
            check_recycling_daily_cap(payload, items_today, limit=settings.RECYCLING_DAILY_ITEM_LIMIT)

    def _check_challenge(self, challenge, user_id: str, payload) -> None:
        if not is_challenge_active(challenge, self.clock()):
            raise SubmissionValidationError("This challenge is not active", code="CHALLENGE_INACTIVE")
        crew = self.db.get(Crew, challenge.crew_id)
        if not crew or user_id not in crew.member_ids:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not a member of this challenge's crew")
        if challenge.type != ChallengeType(payload.type):
            raise SubmissionValidationError(
                f"This is a {challenge.type.value} challenge; {payload.type} submissions are not accepted",
                code="TYPE_MISMATCH",
            )

    # ─── Writes ─────────────────────────────────────────────────────────────────

    def _invalidate(self, user_id: str, crew_id: str, challenge_id: str) -> None:
        if not self.cache:
            return
        self.cache.delete_prefix(CacheKeys.leaderboard_prefix(crew_id))
        self.cache.delete(CacheKeys.user_stats(user_id))
        self.cache.delete(CacheKeys.crew_stats(crew_id))
        self.cache.delete(CacheKeys.challenge_stats(challenge_id))

    def create_submission(self, user_id: str, challenge_id: str, payload):
        """
        Validate, rate-limit, score and persist one submission.

        Returns (submission, user, unlocked_achievement_keys).
        """
        try:
            validate_payload(payload)
        except SubmissionValidationError as e:
            logger.info("rejected %s submission from %s: %s", payload.type, user_id, e.reason)
            raise

        challenge = ChallengeService(self.db, clock=self.clock).get_challenge_or_404(challenge_id)
        self._check_challenge(challenge, user_id, payload)

        key = RateLimiter.submission_key(user_id, challenge_id)
        token = self.limiter.hit(key) if self.limiter else None
        try:
            self._check_daily_caps(user_id, payload)
            submission, user, score = self._persist(user_id, challenge, payload)
        except Exception:
            # rejected or failed attempts do not use up the window
            if self.limiter:
                self.limiter.release(key, token)
            raise

        self._invalidate(user_id, submission.crew_id, submission.challenge_id)
        logger.info(
            "scored %s submission %s for user %s: %.2f (total %.2f)",
            submission.type.value, submission.id, user_id, score, user.total_score,
        )

        unlocked = []
        for _receiver, result in submission_scored.send(self, db=self.db, submission=submission, user=user):
            unlocked.extend(result or [])
        return submission, user, unlocked

    def _persist(self, user_id: str, challenge, payload):
        score = persisted_score(payload)
        user = get_user_or_404(self.db, user_id)
        submission = Submission(
            user_id=user_id,
            challenge_id=challenge.id,
            crew_id=challenge.crew_id,
            type=ChallengeType(payload.type),
            payload=payload.model_dump(mode="json"),
            score=score,
            created_at=self.clock(),
        )
        self.db.add(submission)
        try:
            apply_score_delta(self.db, user, score)
            adjust_crew_score(self.db, challenge.crew_id, score)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(submission)
        self.db.refresh(user)
        return submission, user, score

    def delete_submission(self, submission_id: str, user_id: str) -> User:
        submission = self.get_submission_or_404(submission_id)
        if submission.user_id != user_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only delete your own submissions")
        if submission.type not in DELETABLE_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{submission.type.value.capitalize()} submissions cannot be deleted",
            )

        crew_id, challenge_id, kind = submission.crew_id, submission.challenge_id, submission.type
        self.db.delete(submission)
        self.db.commit()
        recompute_crew_score(self.db, crew_id)
        self._invalidate(user_id, crew_id, challenge_id)
        logger.info("deleted %s submission %s for user %s", kind.value, submission_id, user_id)
        return recompute_total(self.db, user_id)
