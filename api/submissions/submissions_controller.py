# Controller
import math
from datetime import datetime
from typing import Callable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from api.submissions.submissions_schema import (
    MealBreakdown,
    MealFootprint,
    ScorePreview,
    SubmissionCreate,
    SubmissionRead,
    SubmissionResult,
)
from api.submissions.submissions_service import SubmissionService, payload_footprint
from api.user.user_schema import Message
from config.points_config import ChallengeType
from scoring.errors import RateLimitExceeded, SubmissionValidationError
from scoring.formatting import format_carbon_footprint, format_score
from scoring.payloads import FoodPayload
from scoring.rules import meal_footprints, persisted_score, score_payload
from scoring.validation import validate_payload
from utils.cache_utils import CacheManager, RateLimiter
from utils.query_params import QueryParams


def validation_http_error(e: SubmissionValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"code": e.code, "message": e.reason},
    )


def rate_limit_http_error(e: RateLimitExceeded) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail={"code": "RATE_LIMITED", "message": "Too many submissions. Please wait a moment and try again."},
        headers={
            "X-RateLimit-Limit": str(e.limit),
            "X-RateLimit-Remaining": "0",
            "Retry-After": str(max(1, math.ceil(e.retry_after))),
        },
    )


class SubmissionController:
    @staticmethod
    def create_submission(
        payload: SubmissionCreate,
        db: Session,
        cache: CacheManager,
        limiter: RateLimiter,
        clock: Callable[[], datetime],
        user_id: str,
    ) -> SubmissionResult:
        service = SubmissionService(db, cache, limiter, clock)
        try:
            submission, user, unlocked = service.create_submission(user_id, payload.challenge_id, payload.payload)
        except SubmissionValidationError as e:
            raise validation_http_error(e)
        except RateLimitExceeded as e:
            raise rate_limit_http_error(e)

        return SubmissionResult(
            submission=SubmissionRead.model_validate(submission),
            formatted_score=format_score(submission.score),
            total_score=user.total_score,
            level=user.level,
            level_progress=user.level_progress,
            unlocked_achievements=unlocked,
        )

    @staticmethod
    def preview(payload) -> ScorePreview:
        try:
            validate_payload(payload)
        except SubmissionValidationError as e:
            raise validation_http_error(e)
        score = persisted_score(payload)
        return ScorePreview(
            type=ChallengeType(payload.type),
            raw_score=score_payload(payload),
            score=score,
            formatted_score=format_score(score),
            footprint_kg=payload_footprint(payload),
        )

    @staticmethod
    def list_mine(db: Session, user_id: str, params: Optional[QueryParams]) -> List[SubmissionRead]:
        try:
            rows = SubmissionService(db).list_user_submissions(user_id, params)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
        return [SubmissionRead.model_validate(s) for s in rows]

    @staticmethod
    def get_submission(submission_id: str, db: Session, user_id: str) -> SubmissionRead:
        return SubmissionRead.model_validate(SubmissionService(db).get_visible_submission(submission_id, user_id))

    @staticmethod
    def meal_breakdown(submission_id: str, db: Session, user_id: str) -> MealBreakdown:
        submission = SubmissionService(db).get_visible_submission(submission_id, user_id)
        if submission.type != ChallengeType.food:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only food submissions have meals")
        totals = meal_footprints(FoodPayload.model_validate(submission.payload).items)
        return MealBreakdown(
            submission_id=submission.id,
            meals=[
                MealFootprint(meal_type=meal, footprint_kg=kg, formatted=format_carbon_footprint(kg))
                for meal, kg in totals.items()
            ],
            total_kg=sum(totals.values()),
        )

    @staticmethod
    def delete_submission(
        submission_id: str, db: Session, cache: CacheManager, clock: Callable[[], datetime], user_id: str
    ) -> Message:
        user = SubmissionService(db, cache, clock=clock).delete_submission(submission_id, user_id)
        return Message(message=f"Submission deleted. Your total score is now {format_score(user.total_score)}")
