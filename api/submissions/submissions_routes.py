from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.submissions.submissions_controller import SubmissionController
from api.submissions.submissions_schema import (
    MealBreakdown,
    ScorePreview,
    SubmissionCreate,
    SubmissionPreviewRequest,
    SubmissionRead,
    SubmissionResult,
)
from api.user.user_schema import Message
from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from utils.cache_utils import CacheManager, RateLimiter
from utils.deps import get_cache, get_clock, get_rate_limiter, optional_pagination
from utils.query_params import QueryParams

router = APIRouter(prefix="/submissions", tags=["Submissions"])


@router.post("/", response_model=SubmissionResult, status_code=status.HTTP_201_CREATED)
def create_submission(
    payload: SubmissionCreate,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    limiter: RateLimiter = Depends(get_rate_limiter),
    clock=Depends(get_clock),
    current_user=Depends(auth_middleware)
):
    """
    Score and record a submission against an active challenge.

    - 422 when the payload misses its minimum content or a daily cap is hit
    - 429 when the same user submits to the same challenge too often
    """
    return SubmissionController.create_submission(payload, db, cache, limiter, clock, current_user["id"])


@router.post("/preview", response_model=ScorePreview, summary="Score a payload without saving it")
def preview_submission(
    payload: SubmissionPreviewRequest,
    current_user=Depends(auth_middleware)
):
    return SubmissionController.preview(payload.payload)


@router.get("/mine", response_model=List[SubmissionRead])
def list_my_submissions(
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware),
    params: Optional[QueryParams] = Depends(optional_pagination)
):
    return SubmissionController.list_mine(db, current_user["id"], params)


@router.get("/{submission_id}", response_model=SubmissionRead)
def get_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware)
):
    return SubmissionController.get_submission(submission_id, db, current_user["id"])


@router.get("/{submission_id}/meals", response_model=MealBreakdown, summary="Food footprint grouped by meal")
def submission_meals(
    submission_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware)
):
    return SubmissionController.meal_breakdown(submission_id, db, current_user["id"])


@router.delete("/{submission_id}", response_model=Message)
def delete_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    clock=Depends(get_clock),
    current_user=Depends(auth_middleware)
):
    return SubmissionController.delete_submission(submission_id, db, cache, clock, current_user["id"])
