from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from api.challenges.challenges_controller import ChallengeController
from api.challenges.challenges_schema import (
    ChallengeClose,
    ChallengeCreate,
    ChallengeRead,
    ChallengeStats,
)
from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from utils.cache_utils import CacheManager
from utils.deps import get_cache, get_clock

router = APIRouter(prefix="/challenges", tags=["Challenges"])


@router.post("/", response_model=ChallengeRead, status_code=status.HTTP_201_CREATED)
def create_challenge(
    payload: ChallengeCreate,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    clock=Depends(get_clock),
    current_user=Depends(auth_middleware)
):
    """
    Create a challenge for a crew. Only the crew leader may do this.
    """
    return ChallengeController.create_challenge(payload, db, cache, clock, current_user["id"])


@router.get("/", response_model=List[ChallengeRead], summary="Active challenges of a crew")
def list_challenges(
    crew_id: Optional[str] = Query(None, description="Defaults to the caller's crew"),
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    clock=Depends(get_clock),
    current_user=Depends(auth_middleware)
):
    return ChallengeController.list_active(crew_id, db, cache, clock, current_user["id"])


@router.get("/{challenge_id}", response_model=ChallengeRead)
def get_challenge(
    challenge_id: str,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    current_user=Depends(auth_middleware)
):
    return ChallengeController.get_challenge(challenge_id, db, clock)


@router.post("/{challenge_id}/close", response_model=ChallengeRead)
def close_challenge(
    challenge_id: str,
    payload: ChallengeClose,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    clock=Depends(get_clock),
    current_user=Depends(auth_middleware)
):
    return ChallengeController.close_challenge(challenge_id, payload.status, db, cache, clock, current_user["id"])


@router.get("/{challenge_id}/stats", response_model=ChallengeStats)
def challenge_stats(
    challenge_id: str,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    return ChallengeController.get_stats(challenge_id, db, cache)
