from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from api.user.user_controller import (
    get_profile_details,
    update_profile,
    get_my_stats,
    refresh_my_totals,
    get_leaderboard_controller,
)
from api.user.user_schema import (
    UserProfileResponse,
    UserStats,
    UserUpdate,
    UserRankingEntry,
)
from utils.cache_utils import CacheManager
from utils.deps import get_cache

router = APIRouter(prefix="/users", tags=["Users"])

# ─── Profile ────────────────────────────────────────────────────────────────────
@router.get("/me", response_model=UserProfileResponse)
def get_profile(
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware)
):
    return get_profile_details(db, current_user)

@router.put("/me", response_model=UserProfileResponse)
def update_my_profile(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    return update_profile(payload.display_name, db, cache, current_user)

@router.get("/me/stats", response_model=UserStats)
def my_stats(
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    return get_my_stats(db, cache, current_user)

@router.post(
    "/me/refresh",
    response_model=UserProfileResponse,
    summary="Recompute total score from submissions"
)
def refresh_totals(
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    return refresh_my_totals(db, cache, current_user)

# ─── Leaderboard ────────────────────────────────────────────────────────────────
@router.get("/leaderboard", response_model=List[UserRankingEntry])
def leaderboard(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware)
):
    return get_leaderboard_controller(db, limit)
