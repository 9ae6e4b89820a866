from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from api.user.user_schema import (
    UserProfileResponse,
    UserStats,
    UserRankingEntry,
)
from api.user.user_service import (
    get_user_or_404,
    achievement_keys,
    update_display_name,
    get_user_stats,
    recompute_total,
    get_global_leaderboard,
)
from api.user.user_model import User
from scoring.errors import SubmissionValidationError
from scoring.formatting import format_score
from scoring.leveling import level
from utils.cache_utils import CacheKeys, CacheManager

# Controller functions for user operations

def _profile(user: User) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        display_name=user.display_name,
        email=user.email,
        total_score=user.total_score or 0,
        level=user.level,
        level_progress=user.level_progress,
        crew_id=user.crew_id,
        achievements=achievement_keys(user),
        created_at=user.created_at,
    )


def get_profile_details(db: Session, current_user: dict) -> UserProfileResponse:
    return _profile(get_user_or_404(db, current_user["id"]))


def update_profile(display_name: str, db: Session, cache: CacheManager, current_user: dict) -> UserProfileResponse:
    """
    Rename the current user. Leaderboards pick the new name up once their
    cached copy expires.
    """
    try:
        user = update_display_name(db, current_user["id"], display_name)
    except SubmissionValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": e.code, "message": e.reason},
        )
    cache.delete(CacheKeys.user_stats(user.id))
    return _profile(user)


def get_my_stats(db: Session, cache: CacheManager, current_user: dict) -> UserStats:
    user_id = current_user["id"]
    stats = cache.get_or_set(CacheKeys.user_stats(user_id), lambda: get_user_stats(db, user_id))
    return UserStats(**stats)


def refresh_my_totals(db: Session, cache: CacheManager, current_user: dict) -> UserProfileResponse:
    user = recompute_total(db, current_user["id"])
    cache.delete(CacheKeys.user_stats(user.id))
    return _profile(user)


def get_leaderboard_controller(db: Session, limit: int) -> List[UserRankingEntry]:
    return [
        UserRankingEntry(
            user_id=e.user_id,
            display_name=e.display_name,
            score=e.score,
            formatted_score=format_score(e.score),
            position=e.position,
            tied_with=e.tied_with,
            level=level(e.score),
        )
        for e in get_global_leaderboard(db, limit)
    ]
