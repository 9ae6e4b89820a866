# achievements_routes.py
from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.orm import Session
from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from api.achievements.achievements_controller import (
    list_all_achievements,
    read_my_achievements,
)
from api.achievements.achievements_schema import AchievementRead, UserAchievementRead

router = APIRouter(prefix="/achievements", tags=["Achievements"])

@router.get(
    "/",
    response_model=List[AchievementRead],
    summary="List all available achievements"
)
def get_achievements(
    db: Session = Depends(get_db)
):
    return list_all_achievements(db)

@router.get(
    "/me",
    response_model=List[UserAchievementRead],
    summary="List achievements unlocked by the current user"
)
def get_my_achievements(
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware)
):
    return read_my_achievements(db, current_user)
