# achievements_controller.py
from typing import List

from sqlalchemy.orm import Session

from api.achievements.achievements_schema import AchievementRead, UserAchievementRead
from api.achievements.achievements_service import AchievementService

service = AchievementService


def list_all_achievements(db: Session) -> List[AchievementRead]:
    return service(db).list_achievements()


def read_my_achievements(db: Session, current_user: dict) -> List[UserAchievementRead]:
    return service(db).list_user_achievements(current_user["id"])
