from pydantic import BaseModel, ConfigDict
from datetime import datetime


class AchievementRead(BaseModel):
    id: int
    key: str
    name: str
    icon_key: str
    description: str

    model_config = ConfigDict(from_attributes=True)


class UserAchievementRead(BaseModel):
    achievement: AchievementRead
    unlocked_at: datetime

    model_config = ConfigDict(from_attributes=True)
