# user_achievements_model.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from config.database import Base
from api.achievements.achievements_model import Achievement


class UserAchievement(Base):
    __tablename__ = "user_achievements"

    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id", ondelete="CASCADE"), primary_key=True)
    unlocked_at = Column(DateTime, server_default=func.now(), nullable=False)

    user = relationship(
        "User",
        back_populates="achievements"
    )
    achievement = relationship(
        Achievement,
        back_populates="user_achievements"
    )

    def __repr__(self):
        return f"<UserAchievement(user_id={self.user_id!r}, achievement_id={self.achievement_id})>"
