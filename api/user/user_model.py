# api/user/user_model.py
from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from config.database import Base
from api.achievements.user_achievements_model import UserAchievement


class User(Base):
    __tablename__ = 'users'

    # uid issued by the external identity provider
    id            = Column(String(128), primary_key=True, index=True)
    display_name  = Column(String(50), nullable=False, default="")
    email         = Column(String(255), nullable=True, index=True)
    created_at    = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at    = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Sum of all submission scores
    total_score    = Column(Float, nullable=False, default=0)
    # Cached values derived from total_score, rewritten with every score change
    level          = Column(Integer, nullable=False, default=1)
    level_progress = Column(Float, nullable=False, default=0)

    achievements = relationship(
        UserAchievement,
        back_populates="user",
        cascade="all, delete-orphan"
    )

    membership = relationship(
        "CrewMember",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan"
    )

    @property
    def crew_id(self):
        return self.membership.crew_id if self.membership else None

    def __repr__(self):
        return f"<User(id={self.id!r}, display_name='{self.display_name}', total_score={self.total_score})>"
