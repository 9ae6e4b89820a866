# api/challenges/challenges_model.py
import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from config.database import Base
from config.points_config import ChallengeType


class Challenge(Base):
    __tablename__ = "challenges"

    id            = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title         = Column(String(100), nullable=False)
    description   = Column(Text, nullable=False, default="")
    type          = Column(Enum(ChallengeType, name="challenge_type_enum"), nullable=False)
    crew_id       = Column(String(36), ForeignKey("crews.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by    = Column(String(128), ForeignKey("users.id"), nullable=False)
    start_date    = Column(DateTime, nullable=False)
    end_date      = Column(DateTime, nullable=False)
    duration_days = Column(Integer, nullable=False, default=1)
    lower_score_is_better = Column(Boolean, nullable=False, default=False)
    status = Column(
        Enum("active", "completed", "cancelled", name="challenge_status_enum"),
        nullable=False, default="active"
    )
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False,
                        server_default=func.now(), onupdate=func.now())

    crew = relationship("Crew", back_populates="challenges")
    submissions = relationship(
        "Submission",
        back_populates="challenge",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Challenge(id={self.id!r}, type={self.type}, status={self.status})>"
