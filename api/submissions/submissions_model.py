# api/submissions/submissions_model.py
import uuid
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Enum, JSON, func
from sqlalchemy.orm import relationship
from config.database import Base
from config.points_config import ChallengeType


class Submission(Base):
    """Append-only log of scored actions."""
    __tablename__ = "submissions"

    id           = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id      = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    challenge_id = Column(String(36), ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True)
    crew_id      = Column(String(36), ForeignKey("crews.id", ondelete="CASCADE"), nullable=False, index=True)
    type         = Column(Enum(ChallengeType, name="challenge_type_enum"), nullable=False)
    payload      = Column(JSON, nullable=False)
    score        = Column(Float, nullable=False)
    created_at   = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    user      = relationship("User")
    challenge = relationship("Challenge", back_populates="submissions")

    def __repr__(self):
        return f"<Submission(id={self.id!r}, type={self.type}, score={self.score})>"
