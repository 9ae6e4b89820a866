# api/crews/crews_model.py
import uuid
from sqlalchemy import Column, String, Text, Float, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from config.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Crew(Base):
    __tablename__ = "crews"

    id          = Column(String(36), primary_key=True, default=_uuid)
    name        = Column(String(50), nullable=False)
    description = Column(Text, nullable=False, default="")
    leader_id   = Column(String(128), ForeignKey("users.id"), nullable=False)
    join_code   = Column(String(12), nullable=False, unique=True, index=True)
    score       = Column(Float, nullable=False, default=0)
    created_at  = Column(DateTime, nullable=False, server_default=func.now())
    updated_at  = Column(DateTime, nullable=False,
                         server_default=func.now(), onupdate=func.now())

    leader  = relationship("User", foreign_keys=[leader_id])
    members = relationship(
        "CrewMember",
        back_populates="crew",
        cascade="all, delete-orphan",
    )
    challenges = relationship(
        "Challenge",
        back_populates="crew",
        cascade="all, delete-orphan",
    )

    @property
    def member_ids(self):
        return {m.user_id for m in self.members}

    def __repr__(self):
        return f"<Crew(id={self.id!r}, name='{self.name}')>"


class CrewMember(Base):
    __tablename__ = "crew_members"

    # one crew per user
    user_id   = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    crew_id   = Column(String(36), ForeignKey("crews.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = Column(DateTime, nullable=False, server_default=func.now())

    crew = relationship("Crew", back_populates="members")
    user = relationship("User", back_populates="membership")
