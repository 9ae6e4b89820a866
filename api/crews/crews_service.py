import logging
import random
import string
from dataclasses import dataclass
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.crews.crews_model import Crew, CrewMember
from api.crews.crews_schema import CrewCreate
from api.submissions.submissions_model import Submission
from api.user.user_model import User
from api.user.user_service import DisplayNameResolver
from config.settings import settings
from scoring.errors import UNKNOWN_USER
from scoring.leaderboard import assign_competition_ranks
from scoring.validation import validate_crew_description, validate_crew_name
from utils.cache_utils import CacheKeys, CacheManager
from utils.clock import utcnow

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits
RECENT_ACTIVITY_LIMIT = 10


def generate_join_code(length: int = 6) -> str:
    return "".join(random.choices(JOIN_CODE_ALPHABET, k=length))


def adjust_crew_score(db: Session, crew_id: str, delta: float) -> None:
    """Add `delta` to the crew's score in one UPDATE. Caller commits."""
    db.execute(
        update(Crew)
        .where(Crew.id == crew_id)
        .values(score=func.coalesce(Crew.score, 0) + delta)
        .execution_options(synchronize_session=False)
    )


def recompute_crew_score(db: Session, crew_id: str) -> float:
    """Rebuild the crew's score from its submissions and commit it."""
    total = (
        db.query(func.coalesce(func.sum(Submission.score), 0.0))
          .filter(Submission.crew_id == crew_id)
          .scalar()
    )
    db.execute(
        update(Crew)
        .where(Crew.id == crew_id)
        .values(score=float(total))
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return float(total)


@dataclass
class CrewRanking:
    crew: Crew
    score: float
    position: int = 0
    tied_with: Optional[int] = None


class CrewService:
    def __init__(self, db: Session, cache: Optional[CacheManager] = None):
        self.db = db
        self.cache = cache

    # ─── Lookups ────────────────────────────────────────────────────────────────

    def list_crews(self) -> List[Crew]:
        return self.db.query(Crew).order_by(Crew.created_at.desc()).all()

    def get_crew_or_404(self, crew_id: str) -> Crew:
        crew = self.db.get(Crew, crew_id)
        if not crew:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Crew not found")
        return crew

    def get_user_crew(self, user_id: str) -> Optional[Crew]:
        membership = self.db.get(CrewMember, user_id)
        return membership.crew if membership else None

    def require_member(self, crew: Crew, user_id: str) -> None:
        if user_id not in crew.member_ids:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a member of this crew")

    def require_leader(self, crew: Crew, user_id: str) -> None:
        if crew.leader_id != user_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the crew leader can do this")

    def _ensure_not_in_crew(self, user_id: str) -> None:
        if self.db.get(CrewMember, user_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You are already in a crew")

    def _unique_join_code(self) -> str:
        for _ in range(10):
            code = generate_join_code(settings.JOIN_CODE_LENGTH)
            if not self.db.query(Crew.id).filter(Crew.join_code == code).first():
                return code
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not allocate a join code")

    def _invalidate(self, crew_id: str) -> None:
        if self.cache:
            self.cache.delete(CacheKeys.crew_stats(crew_id))

    # ─── Mutations ──────────────────────────────────────────────────────────────

    def create_crew(self, data: CrewCreate, leader_id: str) -> Crew:
        self._ensure_not_in_crew(leader_id)
        now = utcnow()
        crew = Crew(
            name=validate_crew_name(data.name),
            description=validate_crew_description(data.description),
            leader_id=leader_id,
            join_code=self._unique_join_code(),
            score=0,
            created_at=now,
            updated_at=now,
        )
        # the leader is always a member
        crew.members.append(CrewMember(user_id=leader_id, joined_at=now))
        self.db.add(crew)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Crew could not be created")
        self.db.refresh(crew)
        logger.info("crew %s created by %s", crew.id, leader_id)
        return crew

    def join_by_code(self, join_code: str, user_id: str) -> Crew:
        code = join_code.strip().upper()
        crew = self.db.query(Crew).filter(Crew.join_code == code).first()
        if not crew:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid join code")
        if user_id in crew.member_ids:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You are already a member of this crew")
        self._ensure_not_in_crew(user_id)

        crew.members.append(CrewMember(user_id=user_id, joined_at=utcnow()))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You are already in a crew")
        self.db.refresh(crew)
        self._invalidate(crew.id)
        logger.info("user %s joined crew %s", user_id, crew.id)
        return crew

    def leave_crew(self, crew_id: str, user_id: str) -> None:
        crew = self.get_crew_or_404(crew_id)
        self.require_member(crew, user_id)
        if crew.leader_id == user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="The crew leader cannot leave the crew"
            )
        self._drop_member(crew, user_id)

    def remove_member(self, crew_id: str, member_id: str, actor_id: str) -> None:
        crew = self.get_crew_or_404(crew_id)
        self.require_leader(crew, actor_id)
        if member_id == crew.leader_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The leader cannot be removed")
        if member_id not in crew.member_ids:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
        self._drop_member(crew, member_id)

    def _drop_member(self, crew: Crew, user_id: str) -> None:
        membership = self.db.get(CrewMember, user_id)
        self.db.delete(membership)
        self.db.commit()
        self.db.refresh(crew)
        self._invalidate(crew.id)
        logger.info("user %s left crew %s", user_id, crew.id)

    def regenerate_join_code(self, crew_id: str, actor_id: str) -> Crew:
        crew = self.get_crew_or_404(crew_id)
        self.require_leader(crew, actor_id)
        crew.join_code = self._unique_join_code()
        self.db.commit()
        self.db.refresh(crew)
        return crew

    # ─── Stats ──────────────────────────────────────────────────────────────────

    def members_with_profiles(self, crew: Crew) -> List[dict]:
        rows = (
            self.db.query(CrewMember, User)
              .join(User, User.id == CrewMember.user_id)
              .filter(CrewMember.crew_id == crew.id)
              .all()
        )
        members = [
            {
                "user_id": user.id,
                "display_name": user.display_name or UNKNOWN_USER,
                "total_score": user.total_score or 0,
                "level": user.level,
                "is_leader": user.id == crew.leader_id,
                "joined_at": member.joined_at,
            }
            for member, user in rows
        ]
        members.sort(key=lambda m: m["total_score"], reverse=True)
        return members

    def _compute_stats(self, crew: Crew) -> dict:
        members = self.members_with_profiles(crew)
        count = len(members)
        top = members[0] if members else None

        recent = (
            self.db.query(Submission)
              .filter(Submission.crew_id == crew.id)
              .order_by(Submission.created_at.desc())
              .limit(RECENT_ACTIVITY_LIMIT)
              .all()
        )
        names = DisplayNameResolver(self.db).resolve(s.user_id for s in recent)

        return {
            "total_score": crew.score or 0,
            "member_count": count,
            "average_score": sum(m["total_score"] for m in members) / count if count else 0,
            "top_performer": {
                "user_id": top["user_id"],
                "display_name": top["display_name"],
                "score": top["total_score"],
            } if top else None,
            "recent_activity": [
                {
                    "user_id": s.user_id,
                    "display_name": names.get(s.user_id, UNKNOWN_USER),
                    "challenge_id": s.challenge_id,
                    "score": s.score,
                    "created_at": s.created_at,
                }
                for s in recent
            ],
        }

    def get_crew_stats(self, crew_id: str) -> dict:
        crew = self.get_crew_or_404(crew_id)
        if not self.cache:
            return self._compute_stats(crew)
        return self.cache.get_or_set(CacheKeys.crew_stats(crew_id), lambda: self._compute_stats(crew))

    def crew_rankings(self, limit: int = 20) -> List[CrewRanking]:
        rankings = [CrewRanking(crew=c, score=c.score or 0) for c in self.list_crews()]
        return assign_competition_ranks(rankings)[:limit]
