import logging
from typing import Dict, Iterable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.user.user_model import User
from api.submissions.submissions_model import Submission
from scoring.errors import UNKNOWN_USER
from scoring.leaderboard import LeaderboardEntry, assign_competition_ranks
from scoring.leveling import level, level_progress
from scoring.validation import validate_display_name

logger = logging.getLogger(__name__)


def get_user_or_404(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def achievement_keys(user: User) -> List[str]:
    return [ua.achievement.key for ua in sorted(user.achievements, key=lambda ua: ua.unlocked_at)]


def sync_level(user: User) -> User:
    """Rewrite the cached level fields from total_score."""
    user.level = level(user.total_score or 0)
    user.level_progress = level_progress(user.total_score or 0)
    return user


def apply_score_delta(db: Session, user: User, delta: float) -> User:
    """
    Add `delta` to the user's total with a single UPDATE against the row,
    then reload it and rewrite the level fields. Caller commits.
    """
    db.execute(
        update(User)
        .where(User.id == user.id)
        .values(total_score=func.coalesce(User.total_score, 0) + delta)
        .execution_options(synchronize_session=False)
    )
    db.refresh(user)
    return sync_level(user)


def recompute_total(db: Session, user_id: str) -> User:
    """
    Rebuild total_score from the submission log, repairing any drift
    between the cached total and the records it summarises.
    """
    user = get_user_or_404(db, user_id)
    total = (
        db.query(func.coalesce(func.sum(Submission.score), 0.0))
          .filter(Submission.user_id == user_id)
          .scalar()
    )
    user.total_score = float(total)
    sync_level(user)
    db.commit()
    db.refresh(user)
    return user


def update_display_name(db: Session, user_id: str, display_name: str) -> User:
    user = get_user_or_404(db, user_id)
    user.display_name = validate_display_name(display_name)
    db.commit()
    db.refresh(user)
    return user


def get_user_stats(db: Session, user_id: str) -> dict:
    user = db.get(User, user_id)
    if not user:
        return {
            "total_score": 0,
            "level": 1,
            "level_progress": 0,
            "achievements": [],
            "submissions_count": 0,
            "average_score": 0,
            "best_score": 0,
            "last_submission": None,
        }

    count, avg_score, best, last = (
        db.query(
            func.count(Submission.id),
            func.avg(Submission.score),
            func.max(Submission.score),
            func.max(Submission.created_at),
        )
        .filter(Submission.user_id == user_id)
        .one()
    )
    total = user.total_score or 0
    return {
        "total_score": total,
        "level": level(total),
        "level_progress": level_progress(total),
        "achievements": achievement_keys(user),
        "submissions_count": count,
        "average_score": float(avg_score or 0),
        "best_score": float(best or 0),
        "last_submission": last,
    }


def get_global_leaderboard(db: Session, limit: int = 10) -> List[LeaderboardEntry]:
    """All users ranked by total score with competition ranking."""
    users = (
        db.query(User)
          .order_by(User.total_score.desc(), User.created_at.asc())
          .all()
    )
    entries = [
        LeaderboardEntry(
            user_id=u.id,
            display_name=u.display_name or UNKNOWN_USER,
            score=u.total_score or 0,
            crew_id=u.crew_id,
        )
        for u in users
    ]
    return assign_competition_ranks(entries)[:limit]


class DisplayNameResolver:
    """
    Looks up display names for a set of user ids. Ids that cannot be
    resolved are simply absent from the result; one bad id never aborts
    the others.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, user_ids: Iterable[str]) -> Dict[str, str]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        try:
            rows = self.db.query(User.id, User.display_name).filter(User.id.in_(ids)).all()
            names = {uid: name for uid, name in rows if name}
        except SQLAlchemyError:
            logger.warning("batch display name lookup failed, resolving one by one", exc_info=True)
            self.db.rollback()
            names = {}
            for uid in ids:
                name = self._resolve_one(uid)
                if name:
                    names[uid] = name

        for uid in ids:
            if uid not in names:
                logger.info("no display name for user %s", uid)
        return names

    def _resolve_one(self, user_id: str) -> Optional[str]:
        try:
            user = self.db.get(User, user_id)
        except SQLAlchemyError:
            logger.warning("display name lookup failed for %s", user_id, exc_info=True)
            self.db.rollback()
            return None
        return user.display_name if user else None
