import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from blinker import signal
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.achievements.achievements_model import Achievement
from api.achievements.user_achievements_model import UserAchievement
from api.submissions.submissions_model import Submission
from config.achievements_config import (
    DEFAULT_ACHIEVEMENTS,
    LEVEL_FIVE_THRESHOLD,
    QUICK_SHOWER_MINUTES,
    TEN_SUBMISSIONS_THRESHOLD,
    AchievementKey,
)
from config.points_config import SUBMISSION_SCORE_CAPS, ChallengeType, TransportMode
from utils.clock import utcnow

logger = logging.getLogger(__name__)

# ------------------------------------------
# Define signals
# ------------------------------------------
# sender: SubmissionService; kwargs: db, submission, user.
# Receivers return the achievement keys they newly unlocked.
submission_scored = signal("submission_scored")


def seed_achievements(db: Session) -> int:
    """Insert any missing catalogue entries. Returns how many were added."""
    existing = {key for (key,) in db.query(Achievement.key).all()}
    added = 0
    for key, attrs in DEFAULT_ACHIEVEMENTS.items():
        if key.value not in existing:
            db.add(Achievement(key=key.value, **attrs))
            added += 1
    if added:
        db.commit()
        logger.info("seeded %d achievements", added)
    return added


def earned_achievements(submission: Submission, user, submission_count: int) -> List[AchievementKey]:
    """Achievement keys whose conditions hold after `submission` was scored."""
    earned = []
    if submission_count >= 1:
        earned.append(AchievementKey.first_submission)
    if submission_count >= TEN_SUBMISSIONS_THRESHOLD:
        earned.append(AchievementKey.ten_submissions)
    if (user.level or 1) >= LEVEL_FIVE_THRESHOLD:
        earned.append(AchievementKey.level_five)

    payload = submission.payload or {}
    if submission.type == ChallengeType.carbon:
        trips = payload.get("trips") or []
        if trips and all(t.get("mode") != TransportMode.car.value for t in trips):
            earned.append(AchievementKey.green_commuter)
    elif submission.type == ChallengeType.recycling:
        if submission.score >= SUBMISSION_SCORE_CAPS[ChallengeType.recycling]:
            earned.append(AchievementKey.zero_waste_hero)
    elif submission.type == ChallengeType.shower:
        duration = payload.get("duration_minutes") or 0
        if not payload.get("skipped") and 0 < duration <= QUICK_SHOWER_MINUTES:
            earned.append(AchievementKey.quick_shower)
    return earned


def keys_for_users(db: Session, user_ids: Iterable[str]) -> Dict[str, List[str]]:
    ids = list(user_ids)
    if not ids:
        return {}
    rows = (
        db.query(UserAchievement.user_id, Achievement.key)
          .join(Achievement, Achievement.id == UserAchievement.achievement_id)
          .filter(UserAchievement.user_id.in_(ids))
          .order_by(UserAchievement.unlocked_at.asc())
          .all()
    )
    keys = defaultdict(list)
    for user_id, key in rows:
        keys[user_id].append(key)
    return dict(keys)


class AchievementService:
    def __init__(self, db: Session):
        self.db = db

    def list_achievements(self) -> List[Achievement]:
        return self.db.query(Achievement).order_by(Achievement.id).all()

    def get_by_key(self, key: str) -> Optional[Achievement]:
        achievement = self.db.query(Achievement).filter(Achievement.key == key).first()
        if achievement is None and key in DEFAULT_ACHIEVEMENTS:
            seed_achievements(self.db)
            achievement = self.db.query(Achievement).filter(Achievement.key == key).first()
        return achievement

    def list_user_achievements(self, user_id: str) -> List[UserAchievement]:
        return (
            self.db.query(UserAchievement)
              .filter(UserAchievement.user_id == user_id)
              .order_by(UserAchievement.unlocked_at.desc())
              .all()
        )

    def has_achievement(self, user_id: str, achievement_id: int) -> bool:
        return (
            self.db.query(UserAchievement)
              .filter_by(user_id=user_id, achievement_id=achievement_id)
              .first()
              is not None
        )

    def unlock(self, user_id: str, key: str, unlocked_at: Optional[datetime] = None) -> bool:
        """Grant an achievement once. Returns True only when newly unlocked."""
        achievement = self.get_by_key(key)
        if achievement is None:
            logger.warning("unknown achievement %s", key)
            return False
        if self.has_achievement(user_id, achievement.id):
            return False
        self.db.add(UserAchievement(
            user_id=user_id,
            achievement_id=achievement.id,
            unlocked_at=unlocked_at or utcnow(),
        ))
        try:
            self.db.commit()
        except IntegrityError:
            # unlocked concurrently by another request
            self.db.rollback()
            return False
        logger.info("user %s unlocked %s", user_id, key)
        return True


# ------------------------------------------
# Listener: Submission Scored
# ------------------------------------------
@submission_scored.connect
def on_submission_scored(sender, **kwargs) -> List[str]:
    db: Session = kwargs["db"]
    submission: Submission = kwargs["submission"]
    user = kwargs["user"]

    count = db.query(Submission).filter(Submission.user_id == user.id).count()
    service = AchievementService(db)
    unlocked = []
    for key in earned_achievements(submission, user, count):
        if service.unlock(user.id, key.value, submission.created_at):
            unlocked.append(key.value)
    return unlocked
