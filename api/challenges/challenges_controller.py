# Controller
from datetime import datetime
from typing import Callable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from api.challenges.challenges_schema import (
    ChallengeCreate,
    ChallengeRead,
    ChallengeRecord,
    ChallengeStats,
)
from api.challenges.challenges_service import (
    ChallengeService,
    challenge_display_status,
    challenge_progress,
)
from api.crews.crews_service import CrewService
from scoring.errors import SubmissionValidationError
from utils.cache_utils import CacheManager


def _to_read(record: ChallengeRecord, now: datetime) -> ChallengeRead:
    return ChallengeRead(
        **record.model_dump(),
        display_status=challenge_display_status(record, now),
        progress=challenge_progress(record, now),
    )


class ChallengeController:
    @staticmethod
    def create_challenge(
        payload: ChallengeCreate, db: Session, cache: CacheManager, clock: Callable[[], datetime], user_id: str
    ) -> ChallengeRead:
        try:
            challenge = ChallengeService(db, cache, clock).create_challenge(payload, user_id)
        except SubmissionValidationError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"code": e.code, "message": e.reason},
            )
        return _to_read(ChallengeRecord.model_validate(challenge), clock())

    @staticmethod
    def list_active(
        crew_id: Optional[str], db: Session, cache: CacheManager, clock: Callable[[], datetime], user_id: str
    ) -> List[ChallengeRead]:
        if not crew_id:
            crew = CrewService(db).get_user_crew(user_id)
            if not crew:
                return []
            crew_id = crew.id
        now = clock()
        return [_to_read(r, now) for r in ChallengeService(db, cache, clock).list_active(crew_id)]

    @staticmethod
    def get_challenge(challenge_id: str, db: Session, clock: Callable[[], datetime]) -> ChallengeRead:
        challenge = ChallengeService(db, clock=clock).get_challenge_or_404(challenge_id)
        return _to_read(ChallengeRecord.model_validate(challenge), clock())

    @staticmethod
    def close_challenge(
        challenge_id: str, new_status: str, db: Session, cache: CacheManager,
        clock: Callable[[], datetime], user_id: str
    ) -> ChallengeRead:
        challenge = ChallengeService(db, cache, clock).close_challenge(challenge_id, user_id, new_status)
        return _to_read(ChallengeRecord.model_validate(challenge), clock())

    @staticmethod
    def get_stats(challenge_id: str, db: Session, cache: CacheManager) -> ChallengeStats:
        return ChallengeStats(**ChallengeService(db, cache).get_stats(challenge_id))
