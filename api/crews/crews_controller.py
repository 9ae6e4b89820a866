# Controller
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from api.crews.crews_model import Crew
from api.crews.crews_schema import (
    CrewCreate,
    CrewDetail,
    CrewMemberRead,
    CrewRankingEntry,
    CrewRead,
    CrewStats,
    JoinCodeResponse,
)
from api.crews.crews_service import CrewService
from api.user.user_schema import Message
from scoring.errors import SubmissionValidationError
from scoring.formatting import format_score
from utils.cache_utils import CacheManager


def _to_read(crew: Crew, viewer_id: str) -> CrewRead:
    is_member = viewer_id in crew.member_ids
    return CrewRead(
        id=crew.id,
        name=crew.name,
        description=crew.description or "",
        leader_id=crew.leader_id,
        score=crew.score or 0,
        member_count=len(crew.members),
        join_code=crew.join_code if is_member else None,
        created_at=crew.created_at,
    )


def _invalid_field(e: SubmissionValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"code": e.code, "message": e.reason},
    )


class CrewController:
    @staticmethod
    def create_crew(payload: CrewCreate, db: Session, cache: CacheManager, user_id: str) -> CrewRead:
        try:
            crew = CrewService(db, cache).create_crew(payload, user_id)
        except SubmissionValidationError as e:
            raise _invalid_field(e)
        return _to_read(crew, user_id)

    @staticmethod
    def list_crews(db: Session, user_id: str) -> List[CrewRead]:
        return [_to_read(c, user_id) for c in CrewService(db).list_crews()]

    @staticmethod
    def get_my_crew(db: Session, user_id: str) -> CrewDetail:
        service = CrewService(db)
        crew = service.get_user_crew(user_id)
        if not crew:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="You are not in a crew")
        return CrewController._detail(service, crew, user_id)

    @staticmethod
    def get_crew(crew_id: str, db: Session, user_id: str) -> CrewDetail:
        service = CrewService(db)
        crew = service.get_crew_or_404(crew_id)
        return CrewController._detail(service, crew, user_id)

    @staticmethod
    def _detail(service: CrewService, crew: Crew, user_id: str) -> CrewDetail:
        members = [CrewMemberRead(**m) for m in service.members_with_profiles(crew)]
        return CrewDetail(**_to_read(crew, user_id).model_dump(), members=members)

    @staticmethod
    def join_crew(join_code: str, db: Session, cache: CacheManager, user_id: str) -> CrewRead:
        crew = CrewService(db, cache).join_by_code(join_code, user_id)
        return _to_read(crew, user_id)

    @staticmethod
    def leave_crew(crew_id: str, db: Session, cache: CacheManager, user_id: str) -> Message:
        CrewService(db, cache).leave_crew(crew_id, user_id)
        return Message(message="You have left the crew")

    @staticmethod
    def remove_member(crew_id: str, member_id: str, db: Session, cache: CacheManager, user_id: str) -> Message:
        CrewService(db, cache).remove_member(crew_id, member_id, user_id)
        return Message(message="Member removed")

    @staticmethod
    def regenerate_join_code(crew_id: str, db: Session, user_id: str) -> JoinCodeResponse:
        crew = CrewService(db).regenerate_join_code(crew_id, user_id)
        return JoinCodeResponse(join_code=crew.join_code)

    @staticmethod
    def get_stats(crew_id: str, db: Session, cache: CacheManager) -> CrewStats:
        return CrewStats(**CrewService(db, cache).get_crew_stats(crew_id))

    @staticmethod
    def rankings(db: Session, limit: int) -> List[CrewRankingEntry]:
        return [
            CrewRankingEntry(
                crew_id=r.crew.id,
                crew_name=r.crew.name,
                score=r.score,
                formatted_score=format_score(r.score),
                position=r.position,
                tied_with=r.tied_with,
                member_count=len(r.crew.members),
            )
            for r in CrewService(db).crew_rankings(limit)
        ]
