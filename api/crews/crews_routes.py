from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from api.crews.crews_controller import CrewController
from api.crews.crews_schema import (
    CrewCreate,
    CrewDetail,
    CrewJoin,
    CrewRankingEntry,
    CrewRead,
    CrewStats,
    JoinCodeResponse,
)
from api.user.user_schema import Message
from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from utils.cache_utils import CacheManager
from utils.deps import get_cache

router = APIRouter(prefix="/crews", tags=["Crews"])


@router.post("/", response_model=CrewRead, status_code=status.HTTP_201_CREATED)
def create_crew(
    payload: CrewCreate,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    """
    Create a crew. The creator becomes its leader and first member.
    """
    return CrewController.create_crew(payload, db, cache, current_user["id"])


@router.get("/", response_model=List[CrewRead])
def list_crews(
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware)
):
    return CrewController.list_crews(db, current_user["id"])


@router.get("/rankings", response_model=List[CrewRankingEntry], summary="Crews ranked by score")
def crew_rankings(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware)
):
    return CrewController.rankings(db, limit)


@router.get("/mine", response_model=CrewDetail)
def get_my_crew(
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware)
):
    return CrewController.get_my_crew(db, current_user["id"])


@router.post("/join", response_model=CrewRead)
def join_crew(
    payload: CrewJoin,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    return CrewController.join_crew(payload.join_code, db, cache, current_user["id"])


@router.get("/{crew_id}", response_model=CrewDetail)
def get_crew(
    crew_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware)
):
    return CrewController.get_crew(crew_id, db, current_user["id"])


@router.post("/{crew_id}/leave", response_model=Message)
def leave_crew(
    crew_id: str,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    return CrewController.leave_crew(crew_id, db, cache, current_user["id"])


@router.delete("/{crew_id}/members/{member_id}", response_model=Message)
def remove_member(
    crew_id: str,
    member_id: str,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    return CrewController.remove_member(crew_id, member_id, db, cache, current_user["id"])


@router.post("/{crew_id}/join-code", response_model=JoinCodeResponse, summary="Regenerate the join code")
def regenerate_join_code(
    crew_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(auth_middleware)
):
    return CrewController.regenerate_join_code(crew_id, db, current_user["id"])


@router.get("/{crew_id}/stats", response_model=CrewStats)
def crew_stats(
    crew_id: str,
    db: Session = Depends(get_db),
    cache: CacheManager = Depends(get_cache),
    current_user=Depends(auth_middleware)
):
    return CrewController.get_stats(crew_id, db, cache)
