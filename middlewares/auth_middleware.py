import logging
from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from config.settings import settings
from config.database import get_db
from api.user.user_model import User
from utils.clock import utcnow

logger = logging.getLogger(__name__)
security = HTTPBearer()


def _decode(token: str) -> dict:
    options = {"verify_aud": bool(settings.IDENTITY_AUDIENCE)}
    return jwt.decode(
        token,
        settings.IDENTITY_JWT_SECRET,
        algorithms=[settings.IDENTITY_JWT_ALGORITHM],
        audience=settings.IDENTITY_AUDIENCE,
        options=options,
    )


def _sync_user(db: Session, user_id: str, name: str, email) -> User:
    """Create the local profile row the first time a provider uid is seen."""
    user = db.get(User, user_id)
    if user:
        return user
    user = User(
        id=user_id,
        display_name=(name or "")[:50],
        email=email,
        created_at=utcnow(),
        updated_at=utcnow(),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # another request created it first
        db.rollback()
        return db.get(User, user_id)
    db.refresh(user)
    logger.info("created profile for identity %s", user_id)
    return user


def auth_middleware(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
):
    token = credentials.credentials
    try:
        decoded = _decode(token)
    except jwt.ExpiredSignatureError:
        # expired token → 401
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        # any other decode error → 401
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = decoded.get("sub") or decoded.get("uid")
    if not user_id:
        # token was structurally OK but payload missing
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    name = decoded.get("name") or decoded.get("display_name") or ""
    user = _sync_user(db, str(user_id), name, decoded.get("email"))

    return {
        "id": user.id,
        "name": user.display_name,
    }
