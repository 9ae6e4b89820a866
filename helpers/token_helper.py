import jwt
import datetime
from typing import Any, Dict, Optional

from config.settings import settings


def create_access_token(
    payload: Dict[str, Any],
    expires_hours: int = 1,
) -> str:
    """
    Generate a JWT signed with the identity secret, with the given payload and expiration.
    """
    expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(hours=expires_hours)
    to_encode = payload.copy()
    to_encode.update({"exp": expire})
    if settings.IDENTITY_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = settings.IDENTITY_AUDIENCE

    return jwt.encode(to_encode, settings.IDENTITY_JWT_SECRET, algorithm=settings.IDENTITY_JWT_ALGORITHM)


def create_identity_token(
    user_id: str,
    display_name: str = "",
    email: Optional[str] = None,
    expires_hours: int = 1,
) -> str:
    """
    Issue a token shaped like the identity provider's, for local
    development and tests:
      - sub (the provider uid)
      - name
      - email (optional)
    """
    token_payload: Dict[str, Any] = {
        "sub":  user_id,
        "name": display_name,
    }
    if email:
        token_payload["email"] = email
    return create_access_token(token_payload, expires_hours)
