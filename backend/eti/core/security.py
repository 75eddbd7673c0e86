"""
Session token utilities.

The session state (role, view, selection) travels between requests as a
signed JWT. Roles are chosen, not authenticated: the signature only stops
clients from editing the state by hand.
"""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError

from eti.core.config import settings
from eti.services.session import SessionState


def encode_session(state: SessionState, expires_delta: Optional[timedelta] = None) -> str:
    """
    Encode a session state into a signed token.

    Args:
        state: The session state to carry
        expires_delta: Optional custom expiration time

    Returns:
        The encoded JWT string
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)

    payload = state.model_dump(mode="json")
    payload["exp"] = expire

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session(token: str) -> Optional[SessionState]:
    """
    Decode and validate a session token.

    Returns:
        The session state, or None if the token is invalid or expired
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except InvalidTokenError:
        return None

    payload.pop("exp", None)
    try:
        return SessionState.model_validate(payload)
    except ValidationError:
        return None


def verify_admin_code(code: str) -> bool:
    return bool(settings.ADMIN_ACCESS_CODE) and hmac.compare_digest(
        code.encode("utf-8"), settings.ADMIN_ACCESS_CODE.encode("utf-8")
    )
