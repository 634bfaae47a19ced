from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
from fastapi import Header

from spendwise.core.config import settings
from spendwise.core.exceptions import AuthenticationError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _encode(data: Dict[str, Any], secret: str, expires_minutes: int, token_type: str) -> str:
    now = datetime.now(timezone.utc)
    payload = dict(data)
    payload.update({"type": token_type, "iat": now, "exp": now + timedelta(minutes=expires_minutes)})
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, secret: str, token_type: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")
    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token")
    return payload


def create_access_token(data: Dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    return _encode(
        data,
        settings.JWT_SECRET_KEY,
        expires_minutes or settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
        ACCESS_TOKEN_TYPE,
    )


def create_refresh_token(data: Dict[str, Any]) -> str:
    return _encode(
        data,
        settings.JWT_REFRESH_SECRET_KEY,
        settings.JWT_REFRESH_TOKEN_EXPIRE_MINUTES,
        REFRESH_TOKEN_TYPE,
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.JWT_SECRET_KEY, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.JWT_REFRESH_SECRET_KEY, REFRESH_TOKEN_TYPE)


def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """Extract user_id from the bearer access token"""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Access denied. No token provided.")

    token = authorization.replace("Bearer ", "", 1).strip()
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token")
    return user_id
