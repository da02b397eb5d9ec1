"""
Password hashing, JWT tokens and FastAPI authentication dependencies.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import data_service
from config import JWT_ALGORITHM, JWT_EXPIRE_MINUTES, JWT_SECRET, PASSWORD_RESET_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

security = HTTPBearer()

PASSWORD_RESET_PURPOSE = "password_reset"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Imported accounts carry a placeholder, not a bcrypt hash
        return False


def create_access_token(user_id: str, expires_minutes: int = JWT_EXPIRE_MINUTES, **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
        **claims,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """
    Decode a JWT.

    Returns:
        The payload dict, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug(f"Rejected token: {e}")
        return None


def create_password_reset_token(user_id: str) -> str:
    return create_access_token(user_id, expires_minutes=PASSWORD_RESET_EXPIRE_MINUTES,
                               purpose=PASSWORD_RESET_PURPOSE)


def verify_password_reset_token(token: str) -> Optional[str]:
    """Return the user id a reset token was issued for, or None."""
    payload = verify_token(token)
    if not payload or payload.get("purpose") != PASSWORD_RESET_PURPOSE:
        return None
    return payload.get("user_id")


def _user_from_token(token: str) -> dict:
    payload = verify_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Reset tokens only unlock the reset endpoint
    user_id = payload.get("user_id")
    if user_id is None or payload.get("purpose"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = data_service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    """Dependency returning the authenticated user row."""
    return _user_from_token(credentials.credentials)


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
) -> Optional[dict]:
    """Like get_current_user, but anonymous callers get None instead of a 401."""
    if credentials is None:
        return None
    try:
        return _user_from_token(credentials.credentials)
    except HTTPException:
        return None


def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if not user.get("is_admin"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
