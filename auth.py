from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Response, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

import errors, models
from config import settings
from database import get_db

SESSION_COOKIE = "jwt"
SESSION_TOKEN = "session"
RESET_TOKEN = "reset"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str):
    return pwd_context.hash(password)


def verify_password(password, hash):
    return pwd_context.verify(password, hash)


def _create_token(data: dict, expires_delta: timedelta):
    expire = datetime.now(timezone.utc) + expires_delta
    payload = data.copy()
    payload.update({"exp": expire})
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_session_token(user_id: int) -> str:
    return _create_token(
        {"id": user_id, "type": SESSION_TOKEN},
        timedelta(days=settings.SESSION_TOKEN_EXPIRE_DAYS),
    )


def create_reset_token(user_id: int) -> str:
    return _create_token(
        {"id": user_id, "type": RESET_TOKEN},
        timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
    )


def decode_token(token: str, token_type: str) -> int:
    """Verify signature, expiry and type of ``token`` and return its user id.

    Raises :class:`errors.InvalidTokenError` on any failure.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise errors.InvalidTokenError() from exc

    if payload.get("type") != token_type:
        raise errors.InvalidTokenError("Invalid token type")

    try:
        return int(payload["id"])
    except (KeyError, TypeError, ValueError) as exc:
        raise errors.InvalidTokenError("Invalid user id in token") from exc


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.session_max_age,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        "",
        max_age=0,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def get_current_user(
    jwt_cookie: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
    db: Session = Depends(get_db),
) -> models.User:
    if not jwt_cookie:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        user_id = decode_token(jwt_cookie, SESSION_TOKEN)
    except errors.InvalidTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from exc

    user = db.get(models.User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user
