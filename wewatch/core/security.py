"""Password hashing (bcrypt) and access tokens (PyJWT, HS256)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from wewatch.config import get_settings

settings = get_settings()

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DIGIT_RE = re.compile(r"\d")
_SPECIAL_RE = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

PASSWORD_RULES = (
    "Password must be at least 8 characters long, contain at least one number, "
    "and contain at least one special character"
)


class InvalidToken(Exception):
    """Raised when a bearer token is malformed, tampered with or expired."""


@dataclass(frozen=True)
class TokenPayload:
    """Claims carried by an access token."""

    user_id: int
    email: str
    nickname: str


def is_strong_password(password: str) -> bool:
    return (
        len(password) >= 8
        and _DIGIT_RE.search(password) is not None
        and _SPECIAL_RE.search(password) is not None
    )


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def create_access_token(payload: TokenPayload, expires_in: timedelta | None = None) -> str:
    """Sign a token for ``payload``; lifetime defaults to ``jwt_expires_days``."""
    now = datetime.now(UTC)
    lifetime = expires_in if expires_in is not None else timedelta(days=settings.jwt_expires_days)
    claims = {
        "userId": payload.user_id,
        "email": payload.email,
        "nickname": payload.nickname,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenPayload:
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        raise InvalidToken(str(e)) from e

    try:
        return TokenPayload(
            user_id=int(claims["userId"]),
            email=str(claims["email"]),
            nickname=str(claims["nickname"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidToken("missing or malformed claims") from e
