"""Auth endpoints — register and login."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from wewatch.core.logging import get_logger
from wewatch.core.security import (
    TokenPayload,
    create_access_token,
    hash_password,
    verify_password,
)
from wewatch.deps import DbSession
from wewatch.models.profile import Profile
from wewatch.models.user import User
from wewatch.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserRead

logger = get_logger(__name__)
router = APIRouter()


def _auth_response(user: User, message: str) -> AuthResponse:
    token = create_access_token(
        TokenPayload(user_id=user.id, email=user.email, nickname=user.nickname)
    )
    return AuthResponse(
        message=message,
        token=token,
        user=UserRead(id=user.id, email=user.email, nickname=user.nickname),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, db: DbSession) -> AuthResponse:
    """Create an account and its household profile."""
    existing = await db.execute(select(User).where(User.email == data.email))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists",
        )

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        nickname=data.nickname,
    )
    db.add(user)
    await db.flush()
    db.add(Profile(user_id=user.id, members=[user.nickname], additional_info=None))
    await db.flush()

    logger.info("user_registered", user_id=user.id)
    return _auth_response(user, "User registered successfully")


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, db: DbSession) -> AuthResponse:
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return _auth_response(user, "Login successful")
