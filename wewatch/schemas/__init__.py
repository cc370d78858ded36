"""Pydantic schemas for API request/response validation."""

from wewatch.schemas.common import CamelModel, ErrorResponse, MessageResponse
from wewatch.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserRead
from wewatch.schemas.movie import MovieCreate, MovieRead, MovieReorder, MovieUpdate
from wewatch.schemas.profile import ProfileRead, ProfileUpdate
from wewatch.schemas.link_preview import LinkPreviewRead

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "MessageResponse",
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserRead",
    "MovieCreate",
    "MovieRead",
    "MovieReorder",
    "MovieUpdate",
    "ProfileRead",
    "ProfileUpdate",
    "LinkPreviewRead",
]
