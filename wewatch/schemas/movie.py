"""Movie schemas — create, partial update, reorder and read."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from wewatch.models.movie import MovieStatus
from wewatch.schemas.common import CamelModel

_STATUS_CHOICES = ", ".join(s.value for s in MovieStatus)


def _parse_rating(value: Any) -> int | None:
    if value is None:
        return None
    try:
        rating = int(value)
    except (TypeError, ValueError):
        raise ValueError("Rating must be a number between 0 and 10") from None
    if rating < 0 or rating > 10:
        raise ValueError("Rating must be a number between 0 and 10")
    return rating


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class MovieCreate(CamelModel):
    """Add a movie to the caller's watchlist."""

    name: str | None = Field(None, validate_default=True)
    link: str | None = Field(None, validate_default=True)
    comments: str | None = None
    rating: int | None = None
    status: MovieStatus | None = Field(None, validate_default=True)
    selected_by: str | None = Field(None, max_length=100)

    @field_validator("name", mode="after")
    @classmethod
    def _name_required(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Movie name is required")
        return v.strip()

    @field_validator("link", mode="after")
    @classmethod
    def _link_required(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Movie link is required")
        return v.strip()

    @field_validator("rating", mode="before")
    @classmethod
    def _rating_range(cls, v: Any) -> int | None:
        return _parse_rating(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status_valid(cls, v: Any) -> Any:
        if not isinstance(v, str) or v not in {s.value for s in MovieStatus}:
            raise ValueError(f"Status is required and must be one of: {_STATUS_CHOICES}")
        return v

    @field_validator("comments", "selected_by", mode="after")
    @classmethod
    def _strip_optional(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class MovieUpdate(CamelModel):
    """Partial update. Only fields present in the request body are applied."""

    name: str | None = None
    link: str | None = None
    comments: str | None = None
    rating: int | None = None
    status: MovieStatus | None = None
    selected_by: str | None = Field(None, max_length=100)

    @field_validator("name", mode="after")
    @classmethod
    def _name_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Movie name cannot be empty")
        return v.strip() if v is not None else None

    @field_validator("link", mode="after")
    @classmethod
    def _link_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Movie link cannot be empty")
        return v.strip() if v is not None else None

    @field_validator("rating", mode="before")
    @classmethod
    def _rating_range(cls, v: Any) -> int | None:
        return _parse_rating(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status_valid(cls, v: Any) -> Any:
        if v is not None and (not isinstance(v, str) or v not in {s.value for s in MovieStatus}):
            raise ValueError(f"Invalid status. Must be one of: {_STATUS_CHOICES}")
        return v

    @field_validator("comments", "selected_by", mode="after")
    @classmethod
    def _strip_optional(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class MovieReorder(CamelModel):
    """New top-to-bottom order of one status column."""

    status: MovieStatus
    movie_ids: list[int] = Field(default_factory=list)


class MovieRead(CamelModel):
    id: int
    user_id: int
    name: str
    link: str
    comments: str | None
    rating: int | None
    status: MovieStatus
    selected_by: str | None
    position: int
    preview_image_url: str | None
    created_at: datetime
    updated_at: datetime
