"""Profile schemas — household members and free-form notes."""

from datetime import datetime
from typing import Any

from pydantic import field_validator

from wewatch.schemas.common import CamelModel


class ProfileUpdate(CamelModel):
    """Partial update; omitted fields are left untouched."""

    members: list[str] | None = None
    additional_info: str | None = None

    @field_validator("members", mode="before")
    @classmethod
    def _members_non_empty(cls, v: Any) -> Any:
        if v is None:
            return v
        if (
            not isinstance(v, list)
            or not v
            or not all(isinstance(m, str) and m.strip() for m in v)
        ):
            raise ValueError(
                "Members array is required and must contain at least one non-empty string member"
            )
        return [m.strip() for m in v]

    @field_validator("additional_info", mode="after")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class ProfileRead(CamelModel):
    id: int
    user_id: int
    members: list[str]
    additional_info: str | None
    created_at: datetime
    updated_at: datetime
