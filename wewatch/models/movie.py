"""Movie model — one watchlist entry.

``preview_image_url`` doubles as the shared, server-side preview cache:
several rows (across users) can point at the same ``link`` and are filled
together once any of them resolves an image.
"""

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wewatch.database import Base

if TYPE_CHECKING:
    from wewatch.models.user import User


class MovieStatus(StrEnum):
    """Column a movie sits in on the board."""

    NEED_TO_WATCH = "NEED_TO_WATCH"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class Movie(Base):
    __tablename__ = "movies"

    __table_args__ = (
        Index("ix_movies_user_status_position", "user_id", "status", "position"),
        CheckConstraint("rating IS NULL OR (rating >= 0 AND rating <= 10)", name="ck_movies_rating_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    # Not unique: the same page can be on many watchlists
    link: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MovieStatus.NEED_TO_WATCH.value,
    )
    selected_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    preview_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    user: Mapped["User"] = relationship("User", back_populates="movies")
