"""Persistent preview store — ``movies.preview_image_url`` used as a shared cache.

Rows are keyed by their exact ``link`` string. Writes only ever move a row
from NULL to a value, so concurrent resolutions of the same link are safe
without locking: whichever lands first wins and the rest are no-ops.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wewatch.core.logging import get_logger
from wewatch.models.movie import Movie

logger = get_logger(__name__)


class PreviewStore:
    """Read/fill operations on the preview column of ``movies``."""

    async def find_first_movie_by_link_with_image(
        self,
        db: AsyncSession,
        link: str,
    ) -> Movie | None:
        """Any movie (any user) with this exact link and a known preview."""
        result = await db.execute(
            select(Movie)
            .where(Movie.link == link)
            .where(Movie.preview_image_url.is_not(None))
            .order_by(Movie.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def known_preview_for_link(
        self,
        db: AsyncSession,
        link: str,
    ) -> str | None:
        movie = await self.find_first_movie_by_link_with_image(db, link)
        return movie.preview_image_url if movie else None

    async def fill_missing_preview_image(
        self,
        db: AsyncSession,
        link: str,
        image_url: str,
    ) -> int:
        """Set ``image_url`` on every movie with this link that has no preview yet.

        Returns:
            Number of rows updated.
        """
        result = await db.execute(
            update(Movie)
            .where(Movie.link == link)
            .where(Movie.preview_image_url.is_(None))
            .values(preview_image_url=image_url)
            .execution_options(synchronize_session="evaluate")
        )
        await db.flush()
        filled = result.rowcount or 0
        logger.debug("preview_store_filled", link=link[:200], rows=filled)
        return filled


# Singleton instance
preview_store = PreviewStore()
