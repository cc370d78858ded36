"""Tests for the shared preview store on ``movies.preview_image_url``."""

import pytest
from sqlalchemy import select

from wewatch.models.movie import Movie
from wewatch.services.preview_store import preview_store

LINK = "https://example.com/movie"
POSTER = "https://cdn.example.com/poster.jpg"


async def _previews(session_maker, link: str = LINK) -> list[str | None]:
    async with session_maker() as session:
        result = await session.execute(select(Movie.preview_image_url).where(Movie.link == link).order_by(Movie.id))
        return list(result.scalars().all())


class TestFindFirstMovieByLinkWithImage:
    @pytest.mark.asyncio
    async def test_no_rows(self, db):
        assert await preview_store.find_first_movie_by_link_with_image(db, LINK) is None

    @pytest.mark.asyncio
    async def test_rows_without_image_are_ignored(self, db, make_user, make_movie):
        user, _ = await make_user()
        await make_movie(user.id, LINK)

        assert await preview_store.find_first_movie_by_link_with_image(db, LINK) is None

    @pytest.mark.asyncio
    async def test_any_user_row_counts(self, db, make_user, make_movie):
        ana, _ = await make_user("ana@example.com", "Ana")
        bob, _ = await make_user("bob@example.com", "Bob")
        await make_movie(ana.id, LINK)
        await make_movie(bob.id, LINK, preview_image_url=POSTER)

        movie = await preview_store.find_first_movie_by_link_with_image(db, LINK)

        assert movie is not None
        assert movie.preview_image_url == POSTER
        assert movie.user_id == bob.id

    @pytest.mark.asyncio
    async def test_exact_link_match_only(self, db, make_user, make_movie):
        user, _ = await make_user()
        await make_movie(user.id, LINK + "/", preview_image_url=POSTER)

        assert await preview_store.find_first_movie_by_link_with_image(db, LINK) is None
        assert await preview_store.known_preview_for_link(db, LINK + "/") == POSTER


class TestFillMissingPreviewImage:
    @pytest.mark.asyncio
    async def test_fills_every_null_row(self, db, session_maker, make_user, make_movie):
        ana, _ = await make_user("ana@example.com", "Ana")
        bob, _ = await make_user("bob@example.com", "Bob")
        await make_movie(ana.id, LINK)
        await make_movie(ana.id, LINK, name="Again")
        await make_movie(bob.id, LINK)

        filled = await preview_store.fill_missing_preview_image(db, LINK, POSTER)
        await db.commit()

        assert filled == 3
        assert await _previews(session_maker) == [POSTER, POSTER, POSTER]

    @pytest.mark.asyncio
    async def test_never_overwrites_existing(self, db, session_maker, make_user, make_movie):
        user, _ = await make_user()
        await make_movie(user.id, LINK, preview_image_url="https://cdn.example.com/old.jpg")
        await make_movie(user.id, LINK)

        filled = await preview_store.fill_missing_preview_image(db, LINK, POSTER)
        await db.commit()

        assert filled == 1
        assert await _previews(session_maker) == ["https://cdn.example.com/old.jpg", POSTER]

    @pytest.mark.asyncio
    async def test_other_links_untouched(self, db, session_maker, make_user, make_movie):
        user, _ = await make_user()
        await make_movie(user.id, "https://other.example.com/")

        filled = await preview_store.fill_missing_preview_image(db, LINK, POSTER)
        await db.commit()

        assert filled == 0
        assert await _previews(session_maker, "https://other.example.com/") == [None]

    @pytest.mark.asyncio
    async def test_second_fill_is_noop(self, db, make_user, make_movie):
        user, _ = await make_user()
        await make_movie(user.id, LINK)

        assert await preview_store.fill_missing_preview_image(db, LINK, POSTER) == 1
        assert await preview_store.fill_missing_preview_image(db, LINK, "https://cdn.example.com/x.jpg") == 0
