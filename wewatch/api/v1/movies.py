"""Movie endpoints — CRUD and column ordering for the caller's watchlist."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wewatch.core.logging import get_logger
from wewatch.deps import CurrentUser, DbSession
from wewatch.models.movie import Movie
from wewatch.schemas.common import MessageResponse
from wewatch.schemas.movie import MovieCreate, MovieRead, MovieReorder, MovieUpdate
from wewatch.services.preview_store import preview_store

logger = get_logger(__name__)
router = APIRouter()


async def _get_owned_movie(db: AsyncSession, movie_id: int, user_id: int) -> Movie:
    result = await db.execute(
        select(Movie).where(Movie.id == movie_id, Movie.user_id == user_id)
    )
    movie = result.scalar_one_or_none()
    if not movie:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Movie not found",
        )
    return movie


async def _next_position(db: AsyncSession, user_id: int, movie_status: str) -> int:
    """Position that appends to the bottom of a status column."""
    result = await db.execute(
        select(func.max(Movie.position)).where(
            Movie.user_id == user_id,
            Movie.status == movie_status,
        )
    )
    current = result.scalar()
    return 0 if current is None else current + 1


@router.get("", response_model=list[MovieRead])
async def list_movies(user: CurrentUser, db: DbSession) -> list[Movie]:
    """All of the caller's movies, newest first."""
    result = await db.execute(
        select(Movie)
        .where(Movie.user_id == user.user_id)
        .order_by(Movie.created_at.desc(), Movie.id.desc())
    )
    return list(result.scalars().all())


@router.post("", response_model=MovieRead, status_code=status.HTTP_201_CREATED)
async def create_movie(data: MovieCreate, user: CurrentUser, db: DbSession) -> Movie:
    """Add a movie at the bottom of its status column.

    If any movie already has a preview for this link, the new row starts
    with it instead of waiting for the next preview lookup.
    """
    movie = Movie(
        user_id=user.user_id,
        name=data.name,
        link=data.link,
        comments=data.comments,
        rating=data.rating,
        status=data.status.value,
        selected_by=data.selected_by,
        position=await _next_position(db, user.user_id, data.status.value),
        preview_image_url=await preview_store.known_preview_for_link(db, data.link),
    )
    db.add(movie)
    await db.flush()
    await db.refresh(movie)
    logger.info("movie_created", movie_id=movie.id)
    return movie


@router.put("/reorder", response_model=list[MovieRead])
async def reorder_movies(data: MovieReorder, user: CurrentUser, db: DbSession) -> list[Movie]:
    """Rewrite the order of one status column (top to bottom)."""
    if len(set(data.movie_ids)) != len(data.movie_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Duplicate movie in reorder list",
        )

    result = await db.execute(
        select(Movie).where(
            Movie.user_id == user.user_id,
            Movie.status == data.status.value,
            Movie.id.in_(data.movie_ids),
        )
    )
    by_id = {m.id: m for m in result.scalars().all()}
    if len(by_id) != len(data.movie_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Reorder list contains movies outside this column",
        )

    for position, movie_id in enumerate(data.movie_ids):
        by_id[movie_id].position = position
    await db.flush()

    column = await db.execute(
        select(Movie)
        .where(Movie.user_id == user.user_id, Movie.status == data.status.value)
        .order_by(Movie.position, Movie.id)
    )
    return list(column.scalars().all())


@router.get("/{movie_id}", response_model=MovieRead)
async def get_movie(movie_id: int, user: CurrentUser, db: DbSession) -> Movie:
    return await _get_owned_movie(db, movie_id, user.user_id)


@router.put("/{movie_id}", response_model=MovieRead)
async def update_movie(
    movie_id: int,
    data: MovieUpdate,
    user: CurrentUser,
    db: DbSession,
) -> Movie:
    """Apply the fields present in the body.

    Changing the link swaps the preview for whatever is known about the
    new link, so a row never shows another page's image.
    """
    movie = await _get_owned_movie(db, movie_id, user.user_id)
    fields = data.model_fields_set

    if "name" in fields and data.name is not None:
        movie.name = data.name
    if "link" in fields and data.link is not None and data.link != movie.link:
        movie.link = data.link
        # Cleared before the lookup autoflushes, so this row can't match itself
        movie.preview_image_url = None
        movie.preview_image_url = await preview_store.known_preview_for_link(db, data.link)
    if "comments" in fields:
        movie.comments = data.comments
    if "rating" in fields:
        movie.rating = data.rating
    if "selected_by" in fields:
        movie.selected_by = data.selected_by
    if "status" in fields and data.status is not None and data.status.value != movie.status:
        movie.position = await _next_position(db, user.user_id, data.status.value)
        movie.status = data.status.value

    await db.flush()
    await db.refresh(movie)
    return movie


@router.delete("/{movie_id}", response_model=MessageResponse)
async def delete_movie(movie_id: int, user: CurrentUser, db: DbSession) -> MessageResponse:
    movie = await _get_owned_movie(db, movie_id, user.user_id)
    await db.delete(movie)
    await db.flush()
    logger.info("movie_deleted", movie_id=movie_id)
    return MessageResponse(message="Movie deleted successfully")
