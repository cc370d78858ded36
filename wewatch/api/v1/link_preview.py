"""Link preview endpoint — Open Graph image for a movie link."""

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from wewatch.core.logging import get_logger
from wewatch.deps import CurrentUser, DbSession
from wewatch.schemas.link_preview import LinkPreviewRead
from wewatch.services.link_preview import is_valid_url, resolve_preview_image

logger = get_logger(__name__)
router = APIRouter()


@router.get("", response_model=LinkPreviewRead)
async def get_link_preview(
    user: CurrentUser,
    db: DbSession,
    url: str | None = Query(None, description="Absolute URL of the page"),
) -> LinkPreviewRead:
    """Preview image for ``url``; ``{"image": null}`` when there is none."""
    if not url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="URL parameter is required",
        )
    if not is_valid_url(url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid URL format",
        )

    try:
        image = await resolve_preview_image(db, url)
    except SQLAlchemyError as e:
        logger.error("link_preview_store_failed", url=url[:200], error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch link preview",
        )

    return LinkPreviewRead(image=image)
