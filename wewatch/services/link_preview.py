"""Link preview service — resolve a page's Open Graph image with caching.

Lookup order for a link:
1. ``movies.preview_image_url`` of any row sharing the link (shared cache)
2. fetch the page and scan it for ``og:image``

A resolved image (fetched or found in the store) is written back to every
row with that link that has no preview yet. A miss is never persisted, so the page can be retried later.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlsplit

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from wewatch.config import get_settings
from wewatch.core.logging import get_logger
from wewatch.services.preview_store import preview_store

logger = get_logger(__name__)
settings = get_settings()

_OG_IMAGE_RE = re.compile(
    r"""<meta\s+property=["']og:image["']\s+content=["']([^"']+)["']""",
    re.IGNORECASE,
)


# ── URL helpers ───────────────────────────────────────────────────


def is_valid_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc) and bool(parts.hostname)


_DEFAULT_PORTS = {"http": 80, "https": 443}


def _origin(url: str) -> str | None:
    """``scheme://host[:port]``; userinfo and default ports are dropped."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    host = parts.hostname
    if not parts.scheme or not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != _DEFAULT_PORTS.get(parts.scheme):
        host = f"{host}:{port}"
    return f"{parts.scheme}://{host}"


def resolve_image_url(image_url: str, page_url: str) -> str | None:
    """Make ``image_url`` absolute against the origin of ``page_url``."""
    if image_url.startswith("http"):
        return image_url
    origin = _origin(page_url)
    if origin is None:
        return None
    try:
        return urljoin(origin + "/", image_url)
    except ValueError:
        return None


def extract_og_image(html: str, page_url: str) -> str | None:
    """First ``og:image`` declared in ``html``, resolved against ``page_url``."""
    match = _OG_IMAGE_RE.search(html)
    if not match:
        return None
    return resolve_image_url(match.group(1), page_url)


# ── Fetcher ───────────────────────────────────────────────────────


async def fetch_preview_image(url: str) -> str | None:
    """Fetch ``url`` and return its preview image, or None.

    Never raises: network errors, timeouts, non-2xx responses and pages
    without an ``og:image`` all come back as None.
    """
    try:
        async with httpx.AsyncClient(
            timeout=settings.link_preview_timeout_seconds,
            follow_redirects=True,
        ) as client:
            resp = await client.get(
                url,
                headers={"User-Agent": settings.link_preview_user_agent},
            )
            if not resp.is_success:
                logger.info("link_preview_http_error", url=url[:200], status_code=resp.status_code)
                return None
            html = resp.text
    except Exception as e:
        logger.warning("link_preview_fetch_failed", url=url[:200], error=str(e))
        return None

    image = extract_og_image(html, url)
    if image is None:
        logger.debug("link_preview_no_image", url=url[:200])
    return image


# ── Main entry point ─────────────────────────────────────────────


async def resolve_preview_image(db: AsyncSession, url: str) -> str | None:
    """Preview image for ``url``, consulting the shared store before the network.

    Store errors propagate; only the network fetch is soft.
    """
    cached = await preview_store.find_first_movie_by_link_with_image(db, url)
    if cached is not None:
        image = cached.preview_image_url
        # Rows added before the first resolution still need the known image
        filled = await preview_store.fill_missing_preview_image(db, url, image)
        logger.debug("link_preview_store_hit", url=url[:200], movie_id=cached.id, backfilled=filled)
        return image

    image = await fetch_preview_image(url)
    if image is None:
        return None

    filled = await preview_store.fill_missing_preview_image(db, url, image)
    logger.info("link_preview_resolved", url=url[:200], backfilled=filled)
    return image
