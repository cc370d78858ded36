#!/usr/bin/env python3
"""Resolve preview images for every link that has none yet.

Usage:
    python scripts/backfill_previews.py [--limit N]

Each distinct link is fetched once; a hit fills all rows sharing it.
"""

import argparse
import asyncio

from sqlalchemy import select

from wewatch.core.logging import setup_logging
from wewatch.database import async_session_maker
from wewatch.models.movie import Movie
from wewatch.services.link_preview import is_valid_url, resolve_preview_image


async def backfill(limit: int | None) -> None:
    async with async_session_maker() as db:
        stmt = (
            select(Movie.link)
            .where(Movie.preview_image_url.is_(None))
            .distinct()
            .order_by(Movie.link)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        links = list((await db.execute(stmt)).scalars().all())

        print(f"{len(links)} link(s) without a preview")
        resolved = 0
        for link in links:
            if not is_valid_url(link):
                print(f"  skip   {link}")
                continue
            image = await resolve_preview_image(db, link)
            await db.commit()
            if image:
                resolved += 1
                print(f"  ok     {link} -> {image}")
            else:
                print(f"  none   {link}")

        print(f"Resolved {resolved}/{len(links)}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--limit", type=int, default=None, help="Max links to process")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(backfill(args.limit))


if __name__ == "__main__":
    main()
