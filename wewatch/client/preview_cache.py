"""Client-side preview image cache (memory + durable store).

Tier 1 is a dict owned by the cache instance; tier 2 is a single JSON
document in a :class:`~wewatch.client.storage.DurableStore`, read once when
the cache is built. Both tiers hold negative results (``None``) so a link
without a preview is not looked up again until its entry expires.

Keys are the link strings exactly as given; ``https://a.com/x`` and
``https://a.com/x/`` are cached separately.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from urllib.parse import urlsplit

from wewatch.client.storage import DurableStore, StorageQuotaExceeded
from wewatch.core.logging import get_logger

logger = get_logger(__name__)

CACHE_KEY = "movie-image-cache"
CACHE_TTL = timedelta(days=7)
QUOTA_FALLBACK_ENTRIES = 100

PreviewFetcher = Callable[[str], Awaitable[str | None]]


class LookupState(StrEnum):
    MISS = "miss"
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class CacheEntry:
    url: str | None
    timestamp: float  # epoch milliseconds

    def to_json(self) -> dict:
        return {"url": self.url, "timestamp": self.timestamp}


@dataclass(frozen=True)
class CacheLookup:
    state: LookupState
    url: str | None = None

    @property
    def hit(self) -> bool:
        return self.state is not LookupState.MISS


_MISS = CacheLookup(LookupState.MISS)


def _parse_entry(raw: object) -> CacheEntry | None:
    if not isinstance(raw, dict):
        return None
    url = raw.get("url")
    timestamp = raw.get("timestamp")
    if url is not None and not isinstance(url, str):
        return None
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        return None
    return CacheEntry(url=url, timestamp=float(timestamp))


def link_host(url: str) -> str | None:
    """Host name shown in place of a preview image."""
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


class PreviewCache:
    """Two-tier cache in front of the link-preview endpoint.

    Args:
        fetch: Coroutine returning the preview for a link (usually
            ``WeWatchClient.get_link_preview``). Exceptions count as "no image".
        store: Durable backend for tier 2.
        ttl: Entry lifetime measured from write time.
        quota_fallback_entries: Entries kept when the store runs out of room.
        clock: Seconds since the epoch; injectable for tests.
        dedupe_inflight: Share one in-flight lookup between concurrent
            callers asking for the same link.
    """

    def __init__(
        self,
        fetch: PreviewFetcher,
        store: DurableStore,
        *,
        ttl: timedelta = CACHE_TTL,
        quota_fallback_entries: int = QUOTA_FALLBACK_ENTRIES,
        clock: Callable[[], float] = time.time,
        dedupe_inflight: bool = True,
    ) -> None:
        self._fetch = fetch
        self._store = store
        self._ttl_ms = ttl.total_seconds() * 1000
        self._quota_fallback_entries = quota_fallback_entries
        self._clock = clock
        self._dedupe_inflight = dedupe_inflight
        self._memory: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Task[str | None]] = {}
        self._memory_only = False
        self._load()

    # ── Tier 2 ────────────────────────────────────────────────────

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _is_fresh(self, entry: CacheEntry, now_ms: float) -> bool:
        return now_ms - entry.timestamp < self._ttl_ms

    def _read_durable(self) -> dict[str, CacheEntry]:
        try:
            raw = self._store.get(CACHE_KEY)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("preview_cache_read_failed", error=str(e))
            return {}
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("preview_cache_corrupt", error=str(e))
            return {}
        if not isinstance(data, dict):
            return {}

        entries: dict[str, CacheEntry] = {}
        for key, value in data.items():
            entry = _parse_entry(value)
            if entry is not None:
                entries[key] = entry
        return entries

    def _write_durable(self, entries: dict[str, CacheEntry]) -> None:
        payload = json.dumps({k: e.to_json() for k, e in entries.items()})
        self._store.set(CACHE_KEY, payload)

    def _load(self) -> None:
        now = self._now_ms()
        for key, entry in self._read_durable().items():
            if self._is_fresh(entry, now):
                self._memory[key] = entry

    def _persist(self, link: str, entry: CacheEntry) -> None:
        if self._memory_only:
            return
        now = self._now_ms()
        entries = self._read_durable()
        entries[link] = entry
        entries = {k: e for k, e in entries.items() if self._is_fresh(e, now)}

        try:
            self._write_durable(entries)
            return
        except StorageQuotaExceeded:
            logger.info("preview_cache_quota_exceeded", entries=len(entries))
        except OSError as e:
            logger.warning("preview_cache_write_failed", error=str(e))
            return

        newest = sorted(entries.items(), key=lambda kv: kv[1].timestamp, reverse=True)
        recent = dict(newest[: self._quota_fallback_entries])
        recent[link] = entry
        try:
            self._write_durable(recent)
        except (StorageQuotaExceeded, OSError) as e:
            logger.warning("preview_cache_memory_only", error=str(e))
            self._memory_only = True

    # ── Public API ───────────────────────────────────────────────

    @property
    def memory_only(self) -> bool:
        """True once the durable store has refused writes for this session."""
        return self._memory_only

    def peek(self, link: str) -> CacheLookup:
        """Look ``link`` up in memory without touching the network."""
        entry = self._memory.get(link)
        if entry is None:
            return _MISS
        if not self._is_fresh(entry, self._now_ms()):
            del self._memory[link]
            return _MISS
        if entry.url is None:
            return CacheLookup(LookupState.NEGATIVE)
        return CacheLookup(LookupState.POSITIVE, entry.url)

    def set(self, link: str, image_url: str | None) -> None:
        entry = CacheEntry(url=image_url, timestamp=self._now_ms())
        self._memory[link] = entry
        self._persist(link, entry)

    def prime(self, link: str, image_url: str | None) -> None:
        """Record a preview already known from the movie record."""
        if image_url:
            self.set(link, image_url)

    def prune(self) -> int:
        """Drop expired entries from both tiers; returns how many were dropped."""
        now = self._now_ms()
        expired = [k for k, e in self._memory.items() if not self._is_fresh(e, now)]
        for key in expired:
            del self._memory[key]

        if self._memory_only:
            return len(expired)

        entries = self._read_durable()
        fresh = {k: e for k, e in entries.items() if self._is_fresh(e, now)}
        dropped = len(entries) - len(fresh)
        if dropped:
            try:
                self._write_durable(fresh)
            except (StorageQuotaExceeded, OSError) as e:
                logger.warning("preview_cache_prune_failed", error=str(e))
        return max(len(expired), dropped)

    async def get_image(self, link: str) -> str | None:
        """Preview image for ``link``. Never raises."""
        lookup = self.peek(link)
        if lookup.hit:
            return lookup.url

        if not self._dedupe_inflight:
            return await self._resolve(link)

        task = self._inflight.get(link)
        if task is None:
            task = asyncio.ensure_future(self._resolve(link))
            self._inflight[link] = task
            task.add_done_callback(lambda t, key=link: self._forget(key, t))
        return await asyncio.shield(task)

    async def image_for_movie(
        self,
        link: str | None,
        preview_image_url: str | None = None,
    ) -> str | None:
        """Image to show on a movie card.

        The server-side preview wins when present and is copied into the
        cache; otherwise the link is looked up.
        """
        if not link:
            return None
        if preview_image_url:
            self.prime(link, preview_image_url)
            return preview_image_url
        return await self.get_image(link)

    # ── Internals ────────────────────────────────────────────────

    def _forget(self, link: str, task: asyncio.Task) -> None:
        if self._inflight.get(link) is task:
            del self._inflight[link]

    async def _resolve(self, link: str) -> str | None:
        try:
            image = await self._fetch(link) or None
        except Exception as e:
            logger.info("preview_cache_fetch_failed", link=link[:200], error=str(e))
            image = None
        self.set(link, image)
        return image
