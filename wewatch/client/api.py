"""Async HTTP client for the We Watch API.

Owns the bearer token and one :class:`PreviewCache` per client instance,
so preview lookups made through the same client share their cache.
"""

from __future__ import annotations

from typing import Any

import httpx

from wewatch.client.preview_cache import PreviewCache
from wewatch.client.storage import DurableStore, MemoryStore
from wewatch.core.logging import get_logger

logger = get_logger(__name__)

TOKEN_KEY = "authToken"


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class SessionExpired(ApiError):
    """The token was rejected; it has been dropped from storage."""


class WeWatchClient:
    """Thin wrapper around the REST endpoints.

    Args:
        base_url: Server root, e.g. ``http://localhost:3000``.
        storage: Durable store for the auth token and the preview cache.
        http_client: Preconfigured ``httpx.AsyncClient`` (tests pass one
            with an ASGI transport).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        *,
        storage: DurableStore | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.storage = storage if storage is not None else MemoryStore()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self.previews = PreviewCache(self.get_link_preview, self.storage)

    async def __aenter__(self) -> WeWatchClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ── Token ─────────────────────────────────────────────────────

    @property
    def token(self) -> str | None:
        return self.storage.get(TOKEN_KEY)

    def set_token(self, token: str) -> None:
        self.storage.set(TOKEN_KEY, token)

    def clear_token(self) -> None:
        self.storage.remove(TOKEN_KEY)

    # ── Transport ─────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Content-Type": "application/json"}
        token = self.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        resp = await self._http.request(
            method,
            f"/api{endpoint}",
            json=json,
            params=params,
            headers=headers,
        )

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.is_success:
            return data

        message = data.get("error") if isinstance(data, dict) else None
        message = message or resp.reason_phrase or f"HTTP {resp.status_code}"
        is_auth_endpoint = endpoint.startswith("/auth/")
        if resp.status_code in (401, 403) and not is_auth_endpoint:
            self.clear_token()
            logger.info("session_expired", endpoint=endpoint)
            raise SessionExpired(resp.status_code, "Session expired")
        raise ApiError(resp.status_code, message)

    # ── Auth ──────────────────────────────────────────────────────

    async def register(self, email: str, password: str, repeat_password: str, nickname: str) -> dict:
        data = await self._request(
            "POST",
            "/auth/register",
            json={
                "email": email,
                "password": password,
                "repeatPassword": repeat_password,
                "nickname": nickname,
            },
        )
        self.set_token(data["token"])
        return data

    async def login(self, email: str, password: str) -> dict:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.set_token(data["token"])
        return data

    def logout(self) -> None:
        self.clear_token()

    # ── Movies ────────────────────────────────────────────────────

    async def list_movies(self) -> list[dict]:
        return await self._request("GET", "/movies")

    async def get_movie(self, movie_id: int) -> dict:
        return await self._request("GET", f"/movies/{movie_id}")

    async def create_movie(self, data: dict[str, Any]) -> dict:
        return await self._request("POST", "/movies", json=data)

    async def update_movie(self, movie_id: int, data: dict[str, Any]) -> dict:
        return await self._request("PUT", f"/movies/{movie_id}", json=data)

    async def reorder_movies(self, status: str, movie_ids: list[int]) -> list[dict]:
        return await self._request("PUT", "/movies/reorder", json={"status": status, "movieIds": movie_ids})

    async def delete_movie(self, movie_id: int) -> dict:
        return await self._request("DELETE", f"/movies/{movie_id}")

    # ── Profile ───────────────────────────────────────────────────

    async def get_profile(self) -> dict:
        return await self._request("GET", "/profile")

    async def update_profile(self, data: dict[str, Any]) -> dict:
        return await self._request("PUT", "/profile", json=data)

    # ── Link previews ─────────────────────────────────────────────

    async def get_link_preview(self, url: str) -> str | None:
        """Raw endpoint call; use ``self.previews.get_image`` for cached lookups."""
        data = await self._request("GET", "/link-preview", params={"url": url})
        return data.get("image") or None

    async def movie_image(self, movie: dict[str, Any]) -> str | None:
        """Card image for a movie dict as returned by the movie endpoints."""
        return await self.previews.image_for_movie(movie.get("link"), movie.get("previewImageUrl"))
