"""Tests for scripts/backfill_previews.py."""

import importlib.util
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "backfill_previews.py"


def _load_script():
    module_spec = importlib.util.spec_from_file_location("backfill_previews", _SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


backfill_previews = _load_script()


class TestBackfill:
    @pytest.mark.asyncio
    async def test_resolves_each_distinct_link(self, session_maker, make_user, make_movie):
        user, _ = await make_user()
        await make_movie(user.id, "https://a.example.com/")
        await make_movie(user.id, "https://a.example.com/")
        await make_movie(user.id, "https://b.example.com/")
        await make_movie(user.id, "https://c.example.com/", preview_image_url="https://cdn/c.jpg")

        resolve = AsyncMock(return_value=None)
        with (
            patch.object(backfill_previews, "async_session_maker", session_maker),
            patch.object(backfill_previews, "resolve_preview_image", resolve),
        ):
            await backfill_previews.backfill(None)

        links = [call.args[1] for call in resolve.await_args_list]
        assert links == ["https://a.example.com/", "https://b.example.com/"]

    @pytest.mark.asyncio
    async def test_limit_zero_processes_nothing(self, session_maker, make_user, make_movie):
        user, _ = await make_user()
        await make_movie(user.id, "https://a.example.com/")

        resolve = AsyncMock(return_value=None)
        with (
            patch.object(backfill_previews, "async_session_maker", session_maker),
            patch.object(backfill_previews, "resolve_preview_image", resolve),
        ):
            await backfill_previews.backfill(0)

        resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_skips_invalid_links(self, session_maker, make_user, make_movie):
        user, _ = await make_user()
        await make_movie(user.id, "not a url")

        resolve = AsyncMock(return_value=None)
        with (
            patch.object(backfill_previews, "async_session_maker", session_maker),
            patch.object(backfill_previews, "resolve_preview_image", resolve),
        ):
            await backfill_previews.backfill(None)

        resolve.assert_not_called()
