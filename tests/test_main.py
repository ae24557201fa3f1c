"""Tests for the command-line browse mode."""

import pytest

from home_catalog.config import Settings
from home_catalog.filters import BrowseState
from home_catalog.main import run_browse


class TestRunBrowse:
    async def test_lists_bundled_catalog(self, capsys: pytest.CaptureFixture[str]) -> None:
        state = BrowseState()
        state.update_filters(property_types=["House"])
        state.set_sort("price-high")

        code = await run_browse(Settings(), state, favorites_only=False)

        out = capsys.readouterr().out
        assert code == 0
        assert "2 of 6 properties (sorted by price-high)" in out
        assert "Filters: House" in out
        assert out.index("Craftsman Family Home") < out.index("Mid-century Ranch")

    async def test_favorites_only(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = await run_browse(Settings(), BrowseState(), favorites_only=True)

        out = capsys.readouterr().out
        assert code == 0
        assert "2 of 2 properties" in out
        assert "Pearl District Loft Apartment" in out
        assert "Craftsman Family Home" in out

    async def test_remote_without_url_fails(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = await run_browse(Settings(backend="remote"), BrowseState(), favorites_only=False)

        assert code == 1
        assert "HOME_CATALOG_API_BASE_URL" in capsys.readouterr().out
