# tests/test_content_loader.py

"""Tests for the scroll-and-measure loading loop."""

import unittest
from unittest.mock import AsyncMock, MagicMock

from src.config.settings import Settings
from src.services.content_loader import ContentLoader


def _page(counts: list[int]) -> MagicMock:
    """Fake page whose item count follows *counts*, then stays put."""
    page = MagicMock()
    page.count = AsyncMock(side_effect=counts + [counts[-1]] * 50)
    page.scroll = AsyncMock()
    page.wait = AsyncMock()
    return page


def _settings() -> Settings:
    settings = Settings()
    settings.SCROLL_STEPS = 10
    settings.SCROLL_GRACE_STEPS = 2
    settings.SCROLL_DELTA_PX = 1800
    settings.SCROLL_SETTLE_MS = 1200
    return settings


class TestContentLoader(unittest.IsolatedAsyncioTestCase):
    """Stop conditions of load_until."""

    async def test_stalled_page_stops_at_third_step(self) -> None:
        """No growth is only acted on once the grace steps are over."""
        page = _page([20])
        loader = ContentLoader(_settings())

        count = await loader.load_until(page, "article", target_count=50)

        self.assertEqual(count, 20)
        self.assertEqual(page.count.await_count, 3)
        self.assertEqual(page.scroll.await_count, 2)

    async def test_target_reached(self) -> None:
        page = _page([10, 40, 90])
        loader = ContentLoader(_settings())

        count = await loader.load_until(page, "article", target_count=80)

        self.assertEqual(count, 90)
        self.assertEqual(page.count.await_count, 3)

    async def test_target_already_met(self) -> None:
        page = _page([100])
        loader = ContentLoader(_settings())

        count = await loader.load_until(page, "article", target_count=80)

        self.assertEqual(count, 100)
        page.scroll.assert_not_awaited()

    async def test_growth_keeps_scrolling(self) -> None:
        page = _page([10, 20, 30, 40, 40])
        loader = ContentLoader(_settings())

        count = await loader.load_until(page, "article", target_count=80)

        self.assertEqual(count, 40)
        self.assertEqual(page.count.await_count, 5)

    async def test_step_budget(self) -> None:
        page = _page(list(range(1, 30)))
        loader = ContentLoader(_settings())

        count = await loader.load_until(
            page, "article", target_count=80, max_steps=4
        )

        self.assertEqual(count, 4)
        self.assertEqual(page.scroll.await_count, 4)

    async def test_scroll_uses_configured_delta_and_settle(self) -> None:
        page = _page([5, 5, 5])
        loader = ContentLoader(_settings())

        await loader.load_until(page, "article", target_count=80)

        page.scroll.assert_awaited_with(1800)
        page.wait.assert_awaited_with(1200)

    async def test_count_errors_measure_zero(self) -> None:
        page = MagicMock()
        page.count = AsyncMock(side_effect=RuntimeError("page closed"))
        page.scroll = AsyncMock(side_effect=RuntimeError("page closed"))
        page.wait = AsyncMock()
        loader = ContentLoader(_settings())

        count = await loader.load_until(page, "article", target_count=80)

        self.assertEqual(count, 0)


if __name__ == "__main__":
    unittest.main()
