# src/services/content_loader.py

"""Scroll-driven materialisation of lazily loaded listing entries."""

import logging

from src.browser.base import PageSession
from src.config.settings import Settings

logger = logging.getLogger("deal_scout.loader")


class ContentLoader:
    """Fixed-budget polling loop standing in for a load-complete event.

    Each step measures the materialised item count.  The loop stops
    when the target is reached, when the count did not grow since the
    previous step (checked once the grace steps are over, so slow
    first loads are tolerated), or when the step budget runs out.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()

    async def _measure(self, page: PageSession, selector: str) -> int:
        try:
            return await page.count(selector)
        except Exception as exc:
            logger.debug("Counting %r failed: %s", selector, exc)
            return 0

    async def load_until(
        self,
        page: PageSession,
        selector: str,
        target_count: int,
        max_steps: int | None = None,
    ) -> int:
        """Reveal items matching *selector*; return the final count."""
        steps = max_steps if max_steps is not None else self.settings.SCROLL_STEPS
        grace = self.settings.SCROLL_GRACE_STEPS
        last_count = 0
        count = 0

        for step in range(steps):
            count = await self._measure(page, selector)
            if count >= target_count:
                logger.debug("Target %d reached at step %d", target_count, step + 1)
                return count
            if step >= grace and count == last_count:
                logger.info(
                    "Loading converged at %d items after %d steps",
                    count,
                    step + 1,
                )
                return count
            last_count = count

            try:
                await page.scroll(self.settings.SCROLL_DELTA_PX)
            except Exception as exc:
                logger.debug("Scroll failed: %s", exc)
            await page.wait(self.settings.SCROLL_SETTLE_MS)

        logger.debug("Scroll budget of %d steps exhausted at %d items", steps, count)
        return count
