# src/scrapers/field_resolver.py

"""First-success-wins lookup of one logical field across page variants."""

import asyncio
import logging
from collections.abc import Iterable

from src.browser.base import PageElement
from src.config.settings import Settings
from src.scrapers.site_profile import FieldStrategy

logger = logging.getLogger("deal_scout.fields")


def collapse_whitespace(text: str | None) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    return " ".join((text or "").split())


class FieldResolver:
    """Evaluate an ordered strategy table against a fragment.

    A strategy that finds nothing, times out or raises is skipped;
    the resolver itself never raises.
    """

    def __init__(self, timeout_s: float | None = None) -> None:
        self.timeout_s = (
            timeout_s if timeout_s is not None else Settings.FIELD_TIMEOUT_S
        )

    async def _attempt(
        self, fragment: PageElement, strategy: FieldStrategy,
    ) -> str:
        try:
            raw = await asyncio.wait_for(
                strategy.extract(fragment), timeout=self.timeout_s
            )
        except Exception as exc:
            logger.debug(
                "Strategy %s failed: %s", strategy.selector, exc
            )
            return ""
        return collapse_whitespace(raw)

    async def resolve(
        self,
        fragment: PageElement,
        strategies: Iterable[FieldStrategy],
    ) -> str:
        """Return the first non-empty normalised value, else ``""``."""
        for strategy in strategies:
            value = await self._attempt(fragment, strategy)
            if value:
                return value
        return ""

    async def text_of(self, fragment: PageElement) -> str:
        """Full rendered text of *fragment* (line breaks preserved)."""
        try:
            return await asyncio.wait_for(
                fragment.text(), timeout=self.timeout_s
            )
        except Exception as exc:
            logger.debug("Reading fragment text failed: %s", exc)
            return ""
