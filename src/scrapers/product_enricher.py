# src/scrapers/product_enricher.py

"""Optional product-page visit that refines brand and collects sizes."""

import logging
import re
from dataclasses import dataclass

from src.browser.base import BrowserSession, PageElement, PageSession
from src.config.settings import Settings
from src.scrapers.field_resolver import FieldResolver, collapse_whitespace
from src.scrapers.site_profile import SiteProfile
from src.services.navigation import NavigationController

logger = logging.getLogger("deal_scout.enricher")

# "36", "35.5", "37 1/3"
_SIZE_RE = re.compile(r"^\d+(\s*\d*\s*/\s*\d+)?(\.\d+)?$")
_SIZE_SYSTEM_RE = re.compile(r"^(EU|IT|US|UK)\s*", re.IGNORECASE)


@dataclass(frozen=True)
class Enrichment:
    """What a product-page visit yielded."""

    brand: str = ""
    available_sizes: tuple[str, ...] = ()


def parse_size_label(text: str) -> str | None:
    """Extract a size label from a size-picker row.

    Rows look like ``"35.5 | 3 €53.95"``; only the chunk before
    ``|`` or ``€`` is kept and a size-system prefix is dropped.
    """
    chunk = collapse_whitespace(text).split("|")[0].split("€")[0].strip()
    cleaned = _SIZE_SYSTEM_RE.sub("", chunk).strip()
    if cleaned and _SIZE_RE.match(cleaned):
        return cleaned
    return None


def _size_sort_key(label: str) -> tuple[int, float, str]:
    # fractional sizes ("37 1/3") sort just above their whole size
    numeric = re.sub(r"\s*/\s*", ".", label).replace(" ", ".")
    match = re.match(r"^\d+(\.\d+)?", numeric)
    if match:
        return (0, float(match.group(0)), label)
    return (1, 0.0, label)


def sort_sizes(labels: list[str]) -> list[str]:
    """Sort size labels numerically, non-numeric ones last."""
    return sorted(set(labels), key=_size_sort_key)


class ProductEnricher:
    """Visit product pages in a sibling page of the shared session."""

    def __init__(
        self,
        browser: BrowserSession,
        profile: SiteProfile,
        settings: Settings | None = None,
        navigator: NavigationController | None = None,
        resolver: FieldResolver | None = None,
    ) -> None:
        self.browser = browser
        self.profile = profile
        self.settings = settings or Settings()
        self.navigator = navigator or NavigationController(self.settings)
        self.resolver = resolver or FieldResolver(self.settings.FIELD_TIMEOUT_S)

    async def _open_size_picker(self, page: PageSession) -> None:
        for selector in self.profile.size_openers:
            try:
                if await page.count(selector):
                    await page.click(
                        selector, self.settings.ENRICH_OPENER_TIMEOUT_MS
                    )
                    await page.wait(800)
                    return
            except Exception as exc:
                logger.debug("Size opener %r failed: %s", selector, exc)

    async def _panel_visible(self, page: PageSession) -> bool:
        for selector in self.profile.size_panels:
            if await page.wait_for_selector(
                selector, self.settings.ENRICH_PANEL_TIMEOUT_MS
            ):
                return True
        return False

    @staticmethod
    async def _is_disabled(option: PageElement) -> bool:
        if await option.attribute("aria-disabled") == "true":
            return True
        return await option.attribute("disabled") is not None

    async def _collect_sizes(self, page: PageSession) -> list[str]:
        labels: list[str] = []
        for selector in self.profile.size_options:
            for option in await page.query_all(selector):
                try:
                    if await self._is_disabled(option):
                        continue
                    label = parse_size_label(await option.text())
                except Exception as exc:
                    logger.debug("Size option unreadable: %s", exc)
                    continue
                if label:
                    labels.append(label)
        return sort_sizes(labels)

    async def _page_brand(self, page: PageSession) -> str:
        roots = await page.query_all("html")
        if not roots:
            return ""
        return await self.resolver.resolve(roots[0], self.profile.page_brand)

    async def enrich(self, product_url: str) -> Enrichment:
        """Return brand and sizes for *product_url*; empty on any failure."""
        page: PageSession | None = None
        try:
            page = await self.browser.new_page()
            await page.goto(product_url, self.settings.ENRICH_TIMEOUT_MS)
            await self.navigator.dismiss_consent(page)
            await page.wait(1200)

            brand = await self._page_brand(page)
            await self._open_size_picker(page)
            if not await self._panel_visible(page):
                logger.debug("No size panel on %s", product_url)
                return Enrichment(brand=brand)
            sizes = await self._collect_sizes(page)
            return Enrichment(brand=brand, available_sizes=tuple(sizes))
        except Exception as exc:
            logger.warning("Enrichment failed for %s: %s", product_url, exc)
            return Enrichment()
        finally:
            if page is not None:
                try:
                    await page.close()
                except Exception as exc:
                    logger.debug("Closing enrichment page failed: %s", exc)
