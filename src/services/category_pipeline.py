# src/services/category_pipeline.py

"""Per-category glue: navigate, load, enumerate, extract."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from src.browser.base import PageElement, PageSession
from src.config.settings import Settings
from src.models.product import ProductRecord
from src.scrapers.record_extractor import RecordExtractor
from src.scrapers.site_profile import SiteProfile
from src.services.content_loader import ContentLoader
from src.services.diagnostics import DiagnosticsRecorder
from src.services.navigation import NavigationController, NavigationStatus

logger = logging.getLogger("deal_scout.pipeline")


class CategoryStatus(Enum):
    """Why a category produced the records it did."""

    OK = "ok"
    EMPTY = "empty"              # entries found, none passed the filters
    NO_PRODUCTS = "no_products"  # no listing markup matched
    GATED = "gated"              # redirected to a country/availability gate
    NAV_FAILED = "nav_failed"    # navigation retries exhausted
    ERROR = "error"              # unexpected failure inside the category


@dataclass
class CategoryResult:
    """Outcome of harvesting one category URL."""

    url: str
    status: CategoryStatus
    records: list[ProductRecord] = field(
        default_factory=lambda: list[ProductRecord]()
    )
    fragments_seen: int = 0
    enriched_count: int = 0
    error: str = ""


class CategoryPipeline:
    """Harvest one category page into a list of records.

    Runs on the shared page so consent and geo state carry over
    between categories; categories must therefore run one at a time.
    """

    def __init__(
        self,
        profile: SiteProfile,
        extractor: RecordExtractor,
        settings: Settings | None = None,
        navigator: NavigationController | None = None,
        loader: ContentLoader | None = None,
        diagnostics: DiagnosticsRecorder | None = None,
    ) -> None:
        self.profile = profile
        self.extractor = extractor
        self.settings = settings or Settings()
        self.navigator = navigator or NavigationController(self.settings)
        self.loader = loader or ContentLoader(self.settings)
        self.diagnostics = diagnostics or DiagnosticsRecorder(self.settings)

    async def _find_listing_selector(self, page: PageSession) -> str | None:
        """First wait candidate that shows more than a handful of entries."""
        for selector in self.profile.wait_candidates:
            try:
                if not await page.wait_for_selector(
                    selector, self.settings.PRODUCT_WAIT_TIMEOUT_MS
                ):
                    continue
                if await page.count(selector) > self.settings.MIN_VISIBLE_PRODUCTS:
                    return selector
            except Exception as exc:
                logger.debug("Wait candidate %r failed: %s", selector, exc)
        return None

    async def _collect_fragments(
        self, page: PageSession, matched: str,
    ) -> list[PageElement]:
        """Enumerate entry fragments in page order."""
        ordered = [matched] + [
            s for s in self.profile.product_card if s != matched
        ]
        for selector in ordered:
            try:
                fragments = await page.query_all(selector)
            except Exception as exc:
                logger.debug("Card selector %r failed: %s", selector, exc)
                continue
            if fragments:
                return fragments
        return []

    async def run(
        self,
        page: PageSession,
        url: str,
        max_items: int | None = None,
    ) -> CategoryResult:
        """Harvest *url* on *page*."""
        limit = (
            max_items
            if max_items is not None
            else self.settings.MAX_ITEMS_PER_CATEGORY
        )
        logger.info("Opening category %s", url)

        outcome = await self.navigator.open(page, url)
        if outcome.status is NavigationStatus.FAILED:
            await self.diagnostics.capture(page, "debug-nav-failed")
            return CategoryResult(
                url, CategoryStatus.NAV_FAILED, error=outcome.error
            )
        if outcome.status is NavigationStatus.GATED:
            await self.diagnostics.capture(page, "debug-country-gate")
            return CategoryResult(
                url, CategoryStatus.GATED, error=outcome.final_url
            )

        matched = await self._find_listing_selector(page)
        if matched is None:
            logger.warning("No product selector matched on %s", url)
            await self.diagnostics.capture(page, "debug-no-products")
            return CategoryResult(url, CategoryStatus.NO_PRODUCTS)

        await self.loader.load_until(page, matched, limit)
        fragments = (await self._collect_fragments(page, matched))[:limit]

        records: list[ProductRecord] = []
        enriched = 0
        for fragment in fragments:
            allow_enrich = (
                self.settings.ENRICH_SIZES
                and enriched < self.settings.ENRICH_MAX_PER_CATEGORY
            )
            record = await self.extractor.extract(fragment, url, allow_enrich)
            if record is None:
                continue
            records.append(record)
            if allow_enrich:
                enriched += 1

        if not records:
            logger.warning("Empty results for %s", url)
            await self.diagnostics.capture(page, "debug-empty")
            return CategoryResult(
                url, CategoryStatus.EMPTY, fragments_seen=len(fragments)
            )

        logger.info(
            "%s -> %d items from %d entries (enriched: %d)",
            url,
            len(records),
            len(fragments),
            enriched,
        )
        return CategoryResult(
            url,
            CategoryStatus.OK,
            records=records,
            fragments_seen=len(fragments),
            enriched_count=enriched,
        )
