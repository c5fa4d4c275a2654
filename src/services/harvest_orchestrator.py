# src/services/harvest_orchestrator.py

"""Runs every configured category on one shared rendering session."""

import importlib
import logging
from dataclasses import dataclass, field
from typing import Any

from src.browser.base import BrowserSession, PageSession
from src.config.settings import Settings
from src.filters.aggregator import RecordAggregator
from src.models.product import ProductRecord
from src.scrapers.product_enricher import ProductEnricher
from src.scrapers.record_extractor import RecordExtractor
from src.scrapers.site_profile import SiteProfile
from src.services.category_pipeline import (
    CategoryPipeline,
    CategoryResult,
    CategoryStatus,
)

logger = logging.getLogger("deal_scout.orchestrator")


@dataclass
class HarvestResult:
    """Container for a completed harvest across all categories."""

    products: list[ProductRecord] = field(
        default_factory=lambda: list[ProductRecord]()
    )
    categories: list[CategoryResult] = field(
        default_factory=lambda: list[CategoryResult]()
    )
    total_before_dedup: int = 0
    deduplicated_count: int = 0

    @property
    def errors(self) -> list[str]:
        """One message per category that did not complete normally."""
        return [
            f"{c.url}: {c.status.value}" + (f" ({c.error})" if c.error else "")
            for c in self.categories
            if c.status in (CategoryStatus.NAV_FAILED, CategoryStatus.ERROR)
        ]


def _load_browser_class(dotted_path: str) -> type[Any]:
    """Dynamically import a backend class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


def resolve_backend(backend_id: str) -> dict[str, str]:
    """Look up a backend registry entry; raise ``KeyError`` if unknown."""
    for backend in Settings.AVAILABLE_BACKENDS:
        if backend["id"] == backend_id:
            return backend
    valid = ", ".join(b["id"] for b in Settings.AVAILABLE_BACKENDS)
    raise KeyError(f"Unknown backend '{backend_id}' (available: {valid})")


class HarvestOrchestrator:
    """Coordinates backend lifetime, category pipelines and merging."""

    def __init__(
        self,
        settings: Settings | None = None,
        profile: SiteProfile | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.profile = profile or SiteProfile.load(self.settings.SITE_PROFILE)

    def _build_browser(self) -> BrowserSession:
        entry = resolve_backend(self.settings.BROWSER_BACKEND)
        browser_cls = _load_browser_class(entry["browser"])
        browser: BrowserSession = browser_cls(self.settings)
        return browser

    def build_pipeline(self, browser: BrowserSession) -> CategoryPipeline:
        """Wire extractor (and enricher when enabled) into a pipeline."""
        enricher = (
            ProductEnricher(browser, self.profile, self.settings)
            if self.settings.ENRICH_SIZES
            else None
        )
        extractor = RecordExtractor(
            self.profile, self.settings, enricher=enricher
        )
        return CategoryPipeline(self.profile, extractor, self.settings)

    async def _run_category(
        self,
        pipeline: CategoryPipeline,
        page: PageSession,
        url: str,
    ) -> CategoryResult:
        """Run one category; nothing it raises escapes."""
        try:
            return await pipeline.run(
                page, url, self.settings.MAX_ITEMS_PER_CATEGORY
            )
        except Exception as exc:
            logger.error(
                "Failed category %s: %s", url, exc, exc_info=True
            )
            return CategoryResult(url, CategoryStatus.ERROR, error=str(exc))

    async def harvest(
        self,
        browser: BrowserSession,
        category_urls: list[str],
    ) -> HarvestResult:
        """Harvest *category_urls* in order on an already started session."""
        pipeline = self.build_pipeline(browser)
        page = await browser.new_page()
        result = HarvestResult()

        try:
            for url in category_urls:
                category = await self._run_category(pipeline, page, url)
                result.categories.append(category)
        finally:
            try:
                await page.close()
            except Exception as exc:
                logger.debug("Closing page failed: %s", exc)

        batches = [c.records for c in result.categories]
        result.total_before_dedup = sum(len(b) for b in batches)
        result.products = RecordAggregator.merge(batches)
        result.deduplicated_count = (
            result.total_before_dedup - len(result.products)
        )
        logger.info(
            "Harvest finished: %d unique products from %d categories",
            len(result.products),
            len(result.categories),
        )
        return result

    async def run(self, category_urls: list[str] | None = None) -> HarvestResult:
        """Start the configured backend and harvest every category.

        Backend start-up failures propagate to the caller.
        """
        urls = category_urls or self.settings.CATEGORY_URLS
        async with self._build_browser() as browser:
            return await self.harvest(browser, urls)
