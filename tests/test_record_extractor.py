# tests/test_record_extractor.py

"""Tests for fragment-to-record extraction against the listing fixture."""

import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from src.browser.base import PageElement
from src.browser.static_backend import StaticPage
from src.config.settings import Settings
from src.scrapers.product_enricher import Enrichment
from src.scrapers.record_extractor import RecordExtractor, canonical_id
from src.scrapers.site_profile import SiteProfile

FIXTURES_DIR = Path(__file__).parent / "fixtures"
CATEGORY_URL = "https://www.zalando.it/scarpe-donna/?order=sale"


def _settings() -> Settings:
    settings = Settings()
    settings.MIN_SALE_PRICE = 10.0
    settings.MIN_DISCOUNT_PERCENT = 35
    settings.FIELD_TIMEOUT_S = 2.0
    return settings


async def _cards() -> list[PageElement]:
    with open(FIXTURES_DIR / "listing_page.html", encoding="utf-8") as f:
        page = StaticPage.from_html(f.read(), CATEGORY_URL)
    return await page.query_all('[data-testid="product-card"]')


class TestCanonicalId(unittest.TestCase):
    """Identity ignores query strings and fragments."""

    def test_strips_query(self) -> None:
        self.assertEqual(
            canonical_id("https://www.zalando.it/p/abc123?q=1"),
            "https://www.zalando.it/p/abc123",
        )

    def test_strips_fragment(self) -> None:
        self.assertEqual(
            canonical_id("https://shop.example.com/p/1#reviews"),
            "https://shop.example.com/p/1",
        )

    def test_plain_url_unchanged(self) -> None:
        url = "https://shop.example.com/p/1"
        self.assertEqual(canonical_id(url), url)


class TestRecordExtractor(unittest.IsolatedAsyncioTestCase):
    """End-to-end extraction from fixture fragments."""

    async def asyncSetUp(self) -> None:
        self.profile = SiteProfile.load("zalando")
        self.extractor = RecordExtractor(self.profile, _settings())
        self.cards = await _cards()

    async def test_fixture_has_seven_cards(self) -> None:
        self.assertEqual(len(self.cards), 7)

    async def test_sneaker_card(self) -> None:
        """Unit-price line is ignored; sale/original come from the rest."""
        record = await self.extractor.extract(self.cards[0], CATEGORY_URL)

        assert record is not None
        self.assertEqual(record.id, "https://www.zalando.it/p/abc123")
        self.assertEqual(record.product_url, "https://www.zalando.it/p/abc123?q=1")
        self.assertEqual(record.title, "Sneaker Model")
        self.assertEqual(record.brand, "Brand X")
        self.assertEqual(record.price_sale, 39.99)
        self.assertEqual(record.price_original, 79.99)
        self.assertEqual(record.discount_percent, 50)
        self.assertEqual(record.image_url, "https://img.example.com/abc123.jpg")
        self.assertEqual(record.source_category, CATEGORY_URL)
        self.assertIsInstance(record.scraped_at, datetime)
        self.assertIsNotNone(record.scraped_at.tzinfo)
        self.assertEqual(record.available_sizes, ())

    async def test_low_discount_rejected(self) -> None:
        """14% off misses the 35% floor."""
        self.assertIsNone(
            await self.extractor.extract(self.cards[1], CATEGORY_URL)
        )

    async def test_below_min_price_rejected(self) -> None:
        """A single €8,50 is under the sale-price floor."""
        self.assertIsNone(
            await self.extractor.extract(self.cards[2], CATEGORY_URL)
        )

    async def test_missing_product_url_rejected(self) -> None:
        self.assertIsNone(
            await self.extractor.extract(self.cards[3], CATEGORY_URL)
        )

    async def test_fallback_strategies(self) -> None:
        """Title from img alt, brand from the brand link, lazy image."""
        record = await self.extractor.extract(self.cards[4], CATEGORY_URL)

        assert record is not None
        self.assertEqual(record.title, "Leather Bag")
        self.assertEqual(record.brand, "Maison Z")
        self.assertEqual(record.image_url, "https://img.example.com/bag001.jpg")
        self.assertEqual(record.price_sale, 120.0)
        self.assertEqual(record.price_original, 240.0)

    async def test_us_grouping_and_absolute_url(self) -> None:
        record = await self.extractor.extract(self.cards[5], CATEGORY_URL)

        assert record is not None
        self.assertEqual(record.id, "https://www.zalando.it/p/sun777")
        self.assertEqual(record.price_sale, 1234.56)
        self.assertEqual(record.price_original, 2469.12)
        self.assertEqual(record.discount_percent, 50)

    async def test_extraction_is_idempotent(self) -> None:
        """Same fragment twice yields the same fields."""
        first = await self.extractor.extract(self.cards[0], CATEGORY_URL)
        second = await self.extractor.extract(self.cards[0], CATEGORY_URL)

        assert first is not None and second is not None
        a = first.to_dict()
        b = second.to_dict()
        a.pop("scraped_at")
        b.pop("scraped_at")
        self.assertEqual(a, b)

    async def test_no_discount_floor(self) -> None:
        """With the discount floor disabled only the price floor applies."""
        settings = _settings()
        settings.MIN_DISCOUNT_PERCENT = None
        extractor = RecordExtractor(self.profile, settings)

        record = await extractor.extract(self.cards[1], CATEGORY_URL)

        assert record is not None
        self.assertEqual(record.discount_percent, 14)

    async def test_broken_fragment_returns_none(self) -> None:
        fragment = MagicMock(spec=PageElement)
        fragment.query = AsyncMock(side_effect=RuntimeError("gone"))
        fragment.text = AsyncMock(side_effect=RuntimeError("gone"))

        self.assertIsNone(await self.extractor.extract(fragment, CATEGORY_URL))

    async def test_enrichment_overrides_brand(self) -> None:
        enricher = MagicMock()
        enricher.enrich = AsyncMock(
            return_value=Enrichment(brand="Brand X Originals", available_sizes=("36", "37"))
        )
        extractor = RecordExtractor(self.profile, _settings(), enricher=enricher)

        record = await extractor.extract(
            self.cards[0], CATEGORY_URL, allow_enrich=True
        )

        assert record is not None
        enricher.enrich.assert_awaited_once_with(
            "https://www.zalando.it/p/abc123?q=1"
        )
        self.assertEqual(record.brand, "Brand X Originals")
        self.assertEqual(record.available_sizes, ("36", "37"))

    async def test_empty_enrichment_keeps_listing_brand(self) -> None:
        enricher = MagicMock()
        enricher.enrich = AsyncMock(return_value=Enrichment())
        extractor = RecordExtractor(self.profile, _settings(), enricher=enricher)

        record = await extractor.extract(
            self.cards[0], CATEGORY_URL, allow_enrich=True
        )

        assert record is not None
        self.assertEqual(record.brand, "Brand X")

    async def test_enrichment_skipped_without_permission(self) -> None:
        enricher = MagicMock()
        enricher.enrich = AsyncMock(return_value=Enrichment(brand="Other"))
        extractor = RecordExtractor(self.profile, _settings(), enricher=enricher)

        await extractor.extract(self.cards[0], CATEGORY_URL)

        enricher.enrich.assert_not_awaited()

    async def test_rejected_fragment_never_enriched(self) -> None:
        enricher = MagicMock()
        enricher.enrich = AsyncMock(return_value=Enrichment())
        extractor = RecordExtractor(self.profile, _settings(), enricher=enricher)

        await extractor.extract(self.cards[1], CATEGORY_URL, allow_enrich=True)

        enricher.enrich.assert_not_awaited()


if __name__ == "__main__":
    unittest.main()
