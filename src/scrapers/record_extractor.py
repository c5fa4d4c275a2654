# src/scrapers/record_extractor.py

"""Build one ProductRecord from one listing fragment."""

import logging
import re
from datetime import datetime, timezone
from urllib.parse import urljoin

from src.browser.base import PageElement
from src.config.settings import Settings
from src.filters.record_validator import RecordValidator
from src.models.product import ProductRecord
from src.pricing.price_disambiguator import PriceDisambiguator
from src.scrapers.field_resolver import FieldResolver
from src.scrapers.product_enricher import ProductEnricher
from src.scrapers.site_profile import SiteProfile

logger = logging.getLogger("deal_scout.extractor")

# Query string and fragment do not affect product identity
_STRIP_PARAMS_RE = re.compile(r"[?#].*$")


def canonical_id(product_url: str) -> str:
    """Product identity: the URL without query string or fragment."""
    return _STRIP_PARAMS_RE.sub("", product_url)


class RecordExtractor:
    """Compose field resolution and price disambiguation per fragment.

    ``extract`` never raises: any missing field, failed lookup or
    unmet business floor yields ``None`` and no partial record.
    """

    def __init__(
        self,
        profile: SiteProfile,
        settings: Settings | None = None,
        resolver: FieldResolver | None = None,
        prices: PriceDisambiguator | None = None,
        enricher: ProductEnricher | None = None,
    ) -> None:
        self.profile = profile
        self.settings = settings or Settings()
        self.resolver = resolver or FieldResolver(self.settings.FIELD_TIMEOUT_S)
        self.prices = prices or PriceDisambiguator(
            self.settings.CURRENCY_MARKERS, self.settings.UNIT_TOKENS
        )
        self.enricher = enricher

    async def extract(
        self,
        fragment: PageElement,
        base_url: str,
        allow_enrich: bool = False,
    ) -> ProductRecord | None:
        """Return a validated record for *fragment*, or ``None``."""
        try:
            return await self._extract(fragment, base_url, allow_enrich)
        except Exception as exc:
            logger.warning(
                "Fragment extraction failed on %s: %s",
                base_url,
                exc,
                exc_info=True,
            )
            return None

    async def _extract(
        self,
        fragment: PageElement,
        base_url: str,
        allow_enrich: bool,
    ) -> ProductRecord | None:
        profile = self.profile
        href = await self.resolver.resolve(fragment, profile.product_url)
        product_url = urljoin(base_url, href) if href else ""
        if not product_url:
            logger.debug("Rejected fragment on %s: missing product_url", base_url)
            return None

        image_url = await self.resolver.resolve(fragment, profile.image_url)
        title = await self.resolver.resolve(fragment, profile.title)
        brand = await self.resolver.resolve(fragment, profile.brand)

        text = await self.resolver.text_of(fragment)
        pair = self.prices.resolve(text)
        discount = PriceDisambiguator.compute_discount(pair.original, pair.sale)

        reason = RecordValidator.rejection_reason(
            title, product_url, pair, discount, self.settings
        )
        if reason or pair.sale is None:
            logger.debug("Rejected %s: %s", product_url, reason)
            return None

        sizes: tuple[str, ...] = ()
        if allow_enrich and self.enricher is not None:
            extra = await self.enricher.enrich(product_url)
            if extra.brand:
                brand = extra.brand
            sizes = extra.available_sizes

        return ProductRecord(
            id=canonical_id(product_url),
            title=title,
            brand=brand,
            price_sale=pair.sale,
            price_original=pair.original,
            discount_percent=discount,
            image_url=image_url or None,
            product_url=product_url,
            source_category=base_url,
            scraped_at=datetime.now(timezone.utc),
            available_sizes=sizes,
        )
