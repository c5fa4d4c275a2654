# src/filters/record_validator.py

"""Record validation: required fields and business floors."""

import logging

from src.config.settings import Settings
from src.models.price_pair import PricePair

logger = logging.getLogger("deal_scout.filters")


class RecordValidator:
    """Decide whether resolved fields may become a ProductRecord."""

    @staticmethod
    def missing_field(
        title: str, product_url: str, prices: PricePair,
    ) -> str | None:
        """Name the first missing required field, or ``None``."""
        if not title.strip():
            return "title"
        if not product_url.strip():
            return "product_url"
        if prices.is_empty:
            return "price_sale"
        return None

    @staticmethod
    def below_floor(
        sale: float,
        discount_percent: int,
        settings: Settings,
    ) -> str | None:
        """Describe the business floor *sale*/*discount* misses, or ``None``."""
        if sale < settings.MIN_SALE_PRICE:
            return (
                f"sale price {sale:.2f} below minimum "
                f"{settings.MIN_SALE_PRICE:.2f}"
            )
        floor = settings.MIN_DISCOUNT_PERCENT
        if floor is not None and discount_percent < floor:
            return f"discount {discount_percent}% below minimum {floor}%"
        return None

    @staticmethod
    def rejection_reason(
        title: str,
        product_url: str,
        prices: PricePair,
        discount_percent: int,
        settings: Settings,
    ) -> str | None:
        """Return why a candidate is rejected, or ``None`` if it is valid."""
        missing = RecordValidator.missing_field(title, product_url, prices)
        if missing or prices.sale is None:
            return f"missing {missing or 'price_sale'}"
        reason = RecordValidator.below_floor(
            prices.sale, discount_percent, settings
        )
        if reason:
            logger.debug(
                "Rejected '%s' (%s): %s", title, product_url, reason
            )
        return reason
