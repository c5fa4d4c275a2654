# src/models/product.py

"""Product record model for inter-module data flow."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ProductRecord:
    """One discounted catalog entry harvested from a listing page.

    Records are only ever built from fully-resolved fields; an entry
    that misses a required field never becomes a record.
    """

    id: str
    title: str
    brand: str
    price_sale: float
    price_original: float | None
    discount_percent: int
    image_url: str | None
    product_url: str
    source_category: str
    scraped_at: datetime
    available_sizes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-friendly dict."""
        return {
            "id": self.id,
            "title": self.title,
            "brand": self.brand,
            "price_sale": self.price_sale,
            "price_original": self.price_original,
            "discount_percent": self.discount_percent,
            "image_url": self.image_url,
            "product_url": self.product_url,
            "source_category": self.source_category,
            "scraped_at": self.scraped_at.isoformat(),
            "available_sizes": list(self.available_sizes),
        }
