# src/models/price_pair.py

"""Resolved (original, sale) price reading for one listing entry."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PricePair:
    """Original and sale price; a lone price is always the sale price."""

    original: float | None = None
    sale: float | None = None

    @property
    def is_empty(self) -> bool:
        """True when no usable sale price was found."""
        return self.sale is None
