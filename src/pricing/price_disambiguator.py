# src/pricing/price_disambiguator.py

"""Decide which harvested money tokens are the original and sale price."""

import logging
import math
import re

from src.config.settings import Settings
from src.models.price_pair import PricePair
from src.pricing.money_parser import MoneyParser

logger = logging.getLogger("deal_scout.pricing")


def _marker_pattern(markers: list[str]) -> str:
    """Build an alternation for currency markers.

    Word markers must not touch other letters but may touch digits, so
    ``EUR39,99`` counts while ``europe`` does not.
    """
    parts: list[str] = []
    for marker in markers:
        escaped = re.escape(marker.lower())
        if marker.isalpha():
            escaped = rf"(?<![a-z]){escaped}(?![a-z])"
        parts.append(escaped)
    return "|".join(parts)


class PriceDisambiguator:
    """Harvest price candidates from card text and resolve a PricePair.

    Only lines carrying a currency marker are considered, and lines
    that look like per-unit annotations (``€0,29 / 100 g``,
    ``€/kg``) are dropped before any number is read from them.
    """

    def __init__(
        self,
        currency_markers: list[str] | None = None,
        unit_tokens: list[str] | None = None,
    ) -> None:
        markers = currency_markers or Settings.CURRENCY_MARKERS
        units = sorted(
            unit_tokens or Settings.UNIT_TOKENS, key=len, reverse=True
        )
        marker = _marker_pattern(markers)
        unit = "|".join(re.escape(u.lower()) for u in units)
        amount = r"\d+(?:[.,]\d+)?"

        self._marker_re = re.compile(marker)
        self._unit_price_res: list[re.Pattern[str]] = [
            # "€/kg", "29,99 € / 1 l"
            re.compile(rf"(?:{marker})\s*/|/\s*(?:{marker})"),
            # "/ 100 g", "/kg"
            re.compile(rf"/\s*(?:{amount})?\s*(?:{unit})\b"),
            # "per 100 ml"
            re.compile(rf"\bper\s*(?:{amount})?\s*(?:{unit})\b"),
            # any quantity-with-unit next to a currency amount
            re.compile(rf"\b{amount}\s*(?:{unit})\b"),
        ]

    def has_currency(self, line: str) -> bool:
        """True if *line* carries a currency marker."""
        return bool(self._marker_re.search(line.lower()))

    def is_unit_price_line(self, line: str) -> bool:
        """True if *line* is a price-per-unit-of-measure annotation."""
        lower = line.lower()
        return any(rx.search(lower) for rx in self._unit_price_res)

    def extract_candidates(self, raw_text: str | None) -> list[float]:
        """Return the distinct item-price candidates, sorted ascending."""
        if not raw_text:
            return []
        values: set[float] = set()
        for raw_line in raw_text.split("\n"):
            line = raw_line.strip()
            if not line or not self.has_currency(line):
                continue
            if self.is_unit_price_line(line):
                logger.debug("Skipping unit-price line: %r", line)
                continue
            values.update(MoneyParser.find_all(line))
        return sorted(values)

    @staticmethod
    def disambiguate(candidates: list[float]) -> PricePair:
        """Pick sale (minimum) and original (maximum) from *candidates*.

        Intermediate values (instalments, member prices) are dropped.
        """
        unique = sorted(set(candidates))
        if not unique:
            return PricePair()
        if len(unique) == 1:
            return PricePair(original=None, sale=unique[0])
        if len(unique) > 2:
            logger.debug(
                "Discarding intermediate price candidates %s "
                "(sale=%.2f, original=%.2f)",
                unique[1:-1],
                unique[0],
                unique[-1],
            )
        return PricePair(original=unique[-1], sale=unique[0])

    @staticmethod
    def compute_discount(
        original: float | None, sale: float | None,
    ) -> int:
        """Percentage saved, rounded half-up and clamped to 0..100."""
        if original is None or sale is None:
            return 0
        if original <= 0 or sale <= 0:
            return 0
        percent = 100 * (original - sale) / original
        return max(0, min(100, math.floor(percent + 0.5)))

    def resolve(self, raw_text: str | None) -> PricePair:
        """Run the full price pipeline over a card's text."""
        return self.disambiguate(self.extract_candidates(raw_text))
