# src/pricing/money_parser.py

"""Locale-tolerant parsing of price-shaped numerals.

Listing pages mix European (``1.234,56``) and US (``1,234.56``)
grouping conventions, sometimes on the same site.  A price is
always written with exactly two fractional digits, so the
separator that occurs *last* in the numeral is the decimal mark
and the other one (if present) only groups thousands.
"""

import math
import re

# 1-3 digits grouped by "." or "," in threes (or a plain digit run),
# followed by a two-digit fraction.  The look-arounds stop the match
# from starting or ending in the middle of a longer number.
PRICE_PATTERN = re.compile(
    r"(?<![\d.,])((?:\d{1,3}(?:[.,]\d{3})+|\d+)[.,]\d{2})(?!\d)"
)


class MoneyParser:
    """Turn noisy numeric text into non-negative two-decimal amounts."""

    @staticmethod
    def normalise(numeral: str) -> float | None:
        """Convert a single price-shaped numeral to a float.

        >>> MoneyParser.normalise("1.234,56")
        1234.56
        >>> MoneyParser.normalise("1,234.56")
        1234.56
        """
        last_comma = numeral.rfind(",")
        last_dot = numeral.rfind(".")
        if last_comma < 0 and last_dot < 0:
            return None

        if last_comma > last_dot:
            decimal_at, grouping = last_comma, "."
        else:
            decimal_at, grouping = last_dot, ","

        integer_part = numeral[:decimal_at].replace(grouping, "")
        fraction = numeral[decimal_at + 1:]
        try:
            value = float(f"{integer_part}.{fraction}")
        except ValueError:
            return None
        if not math.isfinite(value) or value < 0:
            return None
        return round(value, 2)

    @staticmethod
    def parse(text: str | None) -> float | None:
        """Parse the first price-shaped substring of *text*.

        Returns ``None`` when nothing price-shaped is present.
        """
        if not text:
            return None
        match = PRICE_PATTERN.search(str(text))
        if not match:
            return None
        return MoneyParser.normalise(match.group(1))

    @staticmethod
    def find_all(text: str | None) -> list[float]:
        """Parse every price-shaped substring of *text*, in order."""
        if not text:
            return []
        values: list[float] = []
        for raw in PRICE_PATTERN.findall(str(text)):
            value = MoneyParser.normalise(raw)
            if value is not None:
                values.append(value)
        return values
