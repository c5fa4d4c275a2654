# tests/test_aggregator.py

"""Tests for cross-category merging and deduplication."""

import unittest
from datetime import datetime, timezone

from src.filters.aggregator import RecordAggregator
from src.models.product import ProductRecord

SHOES = "https://www.zalando.it/scarpe-donna/?order=sale"
SUNGLASSES = "https://www.zalando.it/occhiali-sole-donna/?order=sale"


def _record(pid: str, category: str, title: str = "") -> ProductRecord:
    return ProductRecord(
        id=f"https://www.zalando.it/p/{pid}",
        title=title or pid,
        brand="",
        price_sale=20.0,
        price_original=40.0,
        discount_percent=50,
        image_url=None,
        product_url=f"https://www.zalando.it/p/{pid}",
        source_category=category,
        scraped_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


class TestDeduplicate(unittest.TestCase):
    """First record per id wins."""

    def test_first_seen_wins(self) -> None:
        records = [
            _record("a", SHOES, "first"),
            _record("b", SHOES),
            _record("a", SHOES, "second"),
        ]

        kept, removed = RecordAggregator.deduplicate(records)

        self.assertEqual([r.title for r in kept], ["first", "b"])
        self.assertEqual(removed, 1)

    def test_empty(self) -> None:
        self.assertEqual(RecordAggregator.deduplicate([]), ([], 0))


class TestMerge(unittest.TestCase):
    """Category order decides attribution."""

    def test_no_duplicate_ids(self) -> None:
        merged = RecordAggregator.merge(
            [
                [_record("a", SUNGLASSES), _record("b", SUNGLASSES)],
                [_record("b", SHOES), _record("c", SHOES)],
            ]
        )

        ids = [r.id for r in merged]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual(len(merged), 3)

    def test_attribution_from_first_category(self) -> None:
        merged = RecordAggregator.merge(
            [[_record("b", SUNGLASSES)], [_record("b", SHOES)]]
        )

        self.assertEqual(merged[0].source_category, SUNGLASSES)

    def test_order_preserved(self) -> None:
        merged = RecordAggregator.merge(
            [[_record("z", SHOES)], [], [_record("y", SUNGLASSES)]]
        )

        self.assertEqual([r.title for r in merged], ["z", "y"])


if __name__ == "__main__":
    unittest.main()
