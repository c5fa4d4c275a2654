# src/filters/aggregator.py

"""Cross-category merge with identity-based deduplication."""

import logging
from collections.abc import Iterable

from src.models.product import ProductRecord

logger = logging.getLogger("deal_scout.filters")


class RecordAggregator:
    """Merge per-category record lists, first-seen wins."""

    @staticmethod
    def deduplicate(
        records: Iterable[ProductRecord],
    ) -> tuple[list[ProductRecord], int]:
        """Keep the first record per ``id``, preserving order.

        Returns the kept records and the count of removed duplicates.
        """
        seen: set[str] = set()
        kept: list[ProductRecord] = []
        removed = 0

        for record in records:
            if record.id in seen:
                removed += 1
                continue
            seen.add(record.id)
            kept.append(record)

        if removed:
            logger.info("Deduplication removed %d duplicate products", removed)

        return kept, removed

    @staticmethod
    def merge(
        per_category: Iterable[list[ProductRecord]],
    ) -> list[ProductRecord]:
        """Flatten category lists in order and drop repeated ids.

        A product listed under two categories keeps the attribution of
        whichever category came first.
        """
        flat = (record for batch in per_category for record in batch)
        kept, _removed = RecordAggregator.deduplicate(flat)
        return kept
