# src/storage/file_manager.py

"""Handles saving harvested products to disk."""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings
from src.models.product import ProductRecord

logger = logging.getLogger("deal_scout.storage")


class FileManager:
    """Handles saving harvested products to disk."""

    def __init__(
        self,
        output_path: Path | None = None,
        results_dir: Path | None = None,
    ) -> None:
        self.output_path: Path = output_path or Settings.OUTPUT_PATH
        self.results_dir: Path = results_dir or Settings.RESULTS_DIR
        logger.debug(
            "FileManager initialised: output_path=%s, results_dir=%s",
            self.output_path,
            self.results_dir,
        )

    def save_products(self, products: list[ProductRecord]) -> Path:
        """Write the whole batch as one JSON array to ``output_path``."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        data = [p.to_dict() for p in products]

        with open(self.output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.info(
            "Saved %d products to %s", len(products), self.output_path
        )
        return self.output_path

    def export_csv(self, products: list[ProductRecord]) -> Path:
        """Export products to a CSV file sorted by discount (largest first)."""
        self.results_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"export_products_{timestamp}.csv"

        sorted_products = sorted(
            products, key=lambda p: (-p.discount_percent, p.price_sale)
        )

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                [
                    "Brand",
                    "Title",
                    "Sale",
                    "Original",
                    "Discount %",
                    "Category",
                    "URL",
                ]
            )
            for p in sorted_products:
                writer.writerow(
                    [
                        p.brand,
                        p.title,
                        f"{p.price_sale:.2f}",
                        (
                            f"{p.price_original:.2f}"
                            if p.price_original is not None
                            else ""
                        ),
                        p.discount_percent,
                        p.source_category,
                        p.product_url,
                    ]
                )

        logger.info("Exported %d products to %s", len(products), filepath)
        return filepath
