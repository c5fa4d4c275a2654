# main.py

"""Entry point for the deal_scout listing harvester."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("deal_scout.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(b["id"] for b in Settings.AVAILABLE_BACKENDS)

    parser = argparse.ArgumentParser(
        prog="deal_scout",
        description="Harvest discounted products from category listing pages.",
        epilog=f"Available backends: {valid_ids}",
    )
    parser.add_argument(
        "-c",
        "--categories",
        default=None,
        help="Comma-separated category URLs (default: configured list).",
    )
    parser.add_argument(
        "-b",
        "--backend",
        default=None,
        help=f"Rendering backend (default: {Settings.BROWSER_BACKEND}).",
    )
    parser.add_argument(
        "--max-items",
        type=int,
        default=None,
        dest="max_items",
        help="Max entries processed per category.",
    )
    parser.add_argument(
        "--min-discount",
        type=int,
        default=None,
        dest="min_discount",
        help="Minimum discount percent (0 disables the floor).",
    )
    parser.add_argument(
        "--min-price",
        type=float,
        default=None,
        dest="min_price",
        help="Minimum sale price.",
    )
    parser.add_argument(
        "--enrich",
        action="store_true",
        default=False,
        help="Visit product pages for brand and available sizes.",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        default=False,
        help="Show the browser window.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_path",
        help="Output JSON path (default: public/products.json).",
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        default=False,
        dest="export_csv",
        help="Also export a CSV into results/.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Print INFO logs to the console.",
    )
    return parser


def main() -> None:
    """Parse arguments and run a headless harvest."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("deal_scout starting, log file: %s", log_file)

    from src.cli.runner import build_settings, cli_harvest

    settings = build_settings(
        backend=args.backend,
        max_items=args.max_items,
        min_discount=args.min_discount,
        min_price=args.min_price,
        enrich=args.enrich,
        headed=args.headed,
        output_path=args.output_path,
    )
    exit_code = asyncio.run(
        cli_harvest(
            categories_csv=args.categories,
            settings=settings,
            output_format=args.output_format,
            export_csv=args.export_csv,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
