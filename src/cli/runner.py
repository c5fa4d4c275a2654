# src/cli/runner.py

"""Headless CLI harvest runner on top of the async orchestrator."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.product import ProductRecord
from src.services.category_pipeline import CategoryStatus
from src.services.harvest_orchestrator import (
    HarvestOrchestrator,
    HarvestResult,
    resolve_backend,
)
from src.storage.file_manager import FileManager

logger = logging.getLogger("deal_scout.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_STATUS_STYLE: dict[CategoryStatus, str] = {
    CategoryStatus.OK: "[green]OK[/green]",
    CategoryStatus.EMPTY: "[yellow]EMPTY[/yellow]",
    CategoryStatus.NO_PRODUCTS: "[yellow]NO PRODUCTS[/yellow]",
    CategoryStatus.GATED: "[magenta]GATED[/magenta]",
    CategoryStatus.NAV_FAILED: "[red]NAV FAILED[/red]",
    CategoryStatus.ERROR: "[red]ERROR[/red]",
}


def parse_categories(categories_csv: str | None) -> list[str]:
    """Split a comma-separated URL list; default to the configured list."""
    if not categories_csv:
        return list(Settings.CATEGORY_URLS)
    return [u.strip() for u in categories_csv.split(",") if u.strip()]


def build_settings(
    backend: str | None = None,
    max_items: int | None = None,
    min_discount: int | None = None,
    min_price: float | None = None,
    enrich: bool = False,
    headed: bool = False,
    output_path: str | None = None,
) -> Settings:
    """Apply CLI overrides on a fresh Settings instance.

    Raises ``SystemExit`` on an unknown backend id.
    """
    settings = Settings()
    if backend is not None:
        try:
            resolve_backend(backend)
        except KeyError as exc:
            _err.print(f"[red]{exc.args[0]}[/red]")
            raise SystemExit(1) from exc
        settings.BROWSER_BACKEND = backend
    if max_items is not None:
        settings.MAX_ITEMS_PER_CATEGORY = max_items
    if min_discount is not None:
        # 0 disables the discount floor
        settings.MIN_DISCOUNT_PERCENT = min_discount or None
    if min_price is not None:
        settings.MIN_SALE_PRICE = min_price
    if enrich:
        settings.ENRICH_SIZES = True
    if headed:
        settings.HEADLESS = False
    if output_path is not None:
        settings.OUTPUT_PATH = Path(output_path)
    return settings


def _print_categories(result: HarvestResult) -> None:
    """Render the per-category status table to stderr."""
    table = Table(
        title="Categories",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Category", overflow="fold")
    table.add_column("Status", justify="center")
    table.add_column("Entries", justify="right")
    table.add_column("Kept", justify="right", style="green")

    for c in result.categories:
        table.add_row(
            c.url,
            _STATUS_STYLE[c.status],
            str(c.fragments_seen),
            str(len(c.records)),
        )
    _err.print(table)


def _print_table(products: list[ProductRecord]) -> None:
    """Render a Rich table of products to stdout."""
    sorted_products = sorted(
        products, key=lambda p: (-p.discount_percent, p.price_sale)
    )
    table = Table(
        title="Discounted Products",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Brand", style="magenta")
    table.add_column("Title", max_width=50)
    table.add_column("Sale", justify="right", style="green")
    table.add_column("Was", justify="right", style="dim")
    table.add_column("-%", justify="right", style="bold")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, p in enumerate(sorted_products, 1):
        table.add_row(
            str(idx),
            p.brand or "-",
            p.title[:50],
            f"€{p.price_sale:,.2f}",
            (
                f"€{p.price_original:,.2f}"
                if p.price_original is not None
                else "-"
            ),
            f"{p.discount_percent}%",
            p.product_url,
        )

    Console().print(table)


async def cli_harvest(
    categories_csv: str | None,
    settings: Settings,
    output_format: str = "json",
    export_csv: bool = False,
) -> int:
    """Run a headless harvest and return an exit code (0=ok, 1=fail)."""
    categories = parse_categories(categories_csv)
    _err.print(
        f"[bold]Harvesting {len(categories)} categories[/bold]  "
        f"[dim]backend={settings.BROWSER_BACKEND}[/dim]"
    )

    orchestrator = HarvestOrchestrator(settings)
    try:
        result = await orchestrator.run(categories)
    except Exception as exc:
        logger.critical("Harvest aborted: %s", exc, exc_info=True)
        _err.print(f"[red]Harvest aborted: {exc}[/red]")
        return 1

    _print_categories(result)
    for error_msg in result.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")

    file_manager = FileManager(output_path=settings.OUTPUT_PATH)
    try:
        path = file_manager.save_products(result.products)
        _err.print(f"[dim]Saved → {path}[/dim]")
        if export_csv:
            csv_path = file_manager.export_csv(result.products)
            _err.print(f"[dim]Exported → {csv_path}[/dim]")
    except OSError as exc:
        logger.error("Save failed: %s", exc, exc_info=True)
        _err.print(f"[red]Save failed: {exc}[/red]")
        return 1

    if not result.products:
        _err.print("[yellow]No products found.[/yellow]")
        return 1

    detail = (
        f" ({result.deduplicated_count} deduped)"
        if result.deduplicated_count
        else ""
    )
    _err.print(
        f"[green]✓ {len(result.products)} products"
        f" of {result.total_before_dedup}{detail}[/green]"
    )

    if output_format == "table":
        _print_table(result.products)
    else:
        json.dump(
            [p.to_dict() for p in result.products],
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0
