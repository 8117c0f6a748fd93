# stockhub/cli/runner.py

"""Headless CLI commands: fetch, parse, lookup and serve."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from stockhub.config.settings import Settings
from stockhub.models.aggregated_product import AggregatedProduct
from stockhub.services.feed_refresher import FeedRefresher
from stockhub.services.lookup import StockLookup
from stockhub.services.pipeline import PipelineResult, StockPipeline
from stockhub.storage.file_manager import FileManager

logger = logging.getLogger("stockhub.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def resolve_sources(source_csv: str | None) -> list[str] | None:
    """Map a comma-separated list of source IDs to a validated list.

    Returns ``None`` (meaning all sources) when *source_csv* is ``None``.
    Raises ``SystemExit`` on unknown IDs.
    """
    if source_csv is None:
        return None
    available = {s["id"] for s in Settings.AVAILABLE_SOURCES}
    requested = [
        s.strip() for s in source_csv.split(",") if s.strip()
    ]
    unknown = [r for r in requested if r not in available]
    if unknown:
        valid = ", ".join(sorted(available))
        _err.print(
            f"[red]Unknown source(s): {', '.join(unknown)}[/red]"
        )
        _err.print(f"[dim]Available: {valid}[/dim]")
        raise SystemExit(1)
    return requested


def _apply_data_dir(data_dir: str | None) -> None:
    if data_dir is not None:
        Settings.DATA_DIR = Path(data_dir)


def _print_products(products: list[AggregatedProduct]) -> None:
    """Render a Rich table with one row per (EAN, source) offer."""
    table = Table(
        title="Stock Availability",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("EAN", style="bold")
    table.add_column("Name", max_width=50)
    table.add_column("Source", style="magenta")
    table.add_column("Qty", justify="right")
    table.add_column("Net", justify="right", style="green")
    table.add_column("Gross", justify="right", style="green")
    table.add_column("VAT", justify="right")

    for product in products:
        if not product.available_on:
            table.add_row(
                product.identifier,
                "[dim]not available[/dim]",
                *["—"] * 5,
            )
            continue
        for entry in product.available_on:
            table.add_row(
                product.identifier,
                entry.name[:50],
                entry.source,
                str(entry.quantity),
                f"{entry.price_net:,.2f}",
                f"{entry.price_gross:,.2f}",
                f"{entry.vat_rate * 100:.0f}%",
            )

    Console().print(table)


def _print_parse_summary(
    result: PipelineResult, file_manager: FileManager
) -> None:
    table = Table(
        title="Parse Summary",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Source", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Records", justify="right")
    table.add_column("Rejected", justify="right")
    table.add_column("Fetched", style="dim")
    table.add_column("Notes", style="dim", overflow="fold")

    for source_id, report in result.reports.items():
        if report.failed:
            status = "[red]❌ FAILED[/red]"
            notes = report.source_error
        elif (
            report.total_rejected
            or report.vat_defaulted
            or report.vat_from_stated
            or report.defaulted_fields
        ):
            status = "[yellow]⚠️  PARTIAL[/yellow]"
            notes = "; ".join(report.messages[:3])
        else:
            status = "[green]✅ OK[/green]"
            notes = ""
        table.add_row(
            source_id,
            status,
            str(len(report.records)),
            str(report.total_rejected),
            file_manager.read_timestamp(source_id) or "never",
            notes,
        )

    _err.print(table)


async def run_fetch(
    source_csv: str | None, data_dir: str | None = None
) -> int:
    """Download the selected feeds; exit code 1 if any failed."""
    source_ids = resolve_sources(source_csv)
    _apply_data_dir(data_dir)

    _err.print("[bold]Fetching supplier feeds...[/bold]")
    results = await FeedRefresher(FileManager()).fetch_all(source_ids)

    any_failed = False
    for r in results:
        if r.status == "ok":
            _err.print(
                f"[green]✓ {r.source_id}[/green] "
                f"[dim]({r.elapsed_ms:.0f}ms) → {r.message}[/dim]"
            )
        else:
            any_failed = True
            _err.print(f"[red]✗ {r.source_id}: {r.message}[/red]")
    return 1 if any_failed else 0


async def run_parse(
    source_csv: str | None,
    output_format: str = "json",
    data_dir: str | None = None,
) -> int:
    """Parse stored feeds and rebuild the aggregated collection."""
    source_ids = resolve_sources(source_csv)
    _apply_data_dir(data_dir)

    file_manager = FileManager()
    pipeline = StockPipeline(file_manager)
    result = await pipeline.run(source_ids)

    _print_parse_summary(result, file_manager)
    for error_msg in result.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")

    _err.print(
        f"[green]✓ {result.total_records} records → "
        f"{len(result.products)} products[/green] "
        f"[dim]saved to {result.output_path}[/dim]"
    )

    if output_format == "table":
        _print_products(result.products)
    else:
        summary = {
            source_id: {
                "records": len(report.records),
                "malformedRows": report.malformed_rows,
                "invalidValues": report.invalid_values,
                "missingIdentifier": report.missing_identifier,
                "vatDefaulted": report.vat_defaulted,
                "vatFromStated": report.vat_from_stated,
                "defaultedFields": report.defaulted_fields,
                "error": report.source_error or None,
            }
            for source_id, report in result.reports.items()
        }
        json.dump(
            {"products": len(result.products), "sources": summary},
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    all_failed = bool(result.reports) and len(
        result.failed_sources
    ) == len(result.reports)
    return 1 if all_failed else 0


def run_lookup(
    eans: list[str],
    output_format: str = "json",
    data_dir: str | None = None,
) -> int:
    """Look up one EAN (single record) or several (matching subset)."""
    _apply_data_dir(data_dir)
    lookup = StockLookup.from_file()
    if not len(lookup):
        _err.print(
            "[red]No aggregated stock data; run 'parse' first.[/red]"
        )
        return 1

    if len(eans) == 1:
        product = lookup.find_by_identifier(eans[0])
        products = [product]
        payload: object = product.to_dict()
    else:
        batch = lookup.find_many(eans)
        products = batch.products
        payload = batch.to_dict()
        _err.print(
            f"[dim]{batch.total} of {len(set(eans))} EANs found[/dim]"
        )

    if output_format == "table":
        _print_products(products)
    else:
        json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
    return 0


def run_server(host: str, port: int, data_dir: str | None = None) -> int:
    """Serve the lookup API with uvicorn."""
    import uvicorn

    from stockhub.api.server import create_app

    _apply_data_dir(data_dir)
    _err.print(
        f"[bold]⚡️ Server is running at http://{host}:{port}[/bold]"
    )
    uvicorn.run(create_app(), host=host, port=port, log_config=None)
    return 0
