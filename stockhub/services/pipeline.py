# stockhub/services/pipeline.py

"""Orchestrates parsing of every supplier feed and their aggregation."""

import asyncio
import importlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from stockhub.config.settings import Settings
from stockhub.models.aggregated_product import AggregatedProduct
from stockhub.models.errors import SourceUnavailable
from stockhub.models.parse_report import ParseReport
from stockhub.parsers.base_parser import BaseParser
from stockhub.services.aggregator import StockAggregator
from stockhub.storage.file_manager import FileManager

logger = logging.getLogger("stockhub.pipeline")


@dataclass
class PipelineResult:
    """Container for one completed parse-and-aggregate run."""

    products: list[AggregatedProduct] = field(
        default_factory=lambda: list[AggregatedProduct]()
    )
    reports: dict[str, ParseReport] = field(
        default_factory=lambda: dict[str, ParseReport]()
    )
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )
    output_path: Path | None = None

    @property
    def total_records(self) -> int:
        return sum(len(r.records) for r in self.reports.values())

    @property
    def failed_sources(self) -> list[str]:
        return [s for s, r in self.reports.items() if r.failed]


def load_class(dotted_path: str) -> type[Any]:
    """Dynamically import a class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


class StockPipeline:
    """Runs the source parsers concurrently, then aggregates their output.

    Parsers are built up front so a broken field mapping surfaces as a
    ``ParserConfigError`` before any feed is read. At run time a source
    that cannot be read or parsed contributes an empty record list and
    never stops the other sources or the aggregation.
    """

    def __init__(
        self,
        file_manager: FileManager | None = None,
        sources: list[dict[str, str]] | None = None,
    ) -> None:
        self.settings = Settings()
        self.file_manager = file_manager or FileManager()
        self.sources = sources or self.settings.AVAILABLE_SOURCES
        self.parsers: dict[str, BaseParser] = {
            src["id"]: load_class(src["parser"])(src["id"])
            for src in self.sources
        }

    # ── Private helpers ──────────────────────────────────

    def _parse_source(self, source: dict[str, str]) -> ParseReport:
        """Read one raw feed, parse it and save its processed records."""
        source_id = source["id"]
        try:
            raw = self.file_manager.read_raw(source_id, source["raw_file"])
        except OSError as exc:
            raise SourceUnavailable(
                source_id, f"raw feed not readable: {exc}"
            ) from exc

        report = self.parsers[source_id].run(raw)
        if not report.failed:
            self.file_manager.save_records(source_id, report.records)
        return report

    async def _run_parsers(
        self, sources: list[dict[str, str]]
    ) -> tuple[dict[str, ParseReport], list[str]]:
        """Dispatch parsers concurrently and collect their reports.

        Returns the per-source reports and a list of error messages.
        """
        tasks = [
            asyncio.to_thread(self._parse_source, src) for src in sources
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        reports: dict[str, ParseReport] = {}
        errors: list[str] = []
        for src, outcome in zip(sources, outcomes):
            source_id = src["id"]
            if isinstance(outcome, ParseReport):
                reports[source_id] = outcome
                if outcome.failed:
                    errors.append(outcome.summary())
                continue

            reason = (
                outcome.reason
                if isinstance(outcome, SourceUnavailable)
                else f"{type(outcome).__name__}: {outcome}"
            )
            reports[source_id] = ParseReport(
                source=source_id, source_error=reason
            )
            errors.append(f"{source_id}: unavailable ({reason})")
            logger.error(
                "Parser for %s failed: %s",
                source_id,
                reason,
                exc_info=outcome,
            )

        return reports, errors

    # ── Public API ───────────────────────────────────────

    async def run(
        self, source_ids: list[str] | None = None
    ) -> PipelineResult:
        """Parse the selected sources (default: all) and aggregate them.

        The aggregated blob is overwritten wholesale on every run.
        """
        selected = [
            src
            for src in self.sources
            if source_ids is None or src["id"] in source_ids
        ]
        logger.info(
            "Started parsing %d sources: %s",
            len(selected),
            ", ".join(s["id"] for s in selected),
        )

        result = PipelineResult()
        result.reports, result.errors = await self._run_parsers(selected)

        result.products = StockAggregator.aggregate_by_source(
            {s: r.records for s, r in result.reports.items()},
            self.settings.SOURCE_ORDER,
        )
        result.output_path = await asyncio.to_thread(
            self.file_manager.save_aggregated, result.products
        )

        for report in result.reports.values():
            logger.info("  - %s", report.summary())
        logger.info(
            "Pipeline finished: %d records, %d products, %d failed sources",
            result.total_records,
            len(result.products),
            len(result.failed_sources),
        )
        return result
