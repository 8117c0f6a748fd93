# stockhub/services/feed_refresher.py

"""Concurrent download of every supplier feed."""

import asyncio
import logging
import time
from dataclasses import dataclass

from stockhub.config.settings import Settings
from stockhub.models.errors import SourceUnavailable
from stockhub.services.pipeline import load_class
from stockhub.storage.file_manager import FileManager

logger = logging.getLogger("stockhub.fetch")


@dataclass
class FetchResult:
    """Result of fetching a single source."""

    source_id: str
    status: str  # "ok", "failed"
    elapsed_ms: float
    message: str


def fetch_source(
    source: dict[str, str], file_manager: FileManager
) -> FetchResult:
    """Fetch and store one source's feed, never raising."""
    source_id = source["id"]
    start = time.monotonic()
    try:
        fetcher = load_class(source["fetcher"])(
            source_id, file_manager
        )
        path = fetcher.run()
    except SourceUnavailable as exc:
        return FetchResult(
            source_id=source_id,
            status="failed",
            elapsed_ms=(time.monotonic() - start) * 1000,
            message=exc.reason,
        )
    except Exception as exc:
        logger.error(
            "Fetcher for %s crashed: %s", source_id, exc, exc_info=True
        )
        return FetchResult(
            source_id=source_id,
            status="failed",
            elapsed_ms=(time.monotonic() - start) * 1000,
            message=str(exc)[:120],
        )
    return FetchResult(
        source_id=source_id,
        status="ok",
        elapsed_ms=(time.monotonic() - start) * 1000,
        message=str(path),
    )


class FeedRefresher:
    """Runs the source fetchers concurrently."""

    def __init__(self, file_manager: FileManager | None = None) -> None:
        self.sources = Settings.AVAILABLE_SOURCES
        self.file_manager = file_manager or FileManager()

    async def fetch_all(
        self, source_ids: list[str] | None = None
    ) -> list[FetchResult]:
        """Fetch every selected source (default: all) concurrently."""
        selected = [
            src
            for src in self.sources
            if source_ids is None or src["id"] in source_ids
        ]
        tasks = [
            asyncio.to_thread(fetch_source, src, self.file_manager)
            for src in selected
        ]
        results: list[FetchResult] = list(await asyncio.gather(*tasks))
        for r in results:
            log = logger.info if r.status == "ok" else logger.error
            log(
                "Fetch %s: %s (%.0fms) %s",
                r.source_id,
                r.status,
                r.elapsed_ms,
                r.message,
            )
        return results
