# stockhub/fetchers/base_fetcher.py

"""Abstract base class for supplier feed fetchers."""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from curl_cffi import requests as curl_requests

from stockhub.config.settings import Settings
from stockhub.models.errors import SourceUnavailable
from stockhub.storage.file_manager import FileManager


class BaseFetcher(ABC):
    """Abstract base class for supplier feed fetchers.

    A fetcher downloads one supplier's raw feed and stores it, together
    with a ``last-update.txt`` timestamp, where the pipeline will pick
    it up. The payload is stored untouched; parsing is not its job.
    """

    RAW_FILENAME: str = ""

    def __init__(
        self,
        source_name: str,
        file_manager: FileManager | None = None,
    ) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(
            f"stockhub.{source_name}"
        )
        self.settings = Settings()
        self.file_manager = file_manager or FileManager()
        self.session = curl_requests.Session()
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def _fetch_get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> curl_requests.Response:
        """GET with retries and linear backoff.

        Raises:
            SourceUnavailable: once every attempt has failed.
        """
        last_error = "no attempt made"
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.get(
                    url,
                    headers=headers or {},
                    timeout=self._request_timeout,
                )
                if resp.status_code == 200:
                    return resp
                last_error = f"HTTP {resp.status_code}"
                self.logger.warning(
                    "[%s] HTTP %d on attempt %d: %s",
                    self.source_name,
                    resp.status_code,
                    attempt + 1,
                    resp.text[:200],
                )
            except Exception as exc:
                last_error = str(exc)
                self.logger.warning(
                    "[%s] Request error on attempt %d: %s",
                    self.source_name,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
            time.sleep(self.settings.REQUEST_DELAY * (attempt + 1))

        self.logger.error(
            "[%s] Giving up after %d attempts",
            self.source_name,
            self.settings.MAX_RETRIES,
        )
        raise SourceUnavailable(self.source_name, last_error)

    def save(self, payload: str | bytes) -> Path:
        """Store the payload and stamp the fetch time."""
        path = self.file_manager.write_raw(
            self.source_name, self.RAW_FILENAME, payload
        )
        timestamp = datetime.now(timezone.utc).isoformat()
        self.file_manager.write_timestamp(self.source_name, timestamp)
        self.logger.info(
            "[%s] Saved feed (%s) to %s",
            self.source_name,
            timestamp,
            path,
        )
        return path

    def run(self) -> Path:
        """Fetch the feed and store it; returns the stored file path."""
        self.logger.info("[%s] Started fetching data", self.source_name)
        payload = self.fetch()
        return self.save(payload)

    @abstractmethod
    def fetch(self) -> Any:
        """Download the raw feed.

        Raises:
            SourceUnavailable: on missing configuration or network failure.
        """
        ...
