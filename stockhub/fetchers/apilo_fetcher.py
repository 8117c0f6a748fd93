# stockhub/fetchers/apilo_fetcher.py

"""Fetcher for the Apilo warehouse REST API."""

import json
from typing import Any

from stockhub.fetchers.base_fetcher import BaseFetcher
from stockhub.models.errors import SourceUnavailable
from stockhub.storage.file_manager import FileManager


class ApiloFetcher(BaseFetcher):
    """Page through the Apilo product API and store every page.

    The first page's ``totalCount`` sets how many products to expect;
    paging stops once that many were collected or a page comes back
    empty. Pages are stored as returned, as a JSON list.
    """

    RAW_FILENAME = "apilo-stock.json"

    PRODUCTS_PATH = "/rest/api/warehouse/product/"

    def __init__(
        self,
        source_name: str = "apilo",
        file_manager: FileManager | None = None,
    ) -> None:
        super().__init__(source_name, file_manager)

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.APILO_ACCESS_TOKEN}",
        }

    def _fetch_batch(self, offset: int) -> dict[str, Any]:
        url = (
            f"{self.settings.APILO_API_URL.rstrip('/')}"
            f"{self.PRODUCTS_PATH}"
            f"?limit={self.settings.APILO_BATCH_LIMIT}&offset={offset}"
        )
        resp = self._fetch_get(url, self._headers())
        try:
            data: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise SourceUnavailable(
                self.source_name, f"invalid JSON at offset {offset}"
            ) from exc
        if not isinstance(data, dict):
            raise SourceUnavailable(
                self.source_name, f"unexpected page at offset {offset}"
            )
        return data

    def fetch_pages(self) -> list[dict[str, Any]]:
        """Retrieve every page of the product listing."""
        if not (
            self.settings.APILO_API_URL
            and self.settings.APILO_ACCESS_TOKEN
        ):
            raise SourceUnavailable(
                self.source_name,
                "Apilo configuration is not defined in .env file",
            )

        pages: list[dict[str, Any]] = []
        offset = 0
        total = 0
        collected = 0

        while True:
            self.logger.info(
                "[%s] Fetching batch %d (offset: %d)",
                self.source_name,
                len(pages) + 1,
                offset,
            )
            page = self._fetch_batch(offset)
            products = page.get("products") or []
            if not pages:
                total = int(page.get("totalCount") or 0)
                self.logger.info(
                    "[%s] Total product count: %d",
                    self.source_name,
                    total,
                )
            pages.append(page)
            collected += len(products)
            offset += len(products)
            self.logger.info(
                "[%s] Retrieved %d products (total: %d/%d)",
                self.source_name,
                len(products),
                collected,
                total,
            )
            if not products or collected >= total:
                break

        return pages

    def fetch(self) -> bytes:
        pages = self.fetch_pages()
        return json.dumps(pages, ensure_ascii=False).encode("utf-8")
