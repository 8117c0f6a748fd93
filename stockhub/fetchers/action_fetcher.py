# stockhub/fetchers/action_fetcher.py

"""Fetcher for the Action warehouse CSV export."""

from stockhub.fetchers.base_fetcher import BaseFetcher
from stockhub.models.errors import SourceUnavailable
from stockhub.storage.file_manager import FileManager


class ActionFetcher(BaseFetcher):
    """Download the Action CSV from ``ACTION_WAREHOUSE_CSV_URL``."""

    RAW_FILENAME = "action-stock.csv"

    def __init__(
        self,
        source_name: str = "action",
        file_manager: FileManager | None = None,
    ) -> None:
        super().__init__(source_name, file_manager)

    def fetch(self) -> bytes:
        url = self.settings.ACTION_WAREHOUSE_CSV_URL
        if not url:
            raise SourceUnavailable(
                self.source_name,
                "ACTION_WAREHOUSE_CSV_URL is not defined in .env file",
            )
        resp = self._fetch_get(url, {"Accept": "text/csv"})
        self.logger.info(
            "[%s] Read CSV content (%d bytes)",
            self.source_name,
            len(resp.content),
        )
        return resp.content
