# stockhub/fetchers/molos_fetcher.py

"""Fetcher for the Molos warehouse XML feed."""

from stockhub.fetchers.base_fetcher import BaseFetcher
from stockhub.models.errors import SourceUnavailable
from stockhub.storage.file_manager import FileManager


class MolosFetcher(BaseFetcher):
    """Download the Molos XML from ``MOLOS_WAREHOUSE_XML_URL``."""

    RAW_FILENAME = "molos-stock.xml"

    def __init__(
        self,
        source_name: str = "molos",
        file_manager: FileManager | None = None,
    ) -> None:
        super().__init__(source_name, file_manager)

    def fetch(self) -> bytes:
        url = self.settings.MOLOS_WAREHOUSE_XML_URL
        if not url:
            raise SourceUnavailable(
                self.source_name,
                "MOLOS_WAREHOUSE_XML_URL is not defined in .env file",
            )
        resp = self._fetch_get(url, {"Accept": "application/xml"})
        self.logger.info(
            "[%s] Read XML content (%d bytes)",
            self.source_name,
            len(resp.content),
        )
        return resp.content
