# stockhub/config/settings.py

"""Central configuration for the stockhub pipeline."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the stockhub pipeline."""

    # --- Fetching ---
    REQUEST_DELAY: float = 2.0          # Base backoff between retries (secs)
    REQUEST_TIMEOUT: int = 30           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures
    APILO_BATCH_LIMIT: int = 2000       # Page size for the Apilo API

    # --- Feed endpoints (.env) ---
    ACTION_WAREHOUSE_CSV_URL: str = os.getenv(
        "ACTION_WAREHOUSE_CSV_URL", ""
    )
    MOLOS_WAREHOUSE_XML_URL: str = os.getenv(
        "MOLOS_WAREHOUSE_XML_URL", ""
    )
    APILO_API_URL: str = os.getenv("APILO_API_URL", "")
    APILO_ACCESS_TOKEN: str = os.getenv("APILO_ACCESS_TOKEN", "")

    # --- Parsing ---
    ERROR_SAMPLE_SIZE: int = 10         # Diagnostic messages kept per source

    # --- Lookup API ---
    API_HOST: str = os.getenv("HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("PORT", "3000"))

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    LOGS_DIR: Path = BASE_DIR / "logs"
    AGGREGATED_FILENAME: str = "all-stocks.json"
    TIMESTAMP_FILENAME: str = "last-update.txt"

    # --- Sources ---
    # Aggregation order; decides availableOn ordering.
    SOURCE_ORDER: list[str] = ["apilo", "action", "molos"]

    AVAILABLE_SOURCES: list[dict[str, str]] = [
        {
            "id": "apilo",
            "label": "Apilo",
            "parser": "stockhub.parsers.json_parser.PaginatedJsonParser",
            "fetcher": "stockhub.fetchers.apilo_fetcher.ApiloFetcher",
            "raw_file": "apilo-stock.json",
        },
        {
            "id": "action",
            "label": "Action",
            "parser": "stockhub.parsers.csv_parser.DelimitedTextParser",
            "fetcher": "stockhub.fetchers.action_fetcher.ActionFetcher",
            "raw_file": "action-stock.csv",
        },
        {
            "id": "molos",
            "label": "Molos",
            "parser": "stockhub.parsers.xml_parser.MarkupParser",
            "fetcher": "stockhub.fetchers.molos_fetcher.MolosFetcher",
            "raw_file": "molos-stock.xml",
        },
    ]
