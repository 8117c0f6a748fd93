# stockhub/storage/file_manager.py

"""Handles raw feed and processed JSON blobs on disk."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from stockhub.config.settings import Settings
from stockhub.models.aggregated_product import AggregatedProduct
from stockhub.models.stock_record import StockRecord

logger = logging.getLogger("stockhub.storage")


def atomic_write(path: Path, data: bytes) -> None:
    """Write *data* to *path* via a temp file and ``os.replace``.

    Readers never observe a half-written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileManager:
    """Handles raw feed and processed JSON blobs on disk.

    Layout under the data directory::

        warehouses/<source>/<raw file>
        warehouses/<source>/last-update.txt
        processed/<source>-processed.json
        processed/all-stocks.json
    """

    def __init__(self, data_dir: Path | None = None) -> None:
        self.data_dir: Path = data_dir or Settings.DATA_DIR
        self.warehouses_dir: Path = self.data_dir / "warehouses"
        self.processed_dir: Path = self.data_dir / "processed"
        self.processed_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(
            "FileManager initialised, data_dir=%s", self.data_dir
        )

    # ── Raw feeds ────────────────────────────────────────

    def raw_path(self, source: str, filename: str) -> Path:
        return self.warehouses_dir / source / filename

    def read_raw(self, source: str, filename: str) -> bytes:
        """Return the stored raw payload for *source*.

        Raises:
            FileNotFoundError: if the feed was never fetched.
        """
        path = self.raw_path(source, filename)
        data = path.read_bytes()
        logger.debug(
            "Read %d bytes of raw %s feed from %s",
            len(data),
            source,
            path,
        )
        return data

    def write_raw(
        self, source: str, filename: str, data: str | bytes
    ) -> Path:
        """Store a freshly fetched raw payload."""
        path = self.raw_path(source, filename)
        payload = data.encode("utf-8") if isinstance(data, str) else data
        atomic_write(path, payload)
        logger.info(
            "Saved %d bytes of raw %s feed to %s",
            len(payload),
            source,
            path,
        )
        return path

    def write_timestamp(self, source: str, timestamp: str) -> Path:
        path = self.raw_path(source, Settings.TIMESTAMP_FILENAME)
        atomic_write(path, timestamp.encode("utf-8"))
        return path

    def read_timestamp(self, source: str) -> str | None:
        """Return the last fetch time for *source*, if it was ever fetched."""
        path = self.raw_path(source, Settings.TIMESTAMP_FILENAME)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8").strip()

    # ── Processed JSON ───────────────────────────────────

    def write_json(self, path: Path, data: Any) -> Path:
        """Serialise *data* and atomically replace *path*."""
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        atomic_write(path, payload.encode("utf-8"))
        return path

    def read_json(self, path: Path) -> Any:
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def save_records(
        self, source: str, records: list[StockRecord]
    ) -> Path:
        """Save one source's canonical records."""
        path = self.processed_dir / f"{source}-processed.json"
        self.write_json(path, [r.to_dict() for r in records])
        logger.info(
            "Saved %d %s records to %s", len(records), source, path
        )
        return path

    def save_aggregated(
        self,
        products: list[AggregatedProduct],
        path: Path | None = None,
    ) -> Path:
        """Overwrite the aggregated collection in one step."""
        target = path or self.processed_dir / Settings.AGGREGATED_FILENAME
        self.write_json(target, [p.to_dict() for p in products])
        logger.info(
            "Saved %d aggregated products to %s", len(products), target
        )
        return target

    def load_aggregated(
        self, path: Path | None = None
    ) -> list[AggregatedProduct]:
        """Load the aggregated collection; unreadable data yields ``[]``."""
        target = path or self.processed_dir / Settings.AGGREGATED_FILENAME
        if not target.exists():
            logger.warning("No aggregated stock data at %s", target)
            return []
        try:
            data = self.read_json(target)
            return [AggregatedProduct.from_dict(item) for item in data]
        except (
            OSError, ValueError, KeyError, TypeError, ArithmeticError
        ) as exc:
            logger.error(
                "Error loading stocks data from %s: %s",
                target,
                exc,
                exc_info=True,
            )
            return []
