# tests/test_feed_refresher.py

"""Tests for the concurrent feed refresher."""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from stockhub.models.errors import SourceUnavailable
from stockhub.services.feed_refresher import (
    FeedRefresher,
    FetchResult,
    fetch_source,
)
from stockhub.storage.file_manager import FileManager


def _make_source(source_id: str = "action") -> dict[str, str]:
    return {
        "id": source_id,
        "fetcher": f"stockhub.fetchers.{source_id}_fetcher.Stub",
    }


class TestFetchSource(unittest.TestCase):
    """Per-source fetch never raises."""

    def setUp(self) -> None:
        self.fm = FileManager(Path(tempfile.mkdtemp()))

    @patch("stockhub.services.feed_refresher.load_class")
    def test_ok(self, mock_load: MagicMock) -> None:
        mock_load.return_value.return_value.run.return_value = Path("/x.csv")
        result = fetch_source(_make_source(), self.fm)
        self.assertEqual(result.status, "ok")
        self.assertEqual(result.message, "/x.csv")
        mock_load.return_value.assert_called_once_with("action", self.fm)

    @patch("stockhub.services.feed_refresher.load_class")
    def test_source_unavailable(self, mock_load: MagicMock) -> None:
        mock_load.return_value.return_value.run.side_effect = (
            SourceUnavailable("action", "HTTP 404")
        )
        result = fetch_source(_make_source(), self.fm)
        self.assertEqual(result.status, "failed")
        self.assertEqual(result.message, "HTTP 404")

    @patch("stockhub.services.feed_refresher.load_class")
    def test_unexpected_error(self, mock_load: MagicMock) -> None:
        mock_load.return_value.return_value.run.side_effect = RuntimeError(
            "kaboom"
        )
        result = fetch_source(_make_source(), self.fm)
        self.assertEqual(result.status, "failed")
        self.assertIn("kaboom", result.message)


class TestFeedRefresher(unittest.IsolatedAsyncioTestCase):
    """fetch_all selects and runs sources."""

    @patch("stockhub.services.feed_refresher.fetch_source")
    async def test_selection(self, mock_fetch: MagicMock) -> None:
        mock_fetch.side_effect = lambda src, fm: FetchResult(
            src["id"], "ok", 1.0, "done"
        )
        refresher = FeedRefresher(FileManager(Path(tempfile.mkdtemp())))
        results = await refresher.fetch_all(["molos"])
        self.assertEqual([r.source_id for r in results], ["molos"])

    @patch("stockhub.services.feed_refresher.fetch_source")
    async def test_all_by_default(self, mock_fetch: MagicMock) -> None:
        mock_fetch.side_effect = lambda src, fm: FetchResult(
            src["id"], "failed" if src["id"] == "apilo" else "ok", 1.0, ""
        )
        refresher = FeedRefresher(FileManager(Path(tempfile.mkdtemp())))
        results = await refresher.fetch_all()
        self.assertEqual(
            {r.source_id: r.status for r in results},
            {"apilo": "failed", "action": "ok", "molos": "ok"},
        )


if __name__ == "__main__":
    unittest.main()
