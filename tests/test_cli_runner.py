# tests/test_cli_runner.py

"""Tests for the headless CLI commands."""

import asyncio
import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from stockhub.cli import runner
from stockhub.config.settings import Settings
from stockhub.services.feed_refresher import FetchResult
from stockhub.storage.file_manager import FileManager

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class _DataDirMixin:
    """Point Settings.DATA_DIR at a fresh temp directory per test."""

    def setUp(self) -> None:
        self.tmp_dir = Path(tempfile.mkdtemp())
        patcher = patch.object(Settings, "DATA_DIR", self.tmp_dir)
        patcher.start()
        self.addCleanup(patcher.stop)  # type: ignore[attr-defined]
        self.fm = FileManager(self.tmp_dir)


class TestResolveSources(unittest.TestCase):
    """Source ID validation."""

    def test_none_means_all(self) -> None:
        self.assertIsNone(runner.resolve_sources(None))

    def test_valid_ids(self) -> None:
        self.assertEqual(
            runner.resolve_sources("action, molos"), ["action", "molos"]
        )

    def test_unknown_id_exits(self) -> None:
        with self.assertRaises(SystemExit):
            runner.resolve_sources("action,ebay")


class TestRunParse(_DataDirMixin, unittest.IsolatedAsyncioTestCase):
    """parse command output and exit codes."""

    async def test_json_summary(self) -> None:
        self.fm.write_raw(
            "action",
            "action-stock.csv",
            (FIXTURES_DIR / "action_stock.csv").read_bytes(),
        )
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = await runner.run_parse("action", "json", str(self.tmp_dir))

        self.assertEqual(code, 0)
        summary = json.loads(out.getvalue())
        self.assertEqual(summary["products"], 3)
        self.assertEqual(summary["sources"]["action"]["malformedRows"], 1)
        self.assertIsNone(summary["sources"]["action"]["error"])

    async def test_all_sources_failing_exit_code(self) -> None:
        with patch("sys.stdout", new_callable=io.StringIO):
            code = await runner.run_parse(None, "json", str(self.tmp_dir))
        self.assertEqual(code, 1)


class TestRunFetch(_DataDirMixin, unittest.IsolatedAsyncioTestCase):
    """fetch command exit codes."""

    @patch("stockhub.services.feed_refresher.fetch_source")
    async def test_any_failure_exits_nonzero(self, mock_fetch: MagicMock) -> None:
        mock_fetch.side_effect = lambda src, fm: FetchResult(
            src["id"], "failed" if src["id"] == "molos" else "ok", 1.0, ""
        )
        self.assertEqual(await runner.run_fetch(None), 1)

    @patch("stockhub.services.feed_refresher.fetch_source")
    async def test_all_ok(self, mock_fetch: MagicMock) -> None:
        mock_fetch.side_effect = lambda src, fm: FetchResult(
            src["id"], "ok", 1.0, "saved"
        )
        self.assertEqual(await runner.run_fetch("apilo"), 0)


class TestRunLookup(_DataDirMixin, unittest.TestCase):
    """lookup command."""

    def test_no_data(self) -> None:
        self.assertEqual(runner.run_lookup(["123"]), 1)

    def test_single_and_batch(self) -> None:
        self.fm.write_raw(
            "molos",
            "molos-stock.xml",
            (FIXTURES_DIR / "molos_stock.xml").read_bytes(),
        )
        with patch("sys.stdout", new_callable=io.StringIO):
            self.assertEqual(asyncio.run(runner.run_parse("molos")), 0)

        with patch("sys.stdout", new_callable=io.StringIO) as out:
            self.assertEqual(runner.run_lookup(["123"]), 0)
        single = json.loads(out.getvalue())
        self.assertEqual(single["availableOn"][0]["priceGross"], 10.8)

        with patch("sys.stdout", new_callable=io.StringIO) as out:
            self.assertEqual(runner.run_lookup(["123", "nope"]), 0)
        batch = json.loads(out.getvalue())
        self.assertEqual(batch["total"], 1)


if __name__ == "__main__":
    unittest.main()
