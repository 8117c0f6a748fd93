# tests/test_logging_config.py

"""Tests for the per-command logging configuration."""

import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from stockhub.config.logging_config import FeedSourceFilter, setup_logging
from stockhub.config.settings import Settings


def _record(name: str, level: int = logging.WARNING) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Detach existing stockhub handlers and log into a temp dir."""
        self.logs_dir = Path(tempfile.mkdtemp())
        patcher = patch.object(Settings, "LOGS_DIR", self.logs_dir)
        patcher.start()
        self.addCleanup(patcher.stop)

        project_logger = logging.getLogger("stockhub")
        self._saved = list(project_logger.handlers)
        project_logger.handlers.clear()

    def tearDown(self) -> None:
        project_logger = logging.getLogger("stockhub")
        for handler in project_logger.handlers:
            handler.close()
        project_logger.handlers[:] = self._saved

    def _flush(self) -> None:
        for handler in logging.getLogger("stockhub").handlers:
            handler.flush()

    def test_log_file_named_after_command(self) -> None:
        log_path = setup_logging("parse")
        self.assertTrue(log_path.exists())
        self.assertRegex(log_path.name, r"^parse_\d{8}_\d{6}\.log$")

    def test_handler_levels(self) -> None:
        """Run file at DEBUG; feed-issue file and console at WARNING."""
        setup_logging()
        handlers = logging.getLogger("stockhub").handlers
        file_levels = sorted(
            h.level for h in handlers if isinstance(h, logging.FileHandler)
        )
        console = [
            h
            for h in handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(file_levels, [logging.DEBUG, logging.WARNING])
        self.assertEqual(console[0].level, logging.WARNING)

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        setup_logging()
        count_before = len(logging.getLogger("stockhub").handlers)
        setup_logging()
        self.assertEqual(
            len(logging.getLogger("stockhub").handlers), count_before
        )

    def test_parse_diagnostics_reach_both_files(self) -> None:
        log_path = setup_logging("parse")
        logging.getLogger("stockhub.action").warning("Row #4: broken")
        logging.getLogger("stockhub.pipeline").warning("pipeline hiccup")
        self._flush()

        self.assertIn("Row #4: broken", log_path.read_text(encoding="utf-8"))
        issues = list(self.logs_dir.glob("feed-issues_*.log"))
        self.assertEqual(len(issues), 1)
        text = issues[0].read_text(encoding="utf-8")
        self.assertIn("action", text)
        self.assertIn("Row #4: broken", text)
        self.assertNotIn("pipeline hiccup", text)

    def test_feed_issue_file_not_created_without_warnings(self) -> None:
        setup_logging("lookup")
        logging.getLogger("stockhub.molos").info("all fine")
        self._flush()
        self.assertEqual(list(self.logs_dir.glob("feed-issues_*.log")), [])


class TestFeedSourceFilter(unittest.TestCase):
    """Source logger matching."""

    def setUp(self) -> None:
        self.feed_filter = FeedSourceFilter(["apilo", "molos"])

    def test_matches_source_loggers(self) -> None:
        record = _record("stockhub.molos")
        self.assertTrue(self.feed_filter.filter(record))
        self.assertEqual(getattr(record, "source"), "molos")

    def test_rejects_other_loggers(self) -> None:
        for name in ("stockhub.pipeline", "stockhub.apilotest", "other"):
            with self.subTest(name=name):
                self.assertFalse(self.feed_filter.filter(_record(name)))


if __name__ == "__main__":
    unittest.main()
