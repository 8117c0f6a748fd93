# stockhub/config/logging_config.py

"""Logging for stockhub commands.

Every command invocation writes two files under ``Settings.LOGS_DIR``:

* ``<command>_YYYYMMDD_HHMMSS.log`` gets every ``stockhub.*`` record at
  DEBUG, so a fetch or parse run can be replayed step by step.
* ``feed-issues_YYYYMMDD_HHMMSS.log`` gets only WARNING+ records from the
  per-source loggers (``stockhub.apilo``, ``stockhub.action``, ...). These
  are the rejected rows, defaulted VAT values and missing EANs a supplier
  has to be told about.

WARNING+ also goes to stderr, leaving stdout for JSON output.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from stockhub.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(lineno)d | %(message)s"
)
_FEED_FORMAT = "%(asctime)s | %(source)-8s | %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PROJECT_LOGGER = "stockhub"


class FeedSourceFilter(logging.Filter):
    """Pass only records emitted by a registered feed source's logger.

    Tags each passing record with a ``source`` attribute for formatting.
    """

    def __init__(self, source_ids: list[str]) -> None:
        super().__init__()
        self.prefixes = {
            f"{PROJECT_LOGGER}.{source_id}": source_id
            for source_id in source_ids
        }

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, source_id in self.prefixes.items():
            if record.name == prefix or record.name.startswith(prefix + "."):
                record.source = source_id
                return True
        return False


def setup_logging(command: str = "run") -> Path:
    """Attach the run, feed-issue and console handlers once per process.

    Returns:
        Path of the DEBUG log file for this command.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"{command}_{stamp}.log"

    project_logger = logging.getLogger(PROJECT_LOGGER)
    project_logger.setLevel(logging.DEBUG)
    if project_logger.handlers:
        return log_file

    run_handler = logging.FileHandler(log_file, encoding="utf-8")
    run_handler.setLevel(logging.DEBUG)
    run_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    feed_handler = logging.FileHandler(
        logs_dir / f"feed-issues_{stamp}.log", encoding="utf-8", delay=True
    )
    feed_handler.setLevel(logging.WARNING)
    feed_handler.addFilter(
        FeedSourceFilter([s["id"] for s in Settings.AVAILABLE_SOURCES])
    )
    feed_handler.setFormatter(
        logging.Formatter(_FEED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    for handler in (run_handler, feed_handler, console_handler):
        project_logger.addHandler(handler)

    project_logger.info("stockhub %s logging to %s", command, log_file)
    return log_file
