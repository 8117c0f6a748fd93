# stockhub/parsers/base_parser.py

"""Abstract base class for all supplier feed parsers."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from stockhub.config.settings import Settings
from stockhub.models.errors import (
    MissingIdentifier,
    ParserConfigError,
    SourceUnavailable,
)
from stockhub.models.parse_report import ParseReport


class BaseParser(ABC):
    """Abstract base class for all supplier feed parsers.

    A parser turns one supplier's raw payload into a
    :class:`ParseReport`. Row-level problems never raise out of
    :meth:`run`; they are counted on the report and the offending
    record is left out.
    """

    # Canonical fields every concrete parser must map to a source key
    REQUIRED_FIELDS: tuple[str, ...] = (
        "identifier",
        "name",
        "quantity",
        "price_net",
    )

    DEFAULT_FIELD_MAP: dict[str, str] = {}

    def __init__(
        self,
        source_name: str,
        field_map: dict[str, str] | None = None,
    ) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(
            f"stockhub.{source_name}"
        )
        self.settings = Settings()
        self.field_map: dict[str, str] = {
            **self.DEFAULT_FIELD_MAP,
            **(field_map or {}),
        }
        self._validate_field_map()

    def _validate_field_map(self) -> None:
        """Fail fast when a canonical field has no source key."""
        missing = [
            name
            for name in self.REQUIRED_FIELDS
            if not self.field_map.get(name)
        ]
        if missing:
            msg = (
                f"[{self.source_name}] field map is missing: "
                f"{', '.join(missing)}"
            )
            raise ParserConfigError(msg)

    def _new_report(self) -> ParseReport:
        return ParseReport(
            source=self.source_name,
            sample_size=self.settings.ERROR_SAMPLE_SIZE,
        )

    def _finalise(self, report: ParseReport) -> ParseReport:
        """Drop records without an identifier and log the batch summary."""
        kept = []
        for record in report.records:
            if not record.identifier:
                report.record_missing(
                    str(MissingIdentifier(self.source_name, repr(record.name)))
                )
                continue
            kept.append(record)
        report.records = kept

        self.logger.info(
            "[%s] Converted %s", self.source_name, report.summary()
        )
        if (
            report.total_rejected
            or report.vat_defaulted
            or report.vat_from_stated
            or report.defaulted_fields
        ):
            self.logger.warning(
                "[%s] Found problems in the feed: %s",
                self.source_name,
                report.summary(),
            )
            for message in report.messages:
                self.logger.warning(
                    "[%s]   - %s", self.source_name, message
                )
        return report

    def run(self, raw: Any) -> ParseReport:
        """Parse *raw*, turning a whole-source failure into an empty report."""
        try:
            return self.parse(raw)
        except SourceUnavailable as exc:
            self.logger.error(
                "[%s] Feed could not be parsed: %s",
                self.source_name,
                exc.reason,
            )
            report = self._new_report()
            report.source_error = exc.reason
            return report

    @abstractmethod
    def parse(self, raw: Any) -> ParseReport:
        """Parse a raw payload into canonical records.

        Raises:
            SourceUnavailable: if the payload as a whole is unusable.
        """
        ...
