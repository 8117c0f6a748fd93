# stockhub/models/parse_report.py

"""Per-source parse outcome: canonical records plus diagnostics."""

from dataclasses import dataclass, field

from stockhub.config.settings import Settings
from stockhub.models.stock_record import StockRecord


@dataclass
class ParseReport:
    """Container for one source's parse result.

    Counters track each rejection class separately; ``messages`` keeps
    only the first ``sample_size`` diagnostics so a badly broken feed
    does not flood the log.
    """

    source: str
    records: list[StockRecord] = field(
        default_factory=lambda: list[StockRecord]()
    )
    malformed_rows: int = 0
    invalid_values: int = 0
    missing_identifier: int = 0
    vat_defaulted: int = 0
    vat_from_stated: int = 0
    defaulted_fields: int = 0
    source_error: str = ""
    messages: list[str] = field(
        default_factory=lambda: list[str]()
    )
    sample_size: int = Settings.ERROR_SAMPLE_SIZE

    def _note(self, message: str) -> None:
        if len(self.messages) < self.sample_size:
            self.messages.append(message)

    def record_row_error(self, message: str) -> None:
        """Count a structurally invalid row (column-count mismatch)."""
        self.malformed_rows += 1
        self._note(message)

    def record_value_error(self, message: str) -> None:
        """Count a row or field whose price/quantity failed to parse."""
        self.invalid_values += 1
        self._note(message)

    def record_missing(self, message: str) -> None:
        """Count a record dropped for lacking an identifier."""
        self.missing_identifier += 1
        self._note(message)

    def record_vat_default(self, message: str) -> None:
        """Count an unparseable VAT value that was treated as zero."""
        self.vat_defaulted += 1
        self._note(message)

    def record_vat_fallback(self, message: str) -> None:
        """Count a VAT rate taken from the stated percent, not the prices."""
        self.vat_from_stated += 1
        self._note(message)

    def record_default(self, message: str) -> None:
        """Count a numeric field that was unreadable and set to zero."""
        self.defaulted_fields += 1
        self._note(message)

    @property
    def failed(self) -> bool:
        return bool(self.source_error)

    @property
    def total_rejected(self) -> int:
        return (
            self.malformed_rows
            + self.invalid_values
            + self.missing_identifier
        )

    def summary(self) -> str:
        """One-line human summary used in logs and the CLI."""
        if self.failed:
            return f"{self.source}: unavailable ({self.source_error})"
        parts: list[str] = []
        if self.malformed_rows:
            parts.append(f"{self.malformed_rows} malformed rows")
        if self.invalid_values:
            parts.append(f"{self.invalid_values} invalid values")
        if self.missing_identifier:
            parts.append(f"{self.missing_identifier} without EAN")
        if self.vat_defaulted:
            parts.append(f"{self.vat_defaulted} VAT defaulted to 0")
        if self.vat_from_stated:
            parts.append(f"{self.vat_from_stated} VAT taken as stated")
        if self.defaulted_fields:
            parts.append(f"{self.defaulted_fields} fields defaulted to 0")
        detail = f" ({', '.join(parts)})" if parts else ""
        return f"{self.source}: {len(self.records)} records{detail}"
