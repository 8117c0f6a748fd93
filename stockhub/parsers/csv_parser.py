# stockhub/parsers/csv_parser.py

"""Parser for the Action warehouse CSV export."""

import csv
import re
import unicodedata

from stockhub.models.errors import (
    MalformedValue,
    RowRejected,
    SourceUnavailable,
)
from stockhub.models.parse_report import ParseReport
from stockhub.models.stock_record import StockRecord
from stockhub.parsers.base_parser import BaseParser
from stockhub.parsers.numeric import derive_vat, parse_price, parse_quantity


def normalise_header(header: str) -> str:
    """Turn ``"Cena brutto PLN"`` into ``"cena_brutto_pln"``.

    Lowercases, replaces whitespace runs with underscores and strips
    diacritics, so ``"Ilość"`` and ``"ilosc"`` map to the same key.
    """
    lowered = re.sub(r"\s+", "_", header.strip().lower())
    decomposed = unicodedata.normalize("NFD", lowered)
    return "".join(
        ch for ch in decomposed if not unicodedata.combining(ch)
    )


def split_line(line: str) -> list[str]:
    """Split one quoted, comma-separated line into trimmed values."""
    row = next(csv.reader([line.strip()]), [])
    return [value.strip() for value in row]


class DelimitedTextParser(BaseParser):
    """Parser for the Action warehouse CSV export.

    The feed is a quoted CSV with a single header row. Every data row
    must have exactly as many fields as the header; rows that do not,
    or whose prices/stock cannot be read, are skipped and reported.
    """

    REQUIRED_FIELDS = BaseParser.REQUIRED_FIELDS + ("price_gross",)

    DEFAULT_FIELD_MAP = {
        "identifier": "ean",
        "name": "nazwa_produktu",
        "price_net": "cena_netto_pln",
        "price_gross": "cena_brutto_pln",
        "quantity": "stan_mag",
    }

    ENCODINGS: tuple[str, ...] = ("utf-8-sig", "cp1250")

    def __init__(
        self,
        source_name: str = "action",
        field_map: dict[str, str] | None = None,
    ) -> None:
        super().__init__(source_name, field_map)

    def _decode(self, raw: str | bytes) -> str:
        """Decode a byte payload, falling back through ENCODINGS."""
        if isinstance(raw, str):
            return raw.lstrip("\ufeff")
        for encoding in self.ENCODINGS:
            try:
                return raw.decode(encoding)
            except UnicodeDecodeError:
                self.logger.warning(
                    "[%s] Payload is not valid %s, trying next encoding",
                    self.source_name,
                    encoding,
                )
        raise SourceUnavailable(
            self.source_name, "payload could not be decoded"
        )

    def _column_index(self, header: list[str]) -> dict[str, int]:
        """Map each canonical field to its column position."""
        positions = {name: i for i, name in enumerate(header)}
        index: dict[str, int] = {}
        missing: list[str] = []
        for canonical, column in self.field_map.items():
            if column in positions:
                index[canonical] = positions[column]
            else:
                missing.append(column)
        if missing:
            raise SourceUnavailable(
                self.source_name,
                f"header lacks column(s): {', '.join(missing)}",
            )
        return index

    @staticmethod
    def _split_row(line: str, line_no: int, expected: int) -> list[str]:
        """Split a data row, rejecting it when the field count is off."""
        values = split_line(line)
        if len(values) != expected:
            raise RowRejected(
                line_no,
                f"Invalid column count: {len(values)}, expected: {expected}",
            )
        return values

    def _to_record(
        self, values: list[str], index: dict[str, int]
    ) -> StockRecord:
        price_net = parse_price(values[index["price_net"]])
        price_gross = parse_price(values[index["price_gross"]])
        return StockRecord(
            identifier=values[index["identifier"]],
            name=values[index["name"]],
            quantity=parse_quantity(values[index["quantity"]]),
            price_net=price_net,
            price_gross=price_gross,
            vat_rate=derive_vat(price_net, price_gross),
            source=self.source_name,
        )

    def parse(self, raw: str | bytes) -> ParseReport:
        """Parse the CSV payload into canonical records."""
        lines = self._decode(raw).split("\n")
        if not lines or not lines[0].strip():
            raise SourceUnavailable(self.source_name, "empty CSV payload")

        header = [normalise_header(h) for h in split_line(lines[0])]
        index = self._column_index(header)
        report = self._new_report()
        loaded = 0

        for line_no, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue
            try:
                values = self._split_row(line, line_no, len(header))
            except RowRejected as exc:
                report.record_row_error(str(exc))
                continue

            loaded += 1
            try:
                report.records.append(self._to_record(values, index))
            except MalformedValue as exc:
                report.record_value_error(f"Row #{line_no}: {exc}")

        self.logger.debug(
            "[%s] Loaded %d well-formed rows from CSV",
            self.source_name,
            loaded,
        )
        return self._finalise(report)
