# tests/test_base_parser.py

"""Tests for BaseParser field-map validation and failure handling."""

import unittest
from decimal import Decimal
from typing import Any

from stockhub.models.errors import ParserConfigError, SourceUnavailable
from stockhub.models.parse_report import ParseReport
from stockhub.models.stock_record import StockRecord
from stockhub.parsers.base_parser import BaseParser
from stockhub.parsers.csv_parser import DelimitedTextParser


class _StubParser(BaseParser):
    """Concrete parser that emits whatever records it is given."""

    DEFAULT_FIELD_MAP = {
        "identifier": "id",
        "name": "name",
        "quantity": "qty",
        "price_net": "net",
    }

    def parse(self, raw: Any) -> ParseReport:
        if raw is None:
            raise SourceUnavailable(self.source_name, "nothing there")
        report = self._new_report()
        report.records.extend(raw)
        return self._finalise(report)


def _make(identifier: str) -> StockRecord:
    return StockRecord(
        identifier=identifier,
        name=f"Item {identifier or 'blank'}",
        quantity=1,
        price_net=Decimal("1.00"),
        price_gross=Decimal("1.23"),
        vat_rate=Decimal("0.23"),
        source="stub",
    )


class TestFieldMapValidation(unittest.TestCase):
    """Missing canonical fields are rejected at construction."""

    def test_complete_map_accepted(self) -> None:
        parser = _StubParser("stub")
        self.assertEqual(parser.field_map["quantity"], "qty")

    def test_override_merges_with_defaults(self) -> None:
        parser = _StubParser("stub", {"quantity": "stock"})
        self.assertEqual(parser.field_map["quantity"], "stock")
        self.assertEqual(parser.field_map["identifier"], "id")

    def test_blank_mapping_rejected(self) -> None:
        with self.assertRaises(ParserConfigError) as ctx:
            _StubParser("stub", {"price_net": ""})
        self.assertIn("price_net", str(ctx.exception))

    def test_subclass_required_fields_enforced(self) -> None:
        with self.assertRaises(ParserConfigError):
            DelimitedTextParser("action", {"price_gross": ""})

    def test_logger_named_after_source(self) -> None:
        self.assertEqual(_StubParser("stub").logger.name, "stockhub.stub")


class TestRunAndFinalise(unittest.TestCase):
    """Whole-source failures and identifier filtering."""

    def test_source_unavailable_becomes_empty_report(self) -> None:
        report = _StubParser("stub").run(None)
        self.assertTrue(report.failed)
        self.assertEqual(report.source_error, "nothing there")
        self.assertEqual(report.records, [])

    def test_records_without_identifier_dropped(self) -> None:
        report = _StubParser("stub").run([_make("1"), _make(""), _make("2")])
        self.assertEqual([r.identifier for r in report.records], ["1", "2"])
        self.assertEqual(report.missing_identifier, 1)
        self.assertIn(
            "[stub] Record without identifier ('Item blank')",
            report.messages,
        )

    def test_problems_logged_as_warning(self) -> None:
        with self.assertLogs("stockhub.stub", level="WARNING") as logs:
            _StubParser("stub").run([_make("")])
        self.assertTrue(
            any("Found problems" in line for line in logs.output)
        )


if __name__ == "__main__":
    unittest.main()
