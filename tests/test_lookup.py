# tests/test_lookup.py

"""Tests for single and batch EAN lookup."""

import tempfile
import unittest
from decimal import Decimal
from pathlib import Path

from stockhub.models.aggregated_product import AggregatedProduct, Availability
from stockhub.services.lookup import StockLookup
from stockhub.storage.file_manager import FileManager


def _entry(source: str) -> Availability:
    return Availability(
        name="Widget",
        quantity=5,
        price_net=Decimal("10.00"),
        price_gross=Decimal("12.30"),
        vat_rate=Decimal("0.23"),
        source=source,
    )


def _products() -> list[AggregatedProduct]:
    return [
        AggregatedProduct("A", [_entry("apilo"), _entry("action")]),
        AggregatedProduct("X", [_entry("molos")]),
        AggregatedProduct("Y", [_entry("action")]),
    ]


class TestFindByIdentifier(unittest.TestCase):
    """Single-EAN lookup."""

    def setUp(self) -> None:
        self.lookup = StockLookup(_products())

    def test_found(self) -> None:
        product = self.lookup.find_by_identifier("A")
        self.assertEqual(len(product.available_on), 2)

    def test_unknown_gives_empty_availability(self) -> None:
        product = self.lookup.find_by_identifier("0000000000000")
        self.assertEqual(
            product.to_dict(),
            {"identifier": "0000000000000", "availableOn": []},
        )

    def test_first_occurrence_wins(self) -> None:
        lookup = StockLookup(
            [
                AggregatedProduct("A", [_entry("apilo")]),
                AggregatedProduct("A", [_entry("molos")]),
            ]
        )
        product = lookup.find_by_identifier("A")
        self.assertEqual(product.available_on[0].source, "apilo")


class TestFindMany(unittest.TestCase):
    """Batch lookup."""

    def setUp(self) -> None:
        self.lookup = StockLookup(_products())

    def test_unknown_identifiers_left_out(self) -> None:
        result = self.lookup.find_many(["A", "B", "C"])
        self.assertEqual(result.total, 1)
        self.assertEqual([p.identifier for p in result.products], ["A"])

    def test_collection_order_kept(self) -> None:
        result = self.lookup.find_many(["Y", "X"])
        self.assertEqual([p.identifier for p in result.products], ["X", "Y"])

    def test_repeated_request_ids_not_duplicated(self) -> None:
        result = self.lookup.find_many(["A", "A"])
        self.assertEqual(result.total, 1)

    def test_empty_request(self) -> None:
        self.assertEqual(
            self.lookup.find_many([]).to_dict(), {"products": [], "total": 0}
        )

    def test_total_matches_products(self) -> None:
        result = self.lookup.find_many(["A", "X", "Y", "Z"])
        self.assertEqual(result.total, len(result.products))


class TestFromFile(unittest.TestCase):
    """Loading the persisted aggregate."""

    def setUp(self) -> None:
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.fm = FileManager(self.tmp_dir)

    def test_round_trip_through_disk(self) -> None:
        path = self.fm.save_aggregated(_products())
        lookup = StockLookup.from_file(path)
        self.assertEqual(len(lookup), 3)
        self.assertEqual(
            lookup.find_by_identifier("A").available_on[1].price_gross,
            Decimal("12.3"),
        )

    def test_missing_file_gives_empty_lookup(self) -> None:
        lookup = StockLookup.from_file(self.tmp_dir / "nope.json")
        self.assertEqual(len(lookup), 0)


if __name__ == "__main__":
    unittest.main()
