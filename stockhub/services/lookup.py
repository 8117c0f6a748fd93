# stockhub/services/lookup.py

"""Read-only lookup over the aggregated stock collection."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from stockhub.models.aggregated_product import AggregatedProduct
from stockhub.storage.file_manager import FileManager

logger = logging.getLogger("stockhub.lookup")


@dataclass
class BatchLookupResult:
    """Products matching a batch of identifiers, plus their count."""

    products: list[AggregatedProduct] = field(
        default_factory=lambda: list[AggregatedProduct]()
    )
    total: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "products": [p.to_dict() for p in self.products],
            "total": self.total,
        }


class StockLookup:
    """Answer "where is this EAN available" from aggregated data."""

    def __init__(self, products: list[AggregatedProduct]) -> None:
        self.products = products
        self._index: dict[str, AggregatedProduct] = {}
        for product in products:
            self._index.setdefault(product.identifier, product)

    @classmethod
    def from_file(cls, path: Path | None = None) -> "StockLookup":
        """Load the persisted aggregated collection."""
        products = FileManager().load_aggregated(path)
        return cls(products)

    def __len__(self) -> int:
        return len(self.products)

    def find_by_identifier(self, identifier: str) -> AggregatedProduct:
        """Return the product for *identifier*.

        An unknown identifier is a normal outcome and yields an empty
        ``available_on`` list rather than an error.
        """
        product = self._index.get(identifier)
        if product is None:
            logger.info("Product with EAN %s not found", identifier)
            return AggregatedProduct(identifier=identifier)
        logger.info(
            "Found product with EAN %s in %d warehouses",
            identifier,
            len(product.available_on),
        )
        return product

    def find_many(self, identifiers: Iterable[str]) -> BatchLookupResult:
        """Return the products whose identifier is in *identifiers*.

        Unknown identifiers are left out (no empty placeholders).
        Matches keep the order of the aggregated collection.
        """
        wanted = set(identifiers)
        matches = [p for p in self.products if p.identifier in wanted]
        logger.info(
            "Found %d products matching %d EAN numbers",
            len(matches),
            len(wanted),
        )
        return BatchLookupResult(products=matches, total=len(matches))
