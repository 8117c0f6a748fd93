# stockhub/models/stock_record.py

"""Canonical per-source stock record."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from stockhub.models.aggregated_product import Availability


@dataclass
class StockRecord:
    """One product's availability at one supplier, in canonical form."""

    identifier: str
    name: str
    quantity: int
    price_net: Decimal
    price_gross: Decimal
    vat_rate: Decimal
    source: str = ""

    def availability(self) -> Availability:
        """Return this record without its identifier."""
        return Availability(
            name=self.name,
            quantity=self.quantity,
            price_net=self.price_net,
            price_gross=self.price_gross,
            vat_rate=self.vat_rate,
            source=self.source,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the processed-feed JSON shape."""
        return {"identifier": self.identifier, **self.availability().to_dict()}
