# stockhub/models/aggregated_product.py

"""Aggregated, per-identifier view over all sources."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


def _num(value: Decimal) -> int | float:
    """Render a Decimal as a plain JSON number."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


@dataclass
class Availability:
    """A single source's offer for a product (identifier lives on the parent)."""

    name: str
    quantity: int
    price_net: Decimal
    price_gross: Decimal
    vat_rate: Decimal
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "priceNet": _num(self.price_net),
            "priceGross": _num(self.price_gross),
            "vat": _num(self.vat_rate),
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Availability":
        return cls(
            name=str(data.get("name", "")),
            quantity=int(data.get("quantity", 0)),
            price_net=Decimal(str(data.get("priceNet", 0))),
            price_gross=Decimal(str(data.get("priceGross", 0))),
            vat_rate=Decimal(str(data.get("vat", 0))),
            source=str(data.get("source", "")),
        )


@dataclass
class AggregatedProduct:
    """All known availability for one identifier, in source order."""

    identifier: str
    available_on: list[Availability] = field(
        default_factory=lambda: list[Availability]()
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the ``{identifier, availableOn}`` JSON shape."""
        return {
            "identifier": self.identifier,
            "availableOn": [a.to_dict() for a in self.available_on],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AggregatedProduct":
        """Rebuild a product from its persisted JSON shape."""
        return cls(
            identifier=str(data["identifier"]),
            available_on=[
                Availability.from_dict(entry)
                for entry in data.get("availableOn", [])
            ],
        )
