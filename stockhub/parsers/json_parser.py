# stockhub/parsers/json_parser.py

"""Parser for the Apilo warehouse API (paginated JSON)."""

import json
from collections.abc import Iterable, Iterator
from decimal import Decimal
from typing import Any

from stockhub.models.errors import MalformedValue, SourceUnavailable
from stockhub.models.parse_report import ParseReport
from stockhub.models.stock_record import StockRecord
from stockhub.parsers.base_parser import BaseParser
from stockhub.parsers.numeric import (
    derive_vat,
    parse_quantity,
    parse_vat_percent,
    to_decimal,
)


class PaginatedJsonParser(BaseParser):
    """Parser for the Apilo warehouse API (paginated JSON).

    Consumes the already-fetched pages. Each page is either the raw
    API response (``{"products": [...], "totalCount": n}``) or a bare
    list of products; a single flat list of products is accepted too.
    Items are renamed field by field with type coercion only.
    """

    REQUIRED_FIELDS = BaseParser.REQUIRED_FIELDS + ("price_gross", "vat")

    DEFAULT_FIELD_MAP = {
        "identifier": "ean",
        "name": "name",
        "quantity": "quantity",
        "price_net": "priceWithoutTax",
        "price_gross": "priceWithTax",
        "vat": "tax",
    }

    BATCH_KEY = "products"

    def __init__(
        self,
        source_name: str = "apilo",
        field_map: dict[str, str] | None = None,
    ) -> None:
        super().__init__(source_name, field_map)

    def _is_batch(self, entry: Any) -> bool:
        return isinstance(entry, list) or (
            isinstance(entry, dict) and self.BATCH_KEY in entry
        )

    def _iter_batches(self, payload: Any) -> Iterator[list[Any]]:
        """Yield item lists from whichever page layout was stored."""
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise SourceUnavailable(
                    self.source_name, f"invalid JSON: {exc}"
                ) from exc

        if isinstance(payload, dict):
            payload = [payload]
        if not isinstance(payload, Iterable):
            raise SourceUnavailable(
                self.source_name,
                f"unexpected payload type {type(payload).__name__}",
            )

        pages = list(payload)
        if pages and not all(self._is_batch(p) for p in pages):
            # A flat list of products is a single page
            pages = [pages]

        for page in pages:
            if isinstance(page, dict):
                items = page.get(self.BATCH_KEY) or []
            else:
                items = page
            if not isinstance(items, list):
                raise SourceUnavailable(
                    self.source_name,
                    f"'{self.BATCH_KEY}' is not a list",
                )
            yield items

    def _vat(
        self,
        item: dict[str, Any],
        price_net: Decimal,
        price_gross: Decimal,
        report: ParseReport,
        ean: str,
    ) -> Decimal:
        """Derive VAT from the prices; fall back to the stated tax string.

        The stated tax is used when net is zero or the prices imply a
        rate outside [0, 1]; an unreadable stated tax becomes 0.
        """
        stated = item.get(self.field_map["vat"])
        if price_net > 0:
            try:
                derived = derive_vat(price_net, price_gross)
            except MalformedValue as exc:
                report.record_vat_fallback(
                    f"EAN {ean or '?'}: {exc}, using stated tax {stated!r}"
                )
            else:
                self.logger.debug(
                    "[%s] EAN %s: VAT derived %s (stated %s)",
                    self.source_name,
                    ean,
                    derived,
                    stated,
                )
                return derived
        try:
            return parse_vat_percent(stated)
        except MalformedValue as exc:
            report.record_vat_default(f"EAN {ean or '?'}: {exc}, using 0")
            return Decimal("0")

    def _to_record(
        self, item: dict[str, Any], report: ParseReport
    ) -> StockRecord:
        ean = str(item.get(self.field_map["identifier"]) or "").strip()
        price_net = to_decimal(item.get(self.field_map["price_net"]))
        price_gross = to_decimal(item.get(self.field_map["price_gross"]))
        return StockRecord(
            identifier=ean,
            name=str(item.get(self.field_map["name"]) or ""),
            quantity=parse_quantity(item.get(self.field_map["quantity"])),
            price_net=price_net,
            price_gross=price_gross,
            vat_rate=self._vat(item, price_net, price_gross, report, ean),
            source=self.source_name,
        )

    def parse(self, raw: Any) -> ParseReport:
        """Parse fetched pages into canonical records."""
        report = self._new_report()
        loaded = 0

        for page_no, items in enumerate(self._iter_batches(raw), start=1):
            for position, item in enumerate(items, start=1):
                loaded += 1
                if not isinstance(item, dict):
                    report.record_value_error(
                        f"Batch {page_no} item {position}: not an object"
                    )
                    continue
                try:
                    report.records.append(self._to_record(item, report))
                except MalformedValue as exc:
                    report.record_value_error(
                        f"Batch {page_no} item {position}: {exc}"
                    )

        self.logger.debug(
            "[%s] Loaded %d products from JSON", self.source_name, loaded
        )
        return self._finalise(report)
