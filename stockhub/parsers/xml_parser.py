# stockhub/parsers/xml_parser.py

"""Parser for the Molos warehouse XML feed."""

from decimal import Decimal

from bs4 import BeautifulSoup, Tag
from lxml import etree

from stockhub.models.errors import MalformedValue, SourceUnavailable
from stockhub.models.parse_report import ParseReport
from stockhub.models.stock_record import StockRecord
from stockhub.parsers.base_parser import BaseParser
from stockhub.parsers.numeric import (
    gross_from_net,
    parse_price,
    parse_quantity,
    parse_vat_percent,
)


class MarkupParser(BaseParser):
    """Parser for the Molos warehouse XML feed.

    Expected shape::

        <products date="2025-01-31T06:00:00">
          <product>
            <ean>5901234123457</ean>
            <name>Widget</name>
            <price_net>9.00</price_net>
            <vat>20%</vat>
            <store>4</store>
          </product>
        </products>

    Molos publishes no gross price, so it is always computed from the
    net price and VAT. A missing or unreadable numeric tag becomes zero;
    only items without an EAN are dropped.
    """

    REQUIRED_FIELDS = BaseParser.REQUIRED_FIELDS + ("vat",)

    DEFAULT_FIELD_MAP = {
        "identifier": "ean",
        "name": "name",
        "price_net": "price_net",
        "quantity": "store",
        "vat": "vat",
    }

    ROOT_TAG = "products"
    ITEM_TAG = "product"

    def __init__(
        self,
        source_name: str = "molos",
        field_map: dict[str, str] | None = None,
    ) -> None:
        super().__init__(source_name, field_map)

    def _text(self, item: Tag, field: str) -> str:
        """Return the stripped text of a child tag, or '' when absent."""
        child = item.find(self.field_map[field], recursive=False)
        if not isinstance(child, Tag):
            return ""
        return child.get_text(strip=True)

    def _price_or_zero(
        self, raw: str, report: ParseReport, ean: str
    ) -> Decimal:
        if not raw:
            return Decimal("0")
        try:
            return parse_price(raw)
        except MalformedValue as exc:
            report.record_default(f"EAN {ean or '?'}: {exc}, using 0")
            return Decimal("0")

    def _quantity_or_zero(
        self, raw: str, report: ParseReport, ean: str
    ) -> int:
        if not raw:
            return 0
        try:
            return parse_quantity(raw)
        except MalformedValue as exc:
            report.record_default(f"EAN {ean or '?'}: {exc}, using 0")
            return 0

    def _vat_or_zero(
        self, raw: str, report: ParseReport, ean: str
    ) -> Decimal:
        if not raw:
            return Decimal("0")
        try:
            return parse_vat_percent(raw)
        except MalformedValue as exc:
            report.record_vat_default(f"EAN {ean or '?'}: {exc}, using 0")
            return Decimal("0")

    def _check_well_formed(self, raw: str | bytes) -> None:
        """Strict lxml pass; truncated or malformed markup is rejected."""
        if isinstance(raw, str):
            payload = raw.encode("utf-8")
            parser = etree.XMLParser(encoding="utf-8")
        else:
            payload = raw
            parser = etree.XMLParser()
        try:
            etree.fromstring(payload, parser)
        except etree.XMLSyntaxError as exc:
            raise SourceUnavailable(
                self.source_name, f"malformed XML: {exc}"
            ) from exc

    def _to_record(self, item: Tag, report: ParseReport) -> StockRecord:
        ean = self._text(item, "identifier")
        price_net = self._price_or_zero(
            self._text(item, "price_net"), report, ean
        )
        vat = self._vat_or_zero(self._text(item, "vat"), report, ean)
        return StockRecord(
            identifier=ean,
            name=self._text(item, "name"),
            quantity=self._quantity_or_zero(
                self._text(item, "quantity"), report, ean
            ),
            price_net=price_net,
            price_gross=gross_from_net(price_net, vat),
            vat_rate=vat,
            source=self.source_name,
        )

    def parse(self, raw: str | bytes) -> ParseReport:
        """Parse the XML payload into canonical records."""
        if not raw:
            raise SourceUnavailable(self.source_name, "empty XML payload")

        self._check_well_formed(raw)
        soup = BeautifulSoup(raw, "xml")
        root = soup.find(self.ROOT_TAG)
        if not isinstance(root, Tag):
            raise SourceUnavailable(
                self.source_name,
                f"missing <{self.ROOT_TAG}> root element",
            )

        as_of = root.get("date")
        self.logger.info(
            "[%s] XML data last updated at: %s",
            self.source_name,
            as_of or "unknown",
        )

        items = root.find_all(self.ITEM_TAG, recursive=False)
        self.logger.debug(
            "[%s] Found %d product elements", self.source_name, len(items)
        )

        report = self._new_report()
        for item in items:
            report.records.append(self._to_record(item, report))
        return self._finalise(report)
