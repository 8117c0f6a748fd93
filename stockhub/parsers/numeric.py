# stockhub/parsers/numeric.py

"""Locale-tolerant parsing of supplier prices, quantities and VAT rates.

Suppliers disagree on number formatting: Action writes ``"1 234,50"``
with a decimal comma and (sometimes non-breaking) spaces as thousands
separators, Molos writes ``"12.5"`` and VAT as ``"23%"``, Apilo sends
JSON numbers. Everything here returns :class:`~decimal.Decimal` (or
``int`` for quantities) and raises :class:`MalformedValue` on input that
cannot be read as a finite, non-negative number.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from stockhub.models.errors import MalformedValue

_CENT = Decimal("0.01")
_HUNDRED = Decimal("100")
_ZERO = Decimal("0")

# str patterns match Unicode whitespace, so NBSP (U+00A0),
# narrow NBSP (U+202F) and thin space (U+2009) are covered too.
_WHITESPACE_RE = re.compile(r"\s+")


def _strip_spaces(raw: str) -> str:
    return _WHITESPACE_RE.sub("", raw)


def _to_finite_decimal(text: str, raw: object, kind: str) -> Decimal:
    """Parse *text* as a finite, non-negative Decimal."""
    if not text:
        raise MalformedValue(raw, kind)
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise MalformedValue(raw, kind) from None
    if not value.is_finite() or value < 0:
        raise MalformedValue(raw, kind)
    return value


def round_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def parse_price(raw: str | None) -> Decimal:
    """Parse a price string such as ``"12,50"``, ``"1 234.00"`` or ``"9.9"``.

    A comma, when present, is the decimal separator and any dots are
    read as thousands separators. Without a comma the dot is decimal.
    """
    if raw is None:
        raise MalformedValue(raw, "price")
    cleaned = _strip_spaces(str(raw))
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    return _to_finite_decimal(cleaned, raw, "price")


def parse_quantity(raw: str | int | float | None) -> int:
    """Parse a stock level; must be a non-negative integer."""
    if raw is None or isinstance(raw, bool):
        raise MalformedValue(raw, "quantity")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise MalformedValue(raw, "quantity")
        value = int(raw)
    else:
        try:
            value = int(_strip_spaces(str(raw)))
        except ValueError:
            raise MalformedValue(raw, "quantity") from None
    if value < 0:
        raise MalformedValue(raw, "quantity")
    return value


def derive_vat(net: Decimal, gross: Decimal) -> Decimal:
    """Derive the VAT rate implied by a net/gross price pair.

    Zero net price gives a zero rate. Otherwise the rate is
    ``(gross - net) / net`` rounded to 2 decimal places, and must lie
    in [0, 1].
    """
    if net == 0:
        return _ZERO
    rate = round_money((gross - net) / net)
    if rate < 0 or rate > 1:
        raise MalformedValue(f"net={net} gross={gross}", "VAT")
    return rate


def parse_vat_percent(raw: str | None) -> Decimal:
    """Parse ``"23%"`` / ``"23"`` / ``"5,5 %"`` into a fraction (0.23)."""
    if raw is None:
        raise MalformedValue(raw, "VAT")
    cleaned = _strip_spaces(str(raw)).rstrip("%").replace(",", ".")
    percent = _to_finite_decimal(cleaned, raw, "VAT")
    if percent > _HUNDRED:
        raise MalformedValue(raw, "VAT")
    return percent / _HUNDRED


def gross_from_net(net: Decimal, vat: Decimal) -> Decimal:
    """Compute the gross price as ``net * (1 + vat)`` to 2 decimal places."""
    return round_money(net * (1 + vat))


def to_decimal(value: object, kind: str = "price") -> Decimal:
    """Coerce an already-decoded JSON value into a non-negative Decimal."""
    if value is None or isinstance(value, bool):
        raise MalformedValue(value, kind)
    if isinstance(value, Decimal):
        return _to_finite_decimal(str(value), value, kind)
    if isinstance(value, (int, float)):
        return _to_finite_decimal(repr(value), value, kind)
    if isinstance(value, str):
        return parse_price(value)
    raise MalformedValue(value, kind)
