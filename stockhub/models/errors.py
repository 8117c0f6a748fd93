# stockhub/models/errors.py

"""Error taxonomy for the normalisation pipeline.

Field- and row-level errors (``MalformedValue``, ``RowRejected``,
``MissingIdentifier``) are raised inside a parser and recovered there:
the record is dropped and a diagnostic is added to the source's
``ParseReport``. ``SourceUnavailable`` covers a whole feed and makes
that source come back empty. ``ParserConfigError`` is raised while a
parser is being built and is the only one meant to propagate.
"""


class StockPipelineError(Exception):
    """Base class for every stockhub pipeline error."""


class MalformedValue(StockPipelineError):
    """A single price, quantity or VAT field failed to parse."""

    def __init__(self, raw: object, kind: str = "value") -> None:
        self.raw = raw
        self.kind = kind
        super().__init__(f"Invalid {kind}: {raw!r}")


class RowRejected(StockPipelineError):
    """A delimited-text row has an invalid structure."""

    def __init__(self, row_number: int, reason: str) -> None:
        self.row_number = row_number
        self.reason = reason
        super().__init__(f"Row #{row_number}: {reason}")


class MissingIdentifier(StockPipelineError):
    """A record carries no identifier and cannot be joined."""

    def __init__(self, source: str, context: str = "") -> None:
        self.source = source
        self.context = context
        detail = f" ({context})" if context else ""
        super().__init__(f"[{source}] Record without identifier{detail}")


class SourceUnavailable(StockPipelineError):
    """An entire source feed could not be obtained or parsed."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"[{source}] Source unavailable: {reason}")


class ParserConfigError(StockPipelineError):
    """A parser was built with an incomplete field mapping."""
