# stockhub/services/aggregator.py

"""Cross-source aggregation of stock records by EAN."""

import logging
from collections.abc import Iterable

from stockhub.models.aggregated_product import AggregatedProduct, Availability
from stockhub.models.stock_record import StockRecord

logger = logging.getLogger("stockhub.aggregator")


class StockAggregator:
    """Group canonical records from every source under their identifier."""

    @staticmethod
    def aggregate(
        sequences: Iterable[Iterable[StockRecord]],
    ) -> list[AggregatedProduct]:
        """Merge per-source record sequences into aggregated products.

        Sources are consumed in the order given, records in their
        original order. Products come out in first-seen order and each
        ``available_on`` list keeps the order records arrived in, so the
        same input always yields the same output. Duplicates are kept:
        two records for one EAN from the same source give two entries.
        """
        grouped: dict[str, list[Availability]] = {}
        total = 0
        skipped = 0

        for records in sequences:
            for record in records:
                if not record.identifier:
                    skipped += 1
                    continue
                grouped.setdefault(record.identifier, []).append(
                    record.availability()
                )
                total += 1

        if skipped:
            logger.warning(
                "Aggregation skipped %d records without identifier",
                skipped,
            )
        logger.info(
            "Aggregated %d records into %d products",
            total,
            len(grouped),
        )

        return [
            AggregatedProduct(identifier=ean, available_on=entries)
            for ean, entries in grouped.items()
        ]

    @staticmethod
    def aggregate_by_source(
        records_by_source: dict[str, list[StockRecord]],
        order: list[str],
    ) -> list[AggregatedProduct]:
        """Aggregate a source-keyed mapping in a pinned source order.

        Sources listed in *order* come first, in that order; any other
        sources follow in mapping order.
        """
        ordered = [s for s in order if s in records_by_source]
        ordered += [s for s in records_by_source if s not in order]
        return StockAggregator.aggregate(
            records_by_source[source] for source in ordered
        )
