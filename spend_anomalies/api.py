"""Public API orchestration for the ``spend_anomalies`` package.

:func:`scan_transactions` applies the dashboard's selection (date range,
statement source, category exclusions) before running the anomaly scanner,
and :func:`join_anomalies` pairs results with their transactions for display.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from .anomalies import detect_anomalies
from .errors import friendly_error_message
from .logging_setup import get_logger
from .models import Anomaly, FlaggedTransaction, ScanResult, Transaction, Transactions
from .selection import drop_excluded_categories, filter_transactions

logger = get_logger("spend_anomalies.api")


def scan_transactions(
    transactions: Transactions,
    *,
    date_from: date | None = None,
    date_to: date | None = None,
    file_source: str | None = None,
    exclude_categories: bool = True,
) -> ScanResult:
    """Select the transactions in view and scan them for anomalies.

    Credits are always passed to the scanner so refunded purchases are
    recognised and same-day counts include every charge. With
    ``exclude_categories`` set, payment/investment style categories are left
    out first. Selection errors (e.g. an unreadable date while a date bound
    is active) are reported through the error variant, like scan errors.
    """

    all_items = list(transactions)
    try:
        selected = filter_transactions(
            all_items, date_from=date_from, date_to=date_to, file_source=file_source
        )
    except ValueError as e:
        logger.warning("Transaction selection failed: %s", e)
        return ScanResult(error=friendly_error_message(e))
    if exclude_categories:
        selected = drop_excluded_categories(selected)

    logger.info("Scanning %d of %d transactions for anomalies", len(selected), len(all_items))
    result = detect_anomalies(selected)
    if result.ok:
        logger.info("Anomaly scan flagged %d transaction(s)", len(result.anomalies or ()))
    return result


def join_anomalies(
    anomalies: Iterable[Anomaly], transactions: Transactions
) -> list[FlaggedTransaction]:
    """Pair each anomaly with its transaction by id, in anomaly order.

    Anomalies referencing an id absent from ``transactions`` are dropped.
    """

    by_id: dict[str, Transaction] = {}
    for txn in transactions:
        if txn.id and txn.id not in by_id:
            by_id[txn.id] = txn
    return [
        FlaggedTransaction(transaction=by_id[a.transaction_id], anomaly=a)
        for a in anomalies
        if a.transaction_id in by_id
    ]


__all__ = ["join_anomalies", "scan_transactions"]
