"""Caller-side selection of the transactions to scan.

The dashboard scans only what the user is looking at: a date range and a
statement source, without payment/investment categories. Credits and refunds
stay in the selection; the scanner never flags them but needs them to match
refunds and to count same-day charges.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from .anomalies import parse_day
from .config import DEFAULT_EXCLUDED_CATEGORIES, get_settings
from .models import Transaction, Transactions


def filter_transactions(
    transactions: Transactions,
    *,
    date_from: date | None = None,
    date_to: date | None = None,
    file_source: str | None = None,
) -> list[Transaction]:
    """Return transactions within ``[date_from, date_to]`` from ``file_source``.

    Either bound may be omitted. ``file_source`` of ``None`` or ``"all"``
    matches every source. Rows without a date are kept unless a bound is set.
    Raises ``ValueError`` for a date that cannot be parsed while a bound is
    active.
    """

    any_source = file_source is None or file_source == "all"
    bounded = date_from is not None or date_to is not None

    out: list[Transaction] = []
    for txn in transactions:
        if not any_source and txn.file_source != file_source:
            continue
        if bounded:
            day = parse_day(txn.date)
            if day is None:
                continue
            if date_from is not None and day < date_from:
                continue
            if date_to is not None and day > date_to:
                continue
        out.append(txn)
    return out


def drop_excluded_categories(
    transactions: Transactions,
    *,
    excluded_categories: Iterable[str] | None = None,
) -> list[Transaction]:
    """Remove transactions in excluded categories, keeping credits.

    ``excluded_categories`` defaults to ``SPEND_ANOMALIES_EXCLUDED_CATEGORIES``
    (comma-separated; empty disables) or :data:`DEFAULT_EXCLUDED_CATEGORIES`.
    """

    excluded = set(
        get_settings().excluded_categories if excluded_categories is None else excluded_categories
    )
    return [t for t in transactions if t.category not in excluded]


__all__ = [
    "DEFAULT_EXCLUDED_CATEGORIES",
    "drop_excluded_categories",
    "filter_transactions",
]
