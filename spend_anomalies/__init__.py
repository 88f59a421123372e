"""Public interface for the ``spend_anomalies`` package.

This module exposes the package's API functions and public models/types as
the stable import surface. There is no runtime logic here, only re-exports.
"""

from .anomalies import DEFAULT_LARGE_PURCHASE_RULES, detect_anomalies
from .api import join_anomalies, scan_transactions
from .models import (
    Anomaly,
    FlaggedTransaction,
    LargePurchaseRule,
    ScanResult,
    Transaction,
    Transactions,
)
from .selection import drop_excluded_categories, filter_transactions

__all__ = [
    # API
    "detect_anomalies",
    "scan_transactions",
    "join_anomalies",
    "filter_transactions",
    "drop_excluded_categories",
    "DEFAULT_LARGE_PURCHASE_RULES",
    # Models / types
    "Transaction",
    "Anomaly",
    "ScanResult",
    "FlaggedTransaction",
    "LargePurchaseRule",
    "Transactions",
]
