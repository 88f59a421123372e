"""Rule-based anomaly detection over a list of categorized transactions.

The scanner is a pure function: it reads a transaction list, never mutates
it, and returns a :class:`~spend_anomalies.models.ScanResult`. Rules are
evaluated per transaction in a fixed priority order:

1. Duplicate charge (same merchant and amount within a day). Flags the
   *later* transaction and does not stop evaluation of the current one.
2. Three or more charges to one merchant on the same day.
3. Two high-value charges at different merchants within a day.
4. Category-specific large-purchase limits (lookup table).
5. Statistical outlier against the category's peer average.

Purchases with a matching refund from the same merchant are never flagged.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from statistics import fmean

from .errors import friendly_error_message
from .logging_setup import get_logger
from .models import Anomaly, LargePurchaseRule, ScanResult, Transaction, Transactions

logger = get_logger("spend_anomalies.anomalies")

# Absolute tolerance for monetary equality.
AMOUNT_TOLERANCE = 0.01
# Maximum whole-day distance for duplicate and back-to-back comparisons.
MAX_DAY_GAP = 1
HIGH_VALUE_AMOUNT = 100.0
MULTI_CHARGE_MIN_COUNT = 3
# Outlier test needs strictly more peers than this.
OUTLIER_MIN_PEERS = 5
OUTLIER_FACTOR = 3.0

DEFAULT_LARGE_PURCHASE_RULES: tuple[LargePurchaseRule, ...] = (
    LargePurchaseRule("Shopping", 200.0, "Large 'Shopping' expense."),
    LargePurchaseRule("Dining", 150.0, "Unusually high amount for 'Dining'."),
    LargePurchaseRule("Groceries", 250.0, "Unusually high amount for 'Groceries'."),
    LargePurchaseRule("Travel & Transport", 300.0, "Large 'Travel & Transport' expense."),
)

_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y")


def parse_day(value: str | None) -> date | None:
    """Parse a transaction date string to a calendar date.

    Accepts ``YYYY-MM-DD`` (optionally followed by a time component separated
    by ``T`` or whitespace), ``MM/DD/YYYY`` and ``MM/DD/YY``. Returns ``None``
    for a missing or blank value and raises ``ValueError`` for anything else
    that cannot be read as a date.
    """

    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    first = s.split()[0].split("T", 1)[0]
    try:
        return date.fromisoformat(first)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(first, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid transaction date: {value!r}")


def detect_anomalies(
    transactions: Transactions,
    *,
    large_purchase_rules: Sequence[LargePurchaseRule] = DEFAULT_LARGE_PURCHASE_RULES,
) -> ScanResult:
    """Scan ``transactions`` and return flagged anomalies or an error.

    Behavior:
    - Empty input yields an empty anomaly tuple, not an error.
    - Rows missing ``id``, ``date`` or ``category`` are skipped silently.
    - Only positive amounts are ever flagged; each transaction id appears at
      most once in the result (first reason found wins).
    - Any unexpected failure (e.g. an unparseable date) is logged and
      returned as ``ScanResult(error=...)``; nothing is raised and no partial
      result is returned.
    """

    try:
        found = _scan(list(transactions), large_purchase_rules)
    except Exception as e:  # noqa: BLE001 - reported as the error variant
        logger.exception("Error detecting anomalies")
        return ScanResult(error=friendly_error_message(e))
    return ScanResult(anomalies=tuple(found))


def _scan(
    transactions: list[Transaction],
    large_purchase_rules: Sequence[LargePurchaseRule],
) -> list[Anomaly]:
    if not transactions:
        return []

    # Stable sort by calendar day; undated rows go last and are never scanned.
    days = [parse_day(t.date) for t in transactions]
    order = sorted(
        range(len(transactions)),
        key=lambda k: (days[k] is None, days[k] or date.min),
    )
    rows: list[tuple[Transaction, date | None]] = [(transactions[k], days[k]) for k in order]
    n = len(rows)

    peer_groups: dict[str | None, list[tuple[int, float]]] = defaultdict(list)
    daily_counts: Counter[tuple[date | None, str | None]] = Counter()
    by_merchant: dict[str | None, list[tuple[int, float]]] = defaultdict(list)
    for pos, (txn, day) in enumerate(rows):
        if txn.amount > 0:
            peer_groups[txn.category].append((pos, txn.amount))
        daily_counts[(day, txn.merchant)] += 1
        by_merchant[txn.merchant].append((pos, txn.amount))

    refunded: set[int] = {
        pos
        for pos, (txn, _day) in enumerate(rows)
        if txn.amount > 0 and _has_matching_refund(pos, txn, by_merchant[txn.merchant])
    }

    found: list[Anomaly] = []
    flagged: set[str] = set()

    def flag(txn_id: str, reason: str) -> None:
        found.append(Anomaly(transaction_id=txn_id, reason=reason))
        flagged.add(txn_id)

    for i, (txn, day) in enumerate(rows):
        if not txn.id or day is None or not txn.category:
            continue
        if txn.id in flagged:
            continue
        amount = txn.amount
        if amount <= 0 or i in refunded:
            continue

        # Rule 1: duplicates among the following day's worth of rows
        for j in range(i + 1, n):
            other, other_day = rows[j]
            if other_day is None or (other_day - day).days > MAX_DAY_GAP:
                break
            if (
                other.merchant == txn.merchant
                and abs(other.amount - amount) < AMOUNT_TOLERANCE
                and other.id
                and other.id not in flagged
                and other.amount > 0
                and j not in refunded
            ):
                flag(other.id, f"Potential duplicate transaction at {txn.merchant}.")

        # Rule 2: many charges to one merchant on one day
        charges_today = daily_counts[(day, txn.merchant)]
        if charges_today >= MULTI_CHARGE_MIN_COUNT:
            flag(
                txn.id,
                f"Multiple charges ({charges_today}) to {txn.merchant} on the same day.",
            )
            continue

        # Rule 3: back-to-back high-value charges
        if amount > HIGH_VALUE_AMOUNT:
            for j in range(i + 1, n):
                nxt, nxt_day = rows[j]
                if nxt_day is None or (nxt_day - day).days > MAX_DAY_GAP:
                    break
                if (
                    nxt.amount <= HIGH_VALUE_AMOUNT
                    or nxt.id in flagged
                    or nxt.merchant == txn.merchant
                ):
                    continue
                flag(txn.id, "Multiple high-value transactions within 24 hours.")
                break
            if txn.id in flagged:
                continue

        # Rule 4: fixed per-category limits
        reason = _large_purchase_reason(txn.category, amount, large_purchase_rules)
        if reason is not None:
            flag(txn.id, reason)
            continue

        # Rule 5: outlier against the category peer average
        peers = [a for pos, a in peer_groups[txn.category] if pos != i]
        if len(peers) > OUTLIER_MIN_PEERS:
            avg = fmean(peers)
            if avg > 0 and amount > OUTLIER_FACTOR * avg:
                flag(txn.id, f"Significantly higher than other '{txn.category}' expenses.")

    anomalies = _dedupe_by_transaction(found)
    logger.debug("Scanned %d transactions, flagged %d", n, len(anomalies))
    return anomalies


def _has_matching_refund(
    pos: int, txn: Transaction, same_merchant: list[tuple[int, float]]
) -> bool:
    return any(
        other_pos != pos and abs(other_amount + txn.amount) < AMOUNT_TOLERANCE
        for other_pos, other_amount in same_merchant
    )


def _large_purchase_reason(
    category: str, amount: float, rules: Sequence[LargePurchaseRule]
) -> str | None:
    for rule in rules:
        if rule.category == category and amount > rule.limit:
            return rule.reason
    return None


def _dedupe_by_transaction(anomalies: Iterable[Anomaly]) -> list[Anomaly]:
    seen: set[str] = set()
    out: list[Anomaly] = []
    for anomaly in anomalies:
        if anomaly.transaction_id in seen:
            continue
        seen.add(anomaly.transaction_id)
        out.append(anomaly)
    return out


__all__ = [
    "AMOUNT_TOLERANCE",
    "DEFAULT_LARGE_PURCHASE_RULES",
    "detect_anomalies",
    "parse_day",
]
