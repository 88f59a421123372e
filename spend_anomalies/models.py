"""Data models and type aliases for ``spend_anomalies``.

Transactions arrive already extracted and categorized by an upstream flow;
this package treats them as immutable input. Field values are kept loose
(optional strings) because malformed rows are skipped by the scanner rather
than rejected at construction time.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Core records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single categorized transaction.

    Attributes
    ----------
    id:
        Unique identifier, stable across the session.
    date:
        Calendar date string (``YYYY-MM-DD`` preferred). Only day resolution
        is used; any time-of-day component is ignored.
    merchant:
        Free-text merchant name, compared by exact equality.
    amount:
        Signed amount. Positive values are spend; zero or negative values are
        credits, payments or refunds.
    category:
        Open-ended category label.
    file_source:
        Name of the statement the row was extracted from.
    """

    id: str | None
    date: str | None
    merchant: str | None
    amount: float
    category: str | None
    file_source: str | None = None


class Anomaly(NamedTuple):
    """A flagged transaction and the reason it was flagged."""

    transaction_id: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"transactionId": self.transaction_id, "reason": self.reason}


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Outcome of one anomaly scan: either ``anomalies`` or ``error``.

    Exactly one of the two fields is set. A successful scan with nothing to
    report carries an empty ``anomalies`` tuple, which is not an error.
    """

    anomalies: tuple[Anomaly, ...] | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.anomalies is None) == (self.error is None):
            raise ValueError("ScanResult requires exactly one of anomalies or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {"anomalies": [a.to_dict() for a in self.anomalies or ()]}


@dataclass(frozen=True, slots=True)
class FlaggedTransaction:
    """An anomaly joined back to the transaction it references."""

    transaction: Transaction
    anomaly: Anomaly

    @property
    def reason(self) -> str:
        return self.anomaly.reason


class LargePurchaseRule(NamedTuple):
    """Fixed spend limit for one category (strictly-greater comparison)."""

    category: str
    limit: float
    reason: str


type Transactions = Iterable[Transaction]
"""A generic iterable of transactions for one user/session."""


# ---------------------------------------------------------------------------
# DTOs for JSON statement exports
# ---------------------------------------------------------------------------


class TransactionPayload(BaseModel):
    """One transaction object as found in a JSON statement export.

    Extras are allowed so exports carrying additional keys (descriptions,
    memos, raw text) load without changes.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, str_strip_whitespace=True)

    id: str | None = None
    date: str | None = None
    merchant: str | None = None
    amount: float
    category: str | None = None
    file_source: str | None = Field(default=None, alias="fileSource")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        # Exports from some banks carry numeric references.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    def to_transaction(self) -> Transaction:
        return Transaction(
            id=self.id or None,
            date=self.date or None,
            merchant=self.merchant,
            amount=self.amount,
            category=self.category or None,
            file_source=self.file_source or None,
        )


class StatementFile(BaseModel):
    """Top-level schema for a JSON statement export."""

    model_config = ConfigDict(extra="allow")

    transactions: list[TransactionPayload]
