"""Ingest utilities shared by CLI commands.

Exposes :func:`load_transactions`, which reads a statement export (CSV or
JSON) into :class:`~spend_anomalies.models.Transaction` records.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Iterator
from os import PathLike
from pathlib import Path

from ..logging_setup import get_logger
from ..models import StatementFile, Transaction
from .normalizers import clean_text, normalize_date, to_decimal

logger = get_logger("spend_anomalies.ingest")

REQUIRED_CSV_COLUMNS = ("id", "date", "merchant", "amount", "category")
_SOURCE_COLUMNS = ("file_source", "filesource", "source")


def load_transactions(path: str | PathLike[str]) -> list[Transaction]:
    """Read a statement export and return its transactions in file order.

    ``.json`` files hold either a list of transaction objects or an object
    with a ``transactions`` list; ``.csv`` files need a header row with at
    least ``id, date, merchant, amount, category`` (case-insensitive).

    Raises ``ValueError`` for unsupported suffixes or bad amounts,
    ``csv.Error`` for header problems and ``pydantic.ValidationError`` for
    JSON that does not match the schema. I/O errors propagate unchanged.
    """

    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".json":
        items = _load_json(p)
    elif suffix == ".csv":
        with p.open(encoding="utf-8", newline="") as f:
            items = list(_rows_to_transactions(csv.DictReader(f), p))
    else:
        raise ValueError(f"unsupported statement format: {p.suffix or '(none)'} (expected .csv or .json)")

    logger.info("Loaded %d transactions from %s", len(items), p.name)
    return items


def _load_json(p: Path) -> list[Transaction]:
    with p.open(encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        data = {"transactions": data}
    statement = StatementFile.model_validate(data)
    return [item.to_transaction() for item in statement.transactions]


def _rows_to_transactions(reader: csv.DictReader, p: Path) -> Iterator[Transaction]:
    headers = reader.fieldnames
    if not headers:
        raise csv.Error(f"CSV appears to have no header row: {p}")
    columns = {h.strip().lower(): h for h in headers if h is not None}
    missing = [c for c in REQUIRED_CSV_COLUMNS if c not in columns]
    if missing:
        raise csv.Error("CSV header mismatch. Missing columns: " + ", ".join(missing))
    source_col = next((columns[c] for c in _SOURCE_COLUMNS if c in columns), None)

    # Header is line 1.
    for line_no, row in enumerate(reader, start=2):
        try:
            amount = to_decimal(row.get(columns["amount"]))
        except ValueError as e:
            raise ValueError(f"{p.name}:{line_no}: {e}") from e
        yield Transaction(
            id=clean_text(row.get(columns["id"])),
            date=normalize_date(row.get(columns["date"])),
            merchant=clean_text(row.get(columns["merchant"])),
            amount=float(amount),
            category=clean_text(row.get(columns["category"])),
            file_source=clean_text(row.get(source_col)) if source_col else None,
        )


__all__ = ["REQUIRED_CSV_COLUMNS", "load_transactions"]
