"""Amount/date normalization for exported transaction rows.

Amounts follow bank-export conventions: optional ``$``, thousands
separators, leading ``+``/``-`` and surrounding parentheses for negatives.
Dates are normalized to ``YYYY-MM-DD`` when recognisable; anything else is
passed through untouched so the scanner can report it.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from ..anomalies import parse_day


def to_decimal(raw: str | None) -> Decimal:
    if raw is None:
        raise ValueError("amount is required")
    s = raw.strip()
    if not s:
        raise ValueError("amount is empty")
    negative = False

    # Strip sign, currency symbol and parentheses in any order until stable.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("$"):
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "").strip()
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    return -abs(d) if negative else d


def normalize_date(raw: str | None) -> str | None:
    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    try:
        day = parse_day(s)
    except ValueError:
        return s
    return day.isoformat() if day is not None else None


def clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(value.split())
    return cleaned if cleaned else None


__all__ = ["clean_text", "normalize_date", "to_decimal"]
