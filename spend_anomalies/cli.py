# ruff: noqa: I001
"""CLI for the ``spend_anomalies`` package.

Exposes a callable command handler (``cmd_scan_anomalies``) and a Typer-based
console interface. Environment variables are loaded from a local ``.env``
using ``python-dotenv`` before delegating to command logic. Business logic
lives in ``spend_anomalies.api`` and related modules.
"""

from __future__ import annotations

import json
import sys
from datetime import date
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .logging_setup import configure_logging


def _parse_cli_date(value: str | None, *, flag: str) -> date | None:
    if value is None or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise ValueError(f"{flag} must be YYYY-MM-DD, got {value!r}") from e


def _format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def cmd_scan_anomalies(
    input_path: str,
    *,
    date_from: str | None = None,
    date_to: str | None = None,
    source: str | None = None,
    exclude_categories: bool = True,
    as_json: bool = False,
) -> int:
    """Scan a statement export for unusual transactions and print the results.

    Behavior
    --------
    - Loads ``input_path`` (CSV or JSON) via
      :func:`spend_anomalies.ingest.load_transactions`.
    - Applies the optional date range and statement-source selection and, by
      default, leaves out payment/investment categories.
    - Prints one line per flagged transaction as
      ``"<date>\\t<merchant>\\t<amount>\\t<reason>"`` followed by a summary, or
      the ``{"anomalies": [...]}`` document when ``as_json`` is set.

    Errors are written to stderr and a non-zero status is returned.
    """

    import csv

    from pydantic import ValidationError

    from .api import join_anomalies, scan_transactions
    from .ingest import load_transactions

    try:
        start = _parse_cli_date(date_from, flag="--date-from")
        end = _parse_cli_date(date_to, flag="--date-to")
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    if start is not None and end is not None and start > end:
        print("Error: --date-from must not be after --date-to", file=sys.stderr)
        return 2

    try:
        transactions = load_transactions(input_path)
    except FileNotFoundError:
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {input_path}", file=sys.stderr)
        return 1
    except csv.Error as e:
        print(f"Error: Failed to parse CSV: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Failed to parse JSON: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Error: Invalid statement file: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = scan_transactions(
        transactions,
        date_from=start,
        date_to=end,
        file_source=source,
        exclude_categories=exclude_categories,
    )
    if not result.ok:
        print(f"Error: anomaly scan failed: {result.error}", file=sys.stderr)
        return 1

    anomalies = result.anomalies or ()
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    if not anomalies:
        print("No anomalies found.")
        return 0

    for flagged in join_anomalies(anomalies, transactions):
        txn = flagged.transaction
        print(
            f"{txn.date or ''}\t{txn.merchant or ''}\t"
            f"{_format_currency(txn.amount)}\t{flagged.reason}"
        )
    print(f"Found {len(anomalies)} potential unusual transaction(s).")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Flag unusual transactions (duplicates, repeated charges, large or "
        "out-of-pattern spending) in a CSV or JSON statement export."
    ),
)


# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults).
INPUT_PATH_OPTION: OptionInfo = typer.Option(
    "--input",
    "-i",
    help="Path to a CSV or JSON file of categorized transactions",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)


@app.command("scan-anomalies")
def scan_anomalies_cmd(
    input_path: Annotated[Path, INPUT_PATH_OPTION],
    *,
    date_from: str | None = typer.Option(
        None, "--date-from", help="Only scan transactions on or after this date (YYYY-MM-DD)."
    ),
    date_to: str | None = typer.Option(
        None, "--date-to", help="Only scan transactions on or before this date (YYYY-MM-DD)."
    ),
    source: str | None = typer.Option(
        None, "--source", help="Only scan transactions from this statement file ('all' for every source)."
    ),
    all_categories: bool = typer.Option(
        False,
        "--all-categories",
        help="Scan payment/investment categories too (credits are always included).",
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit results as JSON."),
) -> None:
    """Scan a statement export for anomalies."""

    code = cmd_scan_anomalies(
        str(input_path),
        date_from=date_from,
        date_to=date_to,
        source=source,
        exclude_categories=not all_categories,
        as_json=as_json,
    )
    if code:
        raise typer.Exit(code)


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
