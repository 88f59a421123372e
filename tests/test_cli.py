from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from spend_anomalies.cli import app

runner = CliRunner()


def _mk_rows() -> list[dict[str, object]]:
    return [
        {"id": "s1", "date": "2023-11-22", "merchant": "Starbucks", "amount": 7.25, "category": "Dining", "fileSource": "visa.pdf"},
        {"id": "s2", "date": "2023-11-22", "merchant": "Starbucks", "amount": 12.5, "category": "Dining", "fileSource": "visa.pdf"},
        {"id": "s3", "date": "2023-11-22", "merchant": "Starbucks", "amount": 5.0, "category": "Dining", "fileSource": "visa.pdf"},
        {"id": "b1", "date": "2023-12-10", "merchant": "Boutique", "amount": 1250.0, "category": "Shopping", "fileSource": "amex.pdf"},
        {"id": "c1", "date": "2023-12-11", "merchant": "Corner Shop", "amount": 4.5, "category": "Groceries", "fileSource": "amex.pdf"},
    ]


@pytest.fixture
def statement(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    # Run from an empty directory so no stray .env is picked up.
    monkeypatch.chdir(tmp_path)
    p = tmp_path / "statement.json"
    p.write_text(json.dumps({"transactions": _mk_rows()}), encoding="utf-8")
    return p


def test_scan_prints_flagged_transactions(statement: Path):
    result = runner.invoke(app, ["scan-anomalies", "--input", str(statement)])
    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert lines[0] == (
        "2023-11-22\tStarbucks\t$7.25\tMultiple charges (3) to Starbucks on the same day."
    )
    assert "2023-12-10\tBoutique\t$1,250.00\tLarge 'Shopping' expense." in lines
    assert lines[-1] == "Found 4 potential unusual transaction(s)."


def test_scan_json_output(statement: Path):
    result = runner.invoke(app, ["scan-anomalies", "--input", str(statement), "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [a["transactionId"] for a in payload["anomalies"]] == ["s1", "s2", "s3", "b1"]


def test_scan_with_source_and_date_filters(statement: Path):
    result = runner.invoke(
        app,
        [
            "scan-anomalies",
            "--input",
            str(statement),
            "--source",
            "visa.pdf",
            "--date-from",
            "2023-12-01",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "No anomalies found." in result.output


def test_scan_refunded_purchase_is_not_flagged(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    p = tmp_path / "refund.json"
    rows = [
        {"id": "buy", "date": "2023-10-01", "merchant": "Best Buy", "amount": 250.0, "category": "Shopping"},
        {"id": "refund", "date": "2023-10-05", "merchant": "Best Buy", "amount": -250.0, "category": "Shopping"},
    ]
    p.write_text(json.dumps({"transactions": rows}), encoding="utf-8")
    result = runner.invoke(app, ["scan-anomalies", "--input", str(p)])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "No anomalies found."


def test_scan_all_categories_includes_payments(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    p = tmp_path / "payments.json"
    rows = [
        {"id": f"p{k}", "date": "2023-11-30", "merchant": "Visa", "amount": 100.0 + k, "category": "Payment"}
        for k in range(3)
    ]
    p.write_text(json.dumps({"transactions": rows}), encoding="utf-8")

    default = runner.invoke(app, ["scan-anomalies", "--input", str(p), "--json"])
    assert json.loads(default.stdout) == {"anomalies": []}

    result = runner.invoke(app, ["scan-anomalies", "--input", str(p), "--json", "--all-categories"])
    assert result.exit_code == 0, result.output
    ids = [a["transactionId"] for a in json.loads(result.stdout)["anomalies"]]
    assert ids == ["p0", "p1", "p2"]


def test_scan_missing_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["scan-anomalies", "--input", str(tmp_path / "nope.csv")])
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_scan_invalid_date_option(statement: Path):
    result = runner.invoke(
        app, ["scan-anomalies", "--input", str(statement), "--date-to", "12/31/2023"]
    )
    assert result.exit_code == 2
    assert "--date-to must be YYYY-MM-DD" in result.output


def test_scan_reports_scan_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    p = tmp_path / "statement.csv"
    p.write_text(
        "id,date,merchant,amount,category\nt1,someday,Shop,10.00,Shopping\n",
        encoding="utf-8",
    )
    result = runner.invoke(app, ["scan-anomalies", "--input", str(p)])
    assert result.exit_code == 1
    assert "Error: anomaly scan failed: invalid transaction date" in result.output
