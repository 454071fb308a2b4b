import json

import pytest
from typer.testing import CliRunner

from report_reconciliation.cli import app
from tests.helpers.reports import (
    detail_row,
    qbo_data,
    qbo_report,
    qbo_section,
    xero_bill,
    xero_report,
    xero_row,
    xero_section,
)

runner = CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    # The CLI loads ``.env`` from the working directory.
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_category_detail_qbo(workdir):
    report = _write(
        workdir / "detail.json",
        qbo_report([qbo_section("Rent", [detail_row("2024-01-01", "Check", "7", "Landlord", "900")])]),
    )

    result = runner.invoke(app, ["category-detail", "--category", "Rent", "--report", report])

    assert result.exit_code == 0, result.output
    body = json.loads(result.stdout)
    assert body["expenseName"] == "Rent"
    assert [d["partyName"] for d in body["details"]] == ["Landlord"]
    assert body["details"][0]["amount"] == 900.0


def test_category_detail_xero_pages_through_invoices(workdir):
    invoices = [xero_bill(f"B-{i}", "2024-01-15", 1) for i in range(30)]
    invoices.append(xero_bill("draft", "2024-01-15", 1, status="DRAFT"))
    accounts = {"Accounts": [{"AccountID": "acc-400", "Code": "400", "Name": "Office Expenses"}]}

    result = runner.invoke(
        app,
        [
            "category-detail",
            "--platform",
            "xero",
            "--category",
            "Office Expenses",
            "--invoices",
            _write(workdir / "invoices.json", invoices),
            "--accounts",
            _write(workdir / "accounts.json", accounts),
            "--from-date",
            "2024-01-01",
            "--to-date",
            "2024-01-31",
        ],
    )

    assert result.exit_code == 0, result.output
    details = json.loads(result.stdout)["details"]
    assert len(details) == 30
    assert details[-1]["runningBalance"] == 30.0


def test_platform_default_comes_from_environment(workdir, monkeypatch):
    monkeypatch.setenv("REPORT_RECONCILIATION_PLATFORM", "XERO")
    report = _write(
        workdir / "pnl.json",
        xero_report([xero_section("Less Operating Expenses", [xero_row("Rent", "40")])]),
    )

    result = runner.invoke(
        app, ["breakdown", "--report", report, "--from-date", "2023-01-01", "--to-date", "2023-12-31"]
    )

    assert result.exit_code == 0, result.output
    body = json.loads(result.stdout)
    assert body["previousPeriodData"] == [{"name": "Rent", "value": 40.0, "percentage": 100.0}]
    assert body["timeframe"] == {"from": "2023-01-01", "to": "2023-12-31", "type": "YEAR"}


def test_breakdown_qbo_with_month_timeframe(workdir):
    report = _write(
        workdir / "pnl.json",
        qbo_report([qbo_section("Expenses", [qbo_data("Rent", "30"), qbo_data("Travel", "10")])]),
    )

    result = runner.invoke(
        app,
        [
            "breakdown",
            "--report",
            report,
            "--from-date",
            "2024-02-01",
            "--to-date",
            "2024-02-29",
            "--timeframe",
            "month",
        ],
    )

    assert result.exit_code == 0, result.output
    body = json.loads(result.stdout)
    assert [b["percentage"] for b in body["previousPeriodData"]] == [75.0, 25.0]
    assert body["timeframe"]["type"] == "MONTH"


def test_errors_exit_nonzero(workdir):
    missing = runner.invoke(
        app, ["category-detail", "--category", "Rent", "--report", str(workdir / "nope.json")]
    )
    assert missing.exit_code == 1
    assert "File not found" in missing.output

    (workdir / "bad.json").write_text("{not json", encoding="utf-8")
    bad = runner.invoke(app, ["category-detail", "--category", "Rent", "--report", "bad.json"])
    assert bad.exit_code == 1
    assert "Failed to parse JSON" in bad.output

    no_report = runner.invoke(app, ["category-detail", "--category", "Rent"])
    assert no_report.exit_code == 1
    assert "needs a report tree" in no_report.output

    bad_platform = runner.invoke(
        app, ["category-detail", "--category", "Rent", "--platform", "sage"]
    )
    assert bad_platform.exit_code == 1
    assert "unknown platform" in bad_platform.output


def test_breakdown_requires_both_dates(workdir):
    report = _write(workdir / "pnl.json", qbo_report([]))

    result = runner.invoke(app, ["breakdown", "--report", report, "--from-date", "2024-01-01"])

    assert result.exit_code == 2
    assert "--to-date" in result.output
