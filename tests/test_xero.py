import pytest

from report_reconciliation import xero
from report_reconciliation.models import AccountSelector, CashMovements, ProfitLossSummary
from tests.helpers.reports import xero_report, xero_row, xero_section, xero_summary


def _pnl():
    return xero_report(
        [
            {"RowType": "Header", "Cells": [{"Value": ""}, {"Value": "Jan 2024"}]},
            xero_section(
                "Income",
                [xero_row("Sales", "12,000.00"), xero_summary("Total Income", "12,000.00")],
            ),
            xero_section(
                "Less Cost of Sales",
                [xero_row("Purchases", "800.00"), xero_summary("Total Cost of Sales", "800.00")],
            ),
            xero_section("", [xero_summary("Gross Profit", "11,200.00")]),
            xero_section(
                "Less Operating Expenses",
                [
                    xero_row("Rent", "1,500.00"),
                    xero_row("Bank Fees", "0.00"),
                    xero_row("Consulting", "700.00"),
                    xero_row("Refund", "-20"),
                    xero_summary("Total Operating Expenses", "2,180.00"),
                ],
            ),
            xero_section("", [xero_summary("Net Profit", "9,020.00")]),
        ]
    )


def test_extract_breakdown_includes_cost_of_sales_bucket():
    buckets = xero.extract_breakdown(_pnl())

    assert [b.name for b in buckets] == ["Rent", "Cost of Sales", "Consulting"]
    assert [b.value for b in buckets] == pytest.approx([1500.0, 800.0, 700.0])
    assert buckets[0].percentage == pytest.approx(50.0)


def test_extract_breakdown_without_cost_of_sales():
    report = xero_report(
        [xero_section("Less Operating Expenses", [xero_row("Rent", "100"), xero_row("Total Rent", "100")])]
    )
    buckets = xero.extract_breakdown(report)
    assert [(b.name, b.percentage) for b in buckets] == [("Rent", 100.0)]


def test_extract_breakdown_handles_camel_case_payloads():
    report = {
        "reports": [
            {
                "rows": [
                    {
                        "rowType": "Section",
                        "title": "Less Operating Expenses",
                        "rows": [{"rowType": "Row", "cells": [{"value": "Rent"}, {"value": "10"}]}],
                    }
                ]
            }
        ]
    }
    assert [b.name for b in xero.extract_breakdown(report)] == ["Rent"]


def test_extract_account_value_and_totals():
    report = _pnl()
    assert xero.extract_account_value(report, ["Net Profit"]) == pytest.approx(9020.0)
    assert xero.extract_account_value(report, ["total income"]) == pytest.approx(12000.0)
    assert xero.extract_account_value(report, ["Missing"]) == 0.0
    assert xero.extract_total_operating_expenses(report) == pytest.approx(2980.0)
    assert xero.extract_breakdown(None) == []


def test_extract_cash_movements():
    bank_summary = xero_report(
        [
            xero_section(
                "",
                [
                    xero_row("Business Checking", "1,000.00"),
                    xero_summary("Total", "1,000.00"),
                ],
            ),
            xero_summary("Total Cash Received", "5,000.00"),
            xero_section("", [xero_summary("Total Receipts", "4,200.00")]),
            xero_section("", [xero_summary("Total Payments", "-3,100.00")]),
        ],
        name="Bank Summary",
    )
    assert xero.extract_cash_movements(bank_summary) == CashMovements(cash_in=4200.0, cash_out=3100.0)
    assert xero.extract_cash_movements(None) == CashMovements()


def test_resolve_account_by_name():
    accounts = {
        "Accounts": [
            {"AccountID": "a-1", "Code": "200", "Name": "Sales"},
            {"Name": "Office Expenses"},
            {"AccountID": "a-2", "Code": "453", "Name": "Office Expenses"},
        ]
    }

    assert xero.resolve_account(accounts, " office expenses ") == AccountSelector(
        account_id="a-2", code="453", name="Office Expenses"
    )
    assert xero.resolve_account(accounts["Accounts"], "Sales").code == "200"
    assert xero.resolve_account(accounts, "Travel") is None
    assert xero.resolve_account(None, "Sales") is None


def test_extract_profit_loss_summary():
    summary = xero.extract_profit_loss_summary(_pnl())

    assert summary == ProfitLossSummary(
        revenue=12000.0,
        operating_expenses=2980.0,
        cost_of_goods_sold=800.0,
        net_profit=9020.0,
    )
    assert summary.net_margin == pytest.approx(9020 / 12000 * 100)
    assert xero.extract_profit_loss_summary(None) == ProfitLossSummary()


def test_extract_cash_balance():
    balance_sheet = xero_report(
        [
            xero_section(
                "Bank",
                [xero_row("Business Checking", "4,000.00"), xero_summary("Total Bank", "4,250.00")],
            )
        ],
        name="Balance Sheet",
    )
    assert xero.extract_cash_balance(balance_sheet) == pytest.approx(4250.0)
