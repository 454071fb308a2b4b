"""Builders for upstream report payloads used across the test-suite.

The helpers emit plain dicts shaped like the JSON the platforms return, so
tests exercise the same validation path as real payloads.
"""

from __future__ import annotations

from typing import Any

DETAIL_COL_KEYS = [
    "tx_date",
    "txn_type",
    "doc_num",
    "name",
    "klass_name",
    "memo",
    "split_acc",
    "subt_nat_amount_nt",
    "rbal_nat_amount_nt",
]


# ---- QuickBooks Online --------------------------------------------------------


def qbo_columns(col_keys: list[str]) -> dict[str, Any]:
    return {
        "Column": [
            {
                "ColTitle": key,
                "ColType": "String",
                "MetaData": [{"Name": "ColKey", "Value": key}],
            }
            for key in col_keys
        ]
    }


def qbo_data(*values: Any) -> dict[str, Any]:
    return {"type": "Data", "ColData": [{"value": v} for v in values]}


def qbo_section(
    title: str,
    rows: list[dict[str, Any]],
    *,
    header_id: str = "",
    summary: tuple[str, Any] | None = None,
) -> dict[str, Any]:
    section: dict[str, Any] = {
        "type": "Section",
        "Header": {"ColData": [{"value": title, "id": header_id}, {"value": ""}]},
        "Rows": {"Row": rows},
    }
    if summary is not None:
        label, value = summary
        section["Summary"] = {"ColData": [{"value": label}, {"value": value}]}
    return section


def qbo_report(rows: list[dict[str, Any]], columns: dict[str, Any] | None = None) -> dict[str, Any]:
    report: dict[str, Any] = {
        "Header": {"ReportName": "ProfitAndLossDetail", "Currency": "USD"},
        "Rows": {"Row": rows},
    }
    if columns is not None:
        report["Columns"] = columns
    return report


def detail_row(
    date: str,
    txn_type: str,
    doc: str,
    party: str,
    amount: Any,
    balance: Any = "",
    *,
    klass: str = "",
    memo: str = "",
    split: str = "",
) -> dict[str, Any]:
    """A ProfitAndLossDetail data row in the fixed column order."""

    return qbo_data(date, txn_type, doc, party, klass, memo, split, amount, balance)


# ---- Xero ---------------------------------------------------------------------


def xero_row(label: str, value: Any) -> dict[str, Any]:
    return {"RowType": "Row", "Cells": [{"Value": label}, {"Value": value}]}


def xero_summary(label: str, value: Any) -> dict[str, Any]:
    return {"RowType": "SummaryRow", "Cells": [{"Value": label}, {"Value": value}]}


def xero_section(title: str, rows: list[dict[str, Any]]) -> dict[str, Any]:
    return {"RowType": "Section", "Title": title, "Rows": rows}


def xero_report(rows: list[dict[str, Any]], name: str = "Profit and Loss") -> dict[str, Any]:
    return {"Reports": [{"ReportName": name, "Rows": rows}]}


def xero_bill(
    number: str,
    date: str,
    sub_total: Any,
    *,
    account_code: str = "400",
    account_id: str = "acc-400",
    type_: str = "ACCPAY",
    status: str = "AUTHORISED",
    contact: str = "Acme Supplies",
    invoice_id: str | None = None,
) -> dict[str, Any]:
    return {
        "Type": type_,
        "InvoiceID": invoice_id or f"inv-{number}",
        "InvoiceNumber": number,
        "Reference": f"ref-{number}",
        "Status": status,
        "Date": date,
        "Contact": {"ContactID": "c-1", "Name": contact},
        "LineItems": [
            {
                "LineItemID": f"li-{number}",
                "Description": "Services",
                "AccountCode": account_code,
                "AccountID": account_id,
                "LineAmount": sub_total,
            }
        ],
        "SubTotal": sub_total,
    }
