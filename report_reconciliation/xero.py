"""Xero report reductions and chart-of-accounts lookup.

Xero reports are shallow: ``Reports[].Rows`` holds ``Section`` rows whose
``Rows`` are ``Row`` (one account) or ``SummaryRow`` (a total). Account
labels sit in the first cell and values in the second.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from .amounts import parse_amount
from .breakdown import rank_buckets
from .logging_setup import get_logger
from .models import AccountSelector, CashMovements, ExpenseCategoryBucket, ProfitLossSummary
from .payloads import XeroAccount, XeroReportEnvelope, XeroRow, cell_text
from .tree import find_nodes, normalize_label

_logger = get_logger("report_reconciliation.xero")

OPERATING_EXPENSES_SECTION = "less operating expenses"
TOTAL_OPERATING_EXPENSES = "total operating expenses"
TOTAL_INCOME = "Total Income"
TOTAL_COST_OF_SALES = "Total Cost of Sales"
NET_PROFIT = "Net Profit"
TOTAL_BANK = "Total Bank"
COST_OF_SALES_BUCKET = "Cost of Sales"

_VALUE_ROW_TYPES = frozenset({"Row", "SummaryRow"})
_CASH_IN_LABELS = ("total receipts", "total cash in", "total deposits")
_CASH_OUT_LABELS = ("total payments", "total cash out", "total withdrawals")


def parse_report(
    report: XeroReportEnvelope | Mapping[str, Any] | None,
) -> XeroReportEnvelope | None:
    """Validate a raw ``{"Reports": [...]}`` payload; ``None`` when unusable."""

    if report is None or isinstance(report, XeroReportEnvelope):
        return report
    if not isinstance(report, Mapping):
        _logger.warning("ignoring Xero report of type %s", type(report).__name__)
        return None
    try:
        return XeroReportEnvelope.model_validate(report)
    except ValidationError as e:
        _logger.warning("ignoring malformed Xero report: %s", e)
        return None


def _top_level_rows(envelope: XeroReportEnvelope) -> Iterator[XeroRow]:
    for report in envelope.reports:
        yield from report.rows


def _rows_one_level_deep(envelope: XeroReportEnvelope) -> Iterator[XeroRow]:
    for row in _top_level_rows(envelope):
        yield row
        yield from row.rows


def extract_account_value(
    report: XeroReportEnvelope | Mapping[str, Any] | None, account_names: Sequence[str]
) -> float:
    """Return the signed value of the first row whose label contains any name.

    Only ``Row``/``SummaryRow`` rows at the top level or directly inside a
    section are considered. Rows with a non-numeric value are skipped.
    """

    envelope = parse_report(report)
    if envelope is None:
        return 0.0
    needles = [n.casefold() for n in account_names]
    for row in _rows_one_level_deep(envelope):
        if row.row_type not in _VALUE_ROW_TYPES or not row.cells:
            continue
        label = row.cell(0).casefold()
        if not label or not any(n in label for n in needles):
            continue
        value = parse_amount(row.raw_cell(1))
        if value is not None:
            return value
    return 0.0


def _operating_expense_sections(envelope: XeroReportEnvelope) -> list[XeroRow]:
    return find_nodes(
        _top_level_rows(envelope),
        lambda title: OPERATING_EXPENSES_SECTION in title.casefold(),
    )


def extract_total_operating_expenses(
    report: XeroReportEnvelope | Mapping[str, Any] | None,
) -> float:
    """Total Operating Expenses (absolute) plus Total Cost of Sales."""

    envelope = parse_report(report)
    if envelope is None:
        return 0.0
    cost_of_sales = extract_account_value(envelope, [TOTAL_COST_OF_SALES])
    for section in _operating_expense_sections(envelope):
        for row in section.rows:
            if row.row_type != "SummaryRow" or len(row.cells) < 2:
                continue
            if TOTAL_OPERATING_EXPENSES not in row.cell(0).casefold():
                continue
            value = parse_amount(row.raw_cell(1))
            if value is not None:
                return abs(value) + cost_of_sales
    return cost_of_sales


def extract_profit_loss_summary(
    report: XeroReportEnvelope | Mapping[str, Any] | None,
) -> ProfitLossSummary:
    """Headline figures of a Xero ProfitAndLoss report.

    ``operating_expenses`` is :func:`extract_total_operating_expenses`, so it
    includes cost of sales, which is also reported on its own.
    """

    envelope = parse_report(report)
    if envelope is None:
        return ProfitLossSummary()
    return ProfitLossSummary(
        revenue=abs(extract_account_value(envelope, [TOTAL_INCOME])),
        operating_expenses=extract_total_operating_expenses(envelope),
        cost_of_goods_sold=abs(extract_account_value(envelope, [TOTAL_COST_OF_SALES])),
        net_profit=extract_account_value(envelope, [NET_PROFIT]),
    )


def extract_cash_balance(
    balance_sheet: XeroReportEnvelope | Mapping[str, Any] | None,
) -> float:
    """Signed "Total Bank" figure of a BalanceSheet report."""

    return extract_account_value(balance_sheet, [TOTAL_BANK])


def _breakdown_entries(
    sections: Iterable[XeroRow], cost_of_sales: float
) -> Iterator[tuple[str, Any]]:
    if cost_of_sales > 0:
        yield COST_OF_SALES_BUCKET, cost_of_sales
    for section in sections:
        for row in section.rows:
            if row.row_type != "Row" or len(row.cells) < 2:
                continue
            yield row.cell(0), row.raw_cell(1)


def extract_breakdown(
    report: XeroReportEnvelope | Mapping[str, Any] | None,
) -> list[ExpenseCategoryBucket]:
    """Rank operating-expense accounts plus a Cost of Sales bucket (top 10)."""

    envelope = parse_report(report)
    if envelope is None:
        return []
    cost_of_sales = extract_account_value(envelope, [TOTAL_COST_OF_SALES])
    sections = _operating_expense_sections(envelope)
    return rank_buckets(_breakdown_entries(sections, cost_of_sales))


def extract_cash_movements(
    bank_summary: XeroReportEnvelope | Mapping[str, Any] | None,
) -> CashMovements:
    """Cash in/out totals from a BankSummary report (absolute values)."""

    envelope = parse_report(bank_summary)
    if envelope is None:
        return CashMovements()

    cash_in = 0.0
    cash_out = 0.0
    for row in _rows_one_level_deep(envelope):
        if row.row_type != "SummaryRow" or not row.cells:
            continue
        label = row.cell(0).casefold()
        value = parse_amount(row.raw_cell(1))
        if value is None:
            continue
        # Later matches overwrite earlier ones.
        if any(n in label for n in _CASH_IN_LABELS):
            cash_in = abs(value)
        if any(n in label for n in _CASH_OUT_LABELS):
            cash_out = abs(value)
    return CashMovements(cash_in=cash_in, cash_out=cash_out)


def resolve_account(
    accounts: Mapping[str, Any] | Sequence[Any] | None, name: str
) -> AccountSelector | None:
    """Find the chart-of-accounts entry called ``name`` (trimmed, case-insensitive).

    ``accounts`` is the ``{"Accounts": [...]}`` payload or its bare list.
    Entries without an id and a code are unusable and skipped.
    """

    if accounts is None:
        return None
    if isinstance(accounts, Mapping):
        items = accounts.get("Accounts", accounts.get("accounts")) or []
    else:
        items = accounts
    if not isinstance(items, Sequence) or isinstance(items, (str, bytes)):
        _logger.warning("ignoring accounts payload of type %s", type(items).__name__)
        return None

    wanted = normalize_label(name)
    for raw in items:
        if not isinstance(raw, Mapping):
            continue
        try:
            account = XeroAccount.model_validate(raw)
        except ValidationError as e:
            _logger.debug("skipping malformed account entry: %s", e)
            continue
        if normalize_label(cell_text(account.name)) != wanted:
            continue
        account_id = cell_text(account.account_id).strip() or None
        code = cell_text(account.code).strip() or None
        if account_id is None and code is None:
            continue
        return AccountSelector(account_id=account_id, code=code, name=cell_text(account.name))
    _logger.info("no Xero account named %r", name)
    return None


__all__ = [
    "COST_OF_SALES_BUCKET",
    "extract_account_value",
    "extract_breakdown",
    "extract_cash_balance",
    "extract_cash_movements",
    "extract_profit_loss_summary",
    "extract_total_operating_expenses",
    "parse_report",
    "resolve_account",
]
