"""QuickBooks Online report extraction.

Three reductions over QBO report trees:

- :func:`extract_category_transactions`: the ``Data`` rows under every
  category header matching a name in a ProfitAndLossDetail report.
- :func:`extract_breakdown`: ranked expense buckets from the sections of a
  ProfitAndLoss report.
- :func:`extract_profit_loss_summary`: the top-level income/expense totals.

Every function accepts either a validated :class:`QboReport` or the raw JSON
mapping. Malformed payloads produce empty results instead of raising.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from .amounts import normalize_amount, parse_amount
from .breakdown import rank_buckets, share_buckets
from .columns import ColumnKeyMap, lookup, resolve_columns
from .logging_setup import get_logger
from .models import ExpenseCategoryBucket, NormalizedTransaction, ProfitLossSummary
from .payloads import QboReport, QboRow
from .tree import locate_category, locate_sections

_logger = get_logger("report_reconciliation.qbo")

EXPENSE_SECTION_TITLES: tuple[str, ...] = (
    "EXPENSES",
    "OTHER EXPENSES",
    "COST OF GOODS SOLD",
    "COST OF SALES",
    "COGS",
)
COGS_SECTION_TITLES: tuple[str, ...] = ("COST OF GOODS SOLD", "COST OF SALES", "COGS")

_SUMMARY_FIELDS: Mapping[str, str] = {
    "Total Income": "revenue",
    "Total Expenses": "operating_expenses",
    "Total Cost of Goods Sold": "cost_of_goods_sold",
    "Net Income": "net_profit",
}
_SIGNED_SUMMARY_FIELDS = frozenset({"net_profit"})

_TEXT_FIELDS: tuple[str, ...] = (
    "date",
    "transaction_type",
    "doc_number",
    "party_name",
    "class_label",
    "memo",
    "contra_account",
)


def parse_report(report: QboReport | Mapping[str, Any] | None) -> QboReport | None:
    """Validate a raw QBO report payload; ``None`` when absent or malformed."""

    if report is None or isinstance(report, QboReport):
        return report
    if not isinstance(report, Mapping):
        _logger.warning("ignoring QBO report of type %s", type(report).__name__)
        return None
    try:
        return QboReport.model_validate(report)
    except ValidationError as e:
        _logger.warning("ignoring malformed QBO report: %s", e)
        return None


def _row_to_transaction(
    row: QboRow, column_map: ColumnKeyMap | None, source_id: str
) -> NormalizedTransaction | None:
    text = {field: lookup(row.col_data, field, column_map) for field in _TEXT_FIELDS}
    raw_amount = lookup(row.col_data, "amount", column_map)
    raw_balance = lookup(row.col_data, "running_balance", column_map)

    has_amount = parse_amount(raw_amount) is not None
    if not (has_amount or text["date"] or text["transaction_type"] or text["party_name"]):
        return None

    return NormalizedTransaction(
        **text,
        amount=normalize_amount(raw_amount),
        running_balance=normalize_amount(raw_balance),
        source_id=source_id or None,
    )


def extract_category_transactions(
    report: QboReport | Mapping[str, Any] | None, category_name: str
) -> list[NormalizedTransaction]:
    """Return the transactions booked under every category named ``category_name``.

    Category names match after trimming and case-folding. The search covers
    the whole tree, so identically named categories under different parent
    sections are all included, in document order. Only rows typed ``Data``
    are read; a row is kept when it has a parseable amount or a date,
    transaction type or party name.
    """

    parsed = parse_report(report)
    if parsed is None or not parsed.rows:
        return []

    column_map = resolve_columns(parsed.columns)
    if column_map is None:
        _logger.debug("report has no column metadata; using fixed column order")

    details: list[NormalizedTransaction] = []
    categories = locate_category(parsed.rows, category_name)
    for category in categories:
        source_id = category.header_id
        for row in category.rows:
            if not row.is_data:
                continue
            txn = _row_to_transaction(row, column_map, source_id)
            if txn is None:
                _logger.debug("dropping empty data row under %r", category.label)
                continue
            details.append(txn)

    _logger.info(
        "extracted %d transactions from %d %r categories",
        len(details),
        len(categories),
        category_name,
    )
    return details


def _section_entries(sections: Iterable[QboRow]) -> Iterable[tuple[str, Any]]:
    for section in sections:
        for row in section.rows:
            if not row.is_data or not row.col_data:
                continue
            value = row.col_data[1].value if len(row.col_data) > 1 else None
            yield row.col_data[0].text, value


def extract_breakdown(
    report: QboReport | Mapping[str, Any] | None,
    section_titles: Iterable[str] = EXPENSE_SECTION_TITLES,
) -> list[ExpenseCategoryBucket]:
    """Rank the ``Data`` rows directly under the named sections (top 10)."""

    parsed = parse_report(report)
    if parsed is None:
        return []
    sections = locate_sections(parsed.rows, section_titles)
    return rank_buckets(_section_entries(sections))


def _nested_entries(rows: Iterable[QboRow]) -> Iterator[tuple[str, Any]]:
    for row in rows:
        if row.is_data and row.col_data:
            value = row.col_data[1].value if len(row.col_data) > 1 else None
            yield row.col_data[0].text, value
        yield from _nested_entries(row.rows)


def extract_cogs_breakdown(
    report: QboReport | Mapping[str, Any] | None,
) -> list[ExpenseCategoryBucket]:
    """Every cost-of-goods-sold line, sub-sections included, by magnitude.

    Unlike :func:`extract_breakdown` the list is not capped and credit lines
    are kept (as magnitudes).
    """

    parsed = parse_report(report)
    if parsed is None:
        return []
    sections = locate_sections(parsed.rows, COGS_SECTION_TITLES)
    return share_buckets(_nested_entries(row for section in sections for row in section.rows))


def extract_profit_loss_summary(
    report: QboReport | Mapping[str, Any] | None,
) -> ProfitLossSummary:
    """Read the top-level Total Income, Total Expenses, Total Cost of Goods Sold
    and Net Income summaries. Net income keeps its sign; the rest are magnitudes.
    """

    parsed = parse_report(report)
    if parsed is None:
        return ProfitLossSummary()

    values: dict[str, float] = {}
    for row in parsed.rows:
        if row.summary is None or not row.summary.col_data:
            continue
        field = _SUMMARY_FIELDS.get(row.summary.label.strip())
        if field is None:
            continue
        raw = row.summary.col_data[1].value if len(row.summary.col_data) > 1 else None
        value = parse_amount(raw)
        if value is not None:
            values[field] = value if field in _SIGNED_SUMMARY_FIELDS else abs(value)
    return ProfitLossSummary(**values)


__all__ = [
    "COGS_SECTION_TITLES",
    "EXPENSE_SECTION_TITLES",
    "extract_breakdown",
    "extract_category_transactions",
    "extract_cogs_breakdown",
    "extract_profit_loss_summary",
    "parse_report",
]
