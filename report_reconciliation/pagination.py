"""Account transactions rebuilt from paginated Xero invoice queries.

Xero has no per-account detail report comparable to QBO's
ProfitAndLossDetail, so the same drill-down is reconstructed from bills:
pages of invoices are fetched one at a time, filtered by type and date
window, matched to the target account through their line items, ordered by
date and given a running balance.

Page fetching belongs to the caller. The engine only awaits a
:data:`PageFetcher`, sequentially and in page order.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from datetime import UTC, date, datetime, timedelta
from typing import Any, TypeAlias

from pydantic import ValidationError

from .amounts import normalize_amount
from .logging_setup import get_logger
from .models import AccountSelector, NormalizedTransaction, PeriodWindow
from .payloads import XeroInvoice, XeroLineItem, cell_text
from .periods import window_bounds

_logger = get_logger("report_reconciliation.pagination")

PAGE_SIZE = 20
DEFAULT_STATUSES: tuple[str, ...] = ("AUTHORISED", "PAID")
PAYABLE_TYPES: frozenset[str] = frozenset({"ACCPAY"})

RecordPage: TypeAlias = Sequence[Any] | Mapping[str, Any]
"""One fetched page: a list of invoice payloads or an ``{"Invoices": [...]}`` envelope."""

PageFetcher: TypeAlias = Callable[[int, Sequence[str]], Awaitable[RecordPage]]
"""``await fetch_page(page_number, statuses)``; pages are numbered from 1."""

# Xero's JSON date form, e.g. ``/Date(1704067200000+0000)/``.
_MS_DATE_RE = re.compile(r"^/Date\((-?\d+)([+-]\d{4})?\)/$")
_EPOCH = datetime(1970, 1, 1)


def _page_records(payload: Any) -> list[Any]:
    if isinstance(payload, Mapping):
        items = payload.get("Invoices", payload.get("invoices"))
        return list(items) if isinstance(items, list) else []
    if isinstance(payload, (list, tuple)):
        return list(payload)
    return []


async def collect_records(
    fetch_page: PageFetcher,
    *,
    statuses: Sequence[str] = DEFAULT_STATUSES,
    page_size: int = PAGE_SIZE,
) -> list[Any]:
    """Fetch pages from 1 upward until a short page; return every raw record.

    A page shorter than ``page_size`` is the last one. A fetch that raises
    ends pagination early and the records gathered so far are returned.
    """

    records: list[Any] = []
    page = 1
    fetched = 0
    while True:
        try:
            payload = await fetch_page(page, tuple(statuses))
        except Exception as e:  # noqa: BLE001 - upstream failures end pagination
            _logger.warning("page %d fetch failed, stopping pagination: %s", page, e)
            break
        fetched += 1
        batch = _page_records(payload)
        records.extend(batch)
        _logger.debug("page %d returned %d records", page, len(batch))
        if len(batch) < page_size:
            break
        page += 1

    _logger.info("collected %d records over %d pages", len(records), fetched)
    return records


def parse_record_datetime(raw: Any) -> datetime | None:
    """Parse a record date into a naive UTC datetime (``None`` if unparseable).

    Accepts ISO-8601 strings (with or without offset), Xero's
    ``/Date(ms+zzzz)/`` form, and ``date``/``datetime`` objects.
    """

    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, date):
        return datetime.combine(raw, datetime.min.time())
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        m = _MS_DATE_RE.match(s)
        if m:
            # The millisecond count is already UTC; the offset is informational.
            return _EPOCH + timedelta(milliseconds=int(m.group(1)))
        try:
            parsed = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def _line_matches(item: XeroLineItem, account: AccountSelector) -> bool:
    if account.account_id and cell_text(item.account_id).strip() == account.account_id:
        return True
    return bool(account.code) and cell_text(item.account_code).strip() == account.code


def _raw_line_items(raw: Mapping[str, Any]) -> list[dict[str, Any]]:
    items = raw.get("LineItems", raw.get("lineItems"))
    if not isinstance(items, list):
        return []
    return [dict(item) for item in items if isinstance(item, Mapping)]


def apply_running_balance(
    transactions: Iterable[NormalizedTransaction],
) -> list[NormalizedTransaction]:
    """Recompute ``running_balance`` as the cumulative sum of ``amount`` in order."""

    balance = 0.0
    out: list[NormalizedTransaction] = []
    for txn in transactions:
        balance += txn.amount
        out.append(txn.model_copy(update={"running_balance": balance}))
    return out


def _to_transaction(
    raw: Mapping[str, Any], invoice: XeroInvoice, when: datetime, account: AccountSelector
) -> NormalizedTransaction:
    party = cell_text(invoice.contact.name) if invoice.contact is not None else ""
    doc_number = cell_text(invoice.invoice_number).strip() or cell_text(invoice.reference)
    return NormalizedTransaction(
        date=when.date().isoformat(),
        transaction_type=cell_text(invoice.type),
        doc_number=doc_number,
        party_name=party,
        class_label="",
        contra_account=account.code or "",
        amount=normalize_amount(invoice.sub_total),
        line_items=_raw_line_items(raw),
        source_id=cell_text(invoice.invoice_id) or None,
    )


def select_account_transactions(
    records: Iterable[Any],
    account: AccountSelector,
    window: PeriodWindow,
    *,
    record_types: Iterable[str] = PAYABLE_TYPES,
) -> list[NormalizedTransaction]:
    """Filter raw records down to ``account``'s transactions inside ``window``.

    Output is sorted ascending by record date (ties keep fetch order) and
    carries a freshly computed running balance.
    """

    wanted_types = frozenset(t.strip().upper() for t in record_types)
    start, end = window_bounds(window)

    dated: list[tuple[datetime, NormalizedTransaction]] = []
    for raw in records:
        if not isinstance(raw, Mapping):
            continue
        try:
            invoice = XeroInvoice.model_validate(raw)
        except ValidationError as e:
            _logger.debug("skipping malformed record: %s", e)
            continue
        if cell_text(invoice.type).strip().upper() not in wanted_types:
            continue
        when = parse_record_datetime(invoice.date)
        if when is None or not (start <= when <= end):
            continue
        if not any(_line_matches(item, account) for item in invoice.line_items):
            continue
        dated.append((when, _to_transaction(raw, invoice, when, account)))

    dated.sort(key=lambda pair: pair[0])
    return apply_running_balance(txn for _, txn in dated)


async def reconcile_account_transactions(
    fetch_page: PageFetcher,
    account: AccountSelector,
    window: PeriodWindow,
    *,
    record_types: Iterable[str] = PAYABLE_TYPES,
    statuses: Sequence[str] = DEFAULT_STATUSES,
) -> list[NormalizedTransaction]:
    """Collect every page, then select ``account``'s transactions in ``window``."""

    records = await collect_records(fetch_page, statuses=statuses)
    details = select_account_transactions(records, account, window, record_types=record_types)
    _logger.info(
        "matched %d of %d records to account %s",
        len(details),
        len(records),
        account.code or account.account_id,
    )
    return details


__all__ = [
    "DEFAULT_STATUSES",
    "PAGE_SIZE",
    "PAYABLE_TYPES",
    "PageFetcher",
    "RecordPage",
    "apply_running_balance",
    "collect_records",
    "parse_record_datetime",
    "reconcile_account_transactions",
    "select_account_transactions",
]
