import asyncio
from datetime import date, datetime

import pytest

from report_reconciliation.models import AccountSelector, PeriodWindow
from report_reconciliation.pagination import (
    collect_records,
    parse_record_datetime,
    reconcile_account_transactions,
    select_account_transactions,
)
from tests.helpers.reports import xero_bill

JANUARY = PeriodWindow(date(2024, 1, 1), date(2024, 1, 31))
OFFICE = AccountSelector(account_id="acc-400", code="400", name="Office Expenses")


def _mk_fetcher(records, *, page_size=20, fail_on_page=None):
    calls: list[tuple[int, tuple[str, ...]]] = []

    async def fetch_page(page, statuses):
        calls.append((page, tuple(statuses)))
        if page == fail_on_page:
            raise RuntimeError("upstream 503")
        start = (page - 1) * page_size
        return records[start : start + page_size]

    return fetch_page, calls


def test_collect_records_stops_after_short_page():
    records = [xero_bill(str(i), "2024-01-10", 1) for i in range(67)]
    fetch_page, calls = _mk_fetcher(records)

    collected = asyncio.run(collect_records(fetch_page))

    assert len(collected) == 67
    assert [page for page, _ in calls] == [1, 2, 3, 4]
    assert calls[0][1] == ("AUTHORISED", "PAID")


def test_collect_records_exact_multiple_needs_one_empty_page():
    records = [xero_bill(str(i), "2024-01-10", 1) for i in range(40)]
    fetch_page, calls = _mk_fetcher(records)

    assert len(asyncio.run(collect_records(fetch_page))) == 40
    assert len(calls) == 3


def test_collect_records_keeps_pages_fetched_before_a_failure():
    records = [xero_bill(str(i), "2024-01-10", 1) for i in range(60)]
    fetch_page, calls = _mk_fetcher(records, fail_on_page=2)

    collected = asyncio.run(collect_records(fetch_page))

    assert len(collected) == 20
    assert len(calls) == 2


def test_collect_records_accepts_invoice_envelopes():
    async def fetch_page(page, statuses):
        return {"Invoices": [xero_bill("1", "2024-01-10", 5)]} if page == 1 else {}

    assert len(asyncio.run(collect_records(fetch_page))) == 1


def test_running_balance_follows_date_order():
    records = [
        xero_bill("B-3", "2024-01-20", "30.00"),
        xero_bill("B-1", "2024-01-02", "10.00"),
        xero_bill("B-2", "2024-01-11", "60.00"),
    ]
    details = select_account_transactions(records, OFFICE, JANUARY)

    assert [d.doc_number for d in details] == ["B-1", "B-2", "B-3"]
    assert [d.running_balance for d in details] == pytest.approx([10.0, 70.0, 100.0])
    assert all(d.running_balance >= 0 for d in details)


def test_window_is_inclusive_of_both_days():
    records = [
        xero_bill("edge-start", "2024-01-01T00:00:00", 1),
        xero_bill("edge-end", "2024-01-31T23:59:59", 2),
        xero_bill("before", "2023-12-31T23:59:59", 4),
        xero_bill("after", "2024-02-01T00:00:00", 8),
    ]
    details = select_account_transactions(records, OFFICE, JANUARY)
    assert [d.doc_number for d in details] == ["edge-start", "edge-end"]


def test_filters_record_type_and_account():
    records = [
        xero_bill("sale", "2024-01-05", 10, type_="ACCREC"),
        xero_bill("other-account", "2024-01-05", 10, account_code="500", account_id="acc-500"),
        xero_bill("by-code", "2024-01-06", 10, account_id="unrelated"),
        xero_bill("by-id", "2024-01-07", 10, account_code="999"),
        "not a record",
    ]
    details = select_account_transactions(records, OFFICE, JANUARY)
    assert [d.doc_number for d in details] == ["by-code", "by-id"]


def test_transaction_fields_from_bill():
    bill = xero_bill("INV-9", "/Date(1704931200000+0000)/", "-250.50", contact="Acme")
    bill["InvoiceNumber"] = ""
    [txn] = select_account_transactions([bill], OFFICE, JANUARY)

    assert txn.date == "2024-01-11"
    assert txn.transaction_type == "ACCPAY"
    assert txn.doc_number == "ref-INV-9"
    assert txn.party_name == "Acme"
    assert txn.amount == pytest.approx(250.5)
    assert txn.contra_account == "400"
    assert txn.source_id == "inv-INV-9"
    assert txn.line_items == bill["LineItems"]


def test_parse_record_datetime_forms():
    assert parse_record_datetime("2024-01-11") == datetime(2024, 1, 11)
    assert parse_record_datetime("2024-01-11T02:00:00+02:00") == datetime(2024, 1, 11, 0, 0)
    assert parse_record_datetime("/Date(0+0000)/") == datetime(1970, 1, 1)
    assert parse_record_datetime(date(2024, 1, 11)) == datetime(2024, 1, 11)
    assert parse_record_datetime("not a date") is None
    assert parse_record_datetime(None) is None


def test_reconcile_account_transactions_end_to_end():
    records = [xero_bill(f"B-{i}", f"2024-01-{i + 1:02d}", 1) for i in range(25)]
    records.append(xero_bill("Feb", "2024-02-02", 1))
    fetch_page, calls = _mk_fetcher(records)

    details = asyncio.run(reconcile_account_transactions(fetch_page, OFFICE, JANUARY))

    assert len(details) == 25
    assert details[-1].running_balance == pytest.approx(25.0)
    assert len(calls) == 2
