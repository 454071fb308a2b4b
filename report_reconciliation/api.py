"""Platform-dispatching entry points for the dashboard's request handlers.

Handlers fetch upstream payloads themselves (credentials, tenant ids and
HTTP live outside this package) and hand them to the functions below along
with the active platform. Only routing and response shaping happen here;
the reductions live in :mod:`.qbo`, :mod:`.xero` and :mod:`.pagination`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from . import qbo, xero
from .logging_setup import get_logger
from .models import (
    AccountSelector,
    ExpenseCategoryBucket,
    NormalizedTransaction,
    PeriodWindow,
    Platform,
)
from .pagination import PageFetcher, reconcile_account_transactions

_logger = get_logger("report_reconciliation.api")


class ReconciliationContractError(ValueError):
    """Raised when a caller supplies inputs that no extraction path can use."""


def extract_qbo_category_transactions(
    report: Mapping[str, Any] | None, category_name: str
) -> list[NormalizedTransaction]:
    """Synchronous QBO drill-down (see :func:`.qbo.extract_category_transactions`)."""

    return qbo.extract_category_transactions(report, category_name)


async def extract_category_transactions(
    platform: Platform | str,
    selector: str | AccountSelector,
    *,
    report: Mapping[str, Any] | None = None,
    fetch_page: PageFetcher | None = None,
    accounts: Mapping[str, Any] | Sequence[Any] | None = None,
    window: PeriodWindow | None = None,
) -> list[NormalizedTransaction]:
    """Return the canonical drill-down for one expense category.

    QBO
        ``report`` is a ProfitAndLossDetail payload and ``selector`` the
        category name.
    XERO
        ``fetch_page`` pages through invoices and ``window`` bounds them.
        ``selector`` is an :class:`AccountSelector` or an account name that is
        resolved against ``accounts`` (the chart of accounts).

    Input that does not fit ``platform`` (a QBO request without a report, a
    Xero request without a fetcher or window) is logged and yields ``[]``.

    Raises
    ------
    ReconciliationContractError
        When neither ``report`` nor ``fetch_page`` is given.
    """

    if report is None and fetch_page is None:
        raise ReconciliationContractError(
            "extract_category_transactions needs a report tree or a page fetcher"
        )
    active = Platform.parse(platform)
    _logger.debug("category extraction for %r on %s", selector, active)

    if active is Platform.QBO:
        if report is None:
            _logger.warning("QBO category extraction without a report tree; returning no rows")
            return []
        name = selector.name if isinstance(selector, AccountSelector) else selector
        return qbo.extract_category_transactions(report, name or "")

    if fetch_page is None or window is None:
        _logger.warning(
            "Xero category extraction without a %s; returning no rows",
            "page fetcher" if fetch_page is None else "period window",
        )
        return []

    if isinstance(selector, AccountSelector):
        account = selector
    else:
        account = xero.resolve_account(accounts, selector)
        if account is None:
            return []
    return await reconcile_account_transactions(fetch_page, account, window)


def extract_breakdown(
    report: Mapping[str, Any] | None, platform: Platform | str
) -> list[ExpenseCategoryBucket]:
    """Top-10 expense buckets, descending by value, for the active platform."""

    active = Platform.parse(platform)
    _logger.debug("breakdown extraction on %s", active)
    if active is Platform.QBO:
        return qbo.extract_breakdown(report)
    return xero.extract_breakdown(report)


def build_detail_response(
    expense_name: str, details: Iterable[NormalizedTransaction]
) -> dict[str, Any]:
    """JSON body for the expense drill-down endpoint."""

    return {
        "expenseName": expense_name,
        "details": [txn.model_dump(by_alias=True) for txn in details],
    }


def build_previous_period_response(
    buckets: Iterable[ExpenseCategoryBucket], window: PeriodWindow
) -> dict[str, Any]:
    """JSON body for the previous-period comparison endpoint.

    ``window`` is the period the caller asked about; it is echoed back as
    ``timeframe`` so the UI can label the comparison.
    """

    return {
        "previousPeriodData": [bucket.model_dump(by_alias=True) for bucket in buckets],
        "timeframe": {
            "from": window.from_date.isoformat(),
            "to": window.to_date.isoformat(),
            "type": window.kind.value,
        },
    }


__all__ = [
    "ReconciliationContractError",
    "build_detail_response",
    "build_previous_period_response",
    "extract_breakdown",
    "extract_category_transactions",
    "extract_qbo_category_transactions",
]
