"""Public interface for the ``report_reconciliation`` package.

This module exposes the package's API functions and public models as the
stable import surface. There is no runtime logic here, only re-exports.
"""

from .amounts import normalize_amount, parse_amount
from .api import (
    ReconciliationContractError,
    build_detail_response,
    build_previous_period_response,
    extract_breakdown,
    extract_category_transactions,
    extract_qbo_category_transactions,
)
from .columns import ColumnKeyMap, resolve_columns
from .models import (
    AccountSelector,
    CashMovements,
    ExpenseCategoryBucket,
    NormalizedTransaction,
    PeriodKind,
    PeriodWindow,
    Platform,
    ProfitLossSummary,
    TrendPoint,
)
from .pagination import PageFetcher, collect_records, reconcile_account_transactions
from .periods import month_windows, previous_period, window_bounds
from .trend import ReportFetcher, build_monthly_trend

__all__ = [
    # API
    "build_detail_response",
    "build_monthly_trend",
    "build_previous_period_response",
    "collect_records",
    "extract_breakdown",
    "extract_category_transactions",
    "extract_qbo_category_transactions",
    "month_windows",
    "normalize_amount",
    "parse_amount",
    "previous_period",
    "reconcile_account_transactions",
    "resolve_columns",
    "window_bounds",
    # Models / types
    "AccountSelector",
    "CashMovements",
    "ColumnKeyMap",
    "ExpenseCategoryBucket",
    "NormalizedTransaction",
    "PageFetcher",
    "PeriodKind",
    "PeriodWindow",
    "Platform",
    "ProfitLossSummary",
    "ReconciliationContractError",
    "ReportFetcher",
    "TrendPoint",
]
