"""Monthly revenue/expense trend series.

One P&L report is fetched per calendar month, sequentially and in month
order (both platforms rate-limit report endpoints). A month whose fetch fails
becomes a zero point so the series keeps one entry per month.
"""

from __future__ import annotations

import calendar
from collections.abc import Awaitable, Callable, Mapping
from datetime import date
from typing import Any, TypeAlias

from . import qbo, xero
from .logging_setup import get_logger
from .models import PeriodWindow, Platform, TrendPoint
from .periods import month_windows

_logger = get_logger("report_reconciliation.trend")

ReportFetcher: TypeAlias = Callable[[PeriodWindow], Awaitable[Mapping[str, Any] | None]]
"""``await fetch_report(window)`` returns the ProfitAndLoss payload for ``window``."""


def month_label(window: PeriodWindow) -> str:
    return calendar.month_abbr[window.from_date.month].upper()


def _point(
    platform: Platform, window: PeriodWindow, report: Mapping[str, Any] | None
) -> TrendPoint:
    common = {
        "month": month_label(window),
        "from_date": window.from_date.isoformat(),
        "to_date": window.to_date.isoformat(),
    }
    if platform is Platform.QBO:
        summary = qbo.extract_profit_loss_summary(report)
        return TrendPoint(
            **common,
            revenue=summary.revenue,
            expenses=summary.operating_expenses,
            cost_of_goods_sold=summary.cost_of_goods_sold,
            expense_breakdown=qbo.extract_breakdown(report),
            cost_of_goods_sold_breakdown=qbo.extract_cogs_breakdown(report),
        )
    summary = xero.extract_profit_loss_summary(report)
    return TrendPoint(
        **common,
        revenue=summary.revenue,
        expenses=summary.operating_expenses,
        cost_of_goods_sold=summary.cost_of_goods_sold,
        expense_breakdown=xero.extract_breakdown(report),
    )


async def build_monthly_trend(
    fetch_report: ReportFetcher,
    platform: Platform | str,
    from_date: date,
    to_date: date,
) -> list[TrendPoint]:
    """Return one :class:`TrendPoint` per calendar month in ``[from_date, to_date]``."""

    active = Platform.parse(platform)
    points: list[TrendPoint] = []
    for window in month_windows(from_date, to_date):
        try:
            report = await fetch_report(window)
        except Exception as e:  # noqa: BLE001 - a failed month is reported as zeros
            _logger.warning(
                "report fetch for %s failed, using a zero point: %s", window.from_date, e
            )
            points.append(
                TrendPoint(
                    month=month_label(window),
                    from_date=window.from_date.isoformat(),
                    to_date=window.to_date.isoformat(),
                )
            )
            continue
        points.append(_point(active, window, report))

    _logger.info("built %d trend points on %s", len(points), active)
    return points


__all__ = ["ReportFetcher", "build_monthly_trend", "month_label"]
