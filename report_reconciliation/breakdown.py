"""Ranking of expense line values into category buckets.

Shared by both report formats once their rows are reduced to
``(label, raw value)`` pairs.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .amounts import parse_amount
from .logging_setup import get_logger
from .models import ExpenseCategoryBucket

_logger = get_logger("report_reconciliation.breakdown")

TOP_N = 10
TOTAL_MARKER = "total"


def is_total_label(label: str) -> bool:
    return TOTAL_MARKER in label.casefold()


def rank_buckets(
    entries: Iterable[tuple[str, Any]], *, limit: int = TOP_N
) -> list[ExpenseCategoryBucket]:
    """Turn ``(label, value)`` pairs into the ranked bucket list.

    - Labels containing "total" (any case) are summary rows and are skipped.
    - Only strictly positive numeric values are kept; zero, negative and
      unparsable values are dropped rather than zeroed.
    - ``percentage`` is relative to the sum of every kept value, computed
      before truncation to ``limit`` entries, so the returned percentages need
      not add up to 100.
    """

    kept: list[tuple[str, float]] = []
    for label, raw in entries:
        name = label.strip()
        if not name or is_total_label(name):
            continue
        value = parse_amount(raw)
        if value is None or value <= 0:
            _logger.debug("dropping breakdown row %r with value %r", name, raw)
            continue
        kept.append((name, value))

    total = sum(value for _, value in kept)
    ranked = sorted(kept, key=lambda item: item[1], reverse=True)[:limit]
    return [
        ExpenseCategoryBucket(
            name=name,
            value=value,
            percentage=(value / total) * 100 if total > 0 else 0.0,
        )
        for name, value in ranked
    ]


def share_buckets(entries: Iterable[tuple[str, Any]]) -> list[ExpenseCategoryBucket]:
    """Turn ``(label, value)`` pairs into magnitude buckets, all of them kept.

    Used for cost-of-sales detail. Every numeric value counts as its
    magnitude and an empty value counts as zero; only unparsable values and
    "total" rows are dropped. No truncation is applied.
    """

    kept: list[tuple[str, float]] = []
    for label, raw in entries:
        name = label.strip()
        if not name or is_total_label(name):
            continue
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            value: float | None = 0.0
        else:
            value = parse_amount(raw)
        if value is None:
            _logger.debug("dropping breakdown row %r with value %r", name, raw)
            continue
        kept.append((name, abs(value)))

    total = sum(value for _, value in kept)
    ranked = sorted(kept, key=lambda item: item[1], reverse=True)
    return [
        ExpenseCategoryBucket(
            name=name,
            value=value,
            percentage=(value / total) * 100 if total > 0 else 0.0,
        )
        for name, value in ranked
    ]


__all__ = ["TOP_N", "is_total_label", "rank_buckets", "share_buckets"]
