"""Canonical models returned by the reconciliation engine.

Outputs are frozen pydantic models that serialise with camelCase aliases so
callers can return ``model_dump(by_alias=True)`` directly as a JSON body.
Selection inputs (platform, period window, account selector) are small
frozen dataclasses and enums.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Selection inputs
# ---------------------------------------------------------------------------


class Platform(StrEnum):
    """The active upstream accounting platform."""

    QBO = "QBO"
    XERO = "XERO"

    @classmethod
    def parse(cls, value: str | Platform) -> Platform:
        """Parse a caller-supplied discriminator, ignoring case and whitespace."""

        if isinstance(value, Platform):
            return value
        key = str(value).strip().upper()
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unknown platform: {value!r}") from None


class PeriodKind(StrEnum):
    MONTH = "MONTH"
    YEAR = "YEAR"
    CUSTOM = "CUSTOM"
    TRAILING_12 = "TRAILING_12"


@dataclass(frozen=True, slots=True)
class PeriodWindow:
    """An inclusive reporting window ``[from_date, to_date]``.

    ``kind`` records how the caller picked the window; it only matters when
    deriving a comparison window (see :func:`report_reconciliation.periods.previous_period`).
    """

    from_date: dt.date
    to_date: dt.date
    kind: PeriodKind = PeriodKind.CUSTOM

    def __post_init__(self) -> None:
        if self.from_date > self.to_date:
            raise ValueError(
                f"PeriodWindow.from_date {self.from_date} is after to_date {self.to_date}"
            )
        # Accept plain strings for kind ("month", "YEAR") from callers.
        if not isinstance(self.kind, PeriodKind):
            object.__setattr__(self, "kind", PeriodKind(str(self.kind).strip().upper()))


@dataclass(frozen=True, slots=True)
class AccountSelector:
    """Identifies one ledger account by id and/or code."""

    account_id: str | None = None
    code: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if not (self.account_id or self.code):
            raise ValueError("AccountSelector requires an account_id or a code")


# ---------------------------------------------------------------------------
# Canonical outputs
# ---------------------------------------------------------------------------


class _CanonicalModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class NormalizedTransaction(_CanonicalModel):
    """One transaction in the canonical drill-down shape.

    ``amount`` and ``running_balance`` are magnitudes. ``line_items`` carries
    the upstream line payloads verbatim when the source record had them.
    """

    date: str = ""
    transaction_type: str = ""
    doc_number: str = ""
    party_name: str = ""
    class_label: str = ""
    memo: str = ""
    contra_account: str = ""
    amount: float = Field(default=0.0, ge=0)
    running_balance: float = Field(default=0.0, ge=0)
    line_items: list[dict[str, Any]] | None = None
    source_id: str | None = None


class ExpenseCategoryBucket(_CanonicalModel):
    name: str
    value: float = Field(ge=0)
    percentage: float


class ProfitLossSummary(_CanonicalModel):
    """Headline P&L figures for one period.

    ``revenue``, ``operating_expenses`` and ``cost_of_goods_sold`` are
    magnitudes; ``net_profit`` keeps its sign.
    """

    revenue: float = 0.0
    operating_expenses: float = 0.0
    cost_of_goods_sold: float = 0.0
    net_profit: float = 0.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def net_margin(self) -> float:
        """Net profit as a percentage of revenue (0 without revenue)."""
        return (self.net_profit / self.revenue) * 100 if self.revenue > 0 else 0.0


class CashMovements(_CanonicalModel):
    cash_in: float = 0.0
    cash_out: float = 0.0


class TrendPoint(_CanonicalModel):
    """One month of the revenue/expense trend series."""

    month: str
    from_date: str
    to_date: str
    revenue: float = 0.0
    expenses: float = 0.0
    cost_of_goods_sold: float = 0.0
    expense_breakdown: list[ExpenseCategoryBucket] = Field(default_factory=list)
    cost_of_goods_sold_breakdown: list[ExpenseCategoryBucket] = Field(default_factory=list)


__all__ = [
    "AccountSelector",
    "CashMovements",
    "ExpenseCategoryBucket",
    "NormalizedTransaction",
    "PeriodKind",
    "PeriodWindow",
    "Platform",
    "ProfitLossSummary",
    "TrendPoint",
]
