"""Numeric normalization for report cell values.

Both upstream platforms deliver amounts as locale-formatted strings
(``"1,234.56"``), occasionally as JSON numbers, and sometimes not at all.
Debit/credit is carried by row semantics rather than sign, so every helper
here returns magnitudes.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any


def parse_amount(raw: Any) -> float | None:
    """Parse ``raw`` into a signed float, or ``None`` when it is not numeric.

    Grouping commas, a leading currency symbol and accounting-style
    parentheses are tolerated. Booleans are not numbers here.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None
    if not isinstance(raw, str):
        return None

    s = raw.strip()
    negative = False
    if s.startswith("(") and s.endswith(")") and len(s) >= 2:
        negative = True
        s = s[1:-1].strip()
    if s.startswith("-"):
        negative = not negative
        s = s[1:].lstrip()
    elif s.startswith("+"):
        s = s[1:].lstrip()
    if s.startswith("$"):
        s = s[1:].lstrip()

    s = s.replace(",", "")
    if not s:
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    if not d.is_finite():
        return None
    value = float(d)
    return -value if negative else value


def normalize_amount(raw: Any) -> float:
    """Return the magnitude of ``raw``; anything unparsable becomes ``0.0``."""

    value = parse_amount(raw)
    if value is None:
        return 0.0
    return abs(value)


__all__ = ["normalize_amount", "parse_amount"]
