"""Column resolution for QBO detail reports.

QBO detail reports describe each column with ``MetaData`` entries; the entry
named ``ColKey`` says what the column holds (``tx_date``, ``subt_nat_amount_nt``,
...). Resolving fields through those keys keeps extraction correct when QBO
reorders columns. Some report variants ship no metadata at all; only then is
the fixed, documented column order used.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import TypeAlias

from .logging_setup import get_logger
from .payloads import QboCell, QboColumns, cell_text

_logger = get_logger("report_reconciliation.columns")

ColumnKeyMap: TypeAlias = Mapping[str, int]
"""Semantic field name (see :data:`FIELD_BY_COL_KEY`) to zero-based column index."""


COL_KEY_META_NAME = "ColKey"

# QBO ColKey -> canonical NormalizedTransaction field.
FIELD_BY_COL_KEY: Mapping[str, str] = MappingProxyType(
    {
        "tx_date": "date",
        "txn_type": "transaction_type",
        "doc_num": "doc_number",
        "name": "party_name",
        "klass_name": "class_label",
        "memo": "memo",
        "split_acc": "contra_account",
        "subt_nat_amount_nt": "amount",
        "rbal_nat_amount_nt": "running_balance",
    }
)

# Column order of ProfitAndLossDetail when the report omits column metadata.
FIXED_COLUMN_ORDER: ColumnKeyMap = MappingProxyType(
    {
        "date": 0,
        "transaction_type": 1,
        "doc_number": 2,
        "party_name": 3,
        "class_label": 4,
        "memo": 5,
        "contra_account": 6,
        "amount": 7,
        "running_balance": 8,
    }
)


def resolve_columns(columns: QboColumns | None) -> ColumnKeyMap | None:
    """Build a field -> index map from the report's column metadata.

    Returns ``None`` when no column declares a ``ColKey``; callers then fall
    back to :data:`FIXED_COLUMN_ORDER` via :func:`lookup`. Unknown ColKeys are
    kept under their raw key so they remain addressable. When two columns
    declare the same key, the first one wins.
    """

    if columns is None:
        return None

    resolved: dict[str, int] = {}
    for index, column in enumerate(columns.column):
        col_key = ""
        for meta in column.metadata:
            if cell_text(meta.name) == COL_KEY_META_NAME:
                col_key = cell_text(meta.value).strip()
                break
        if not col_key:
            continue
        field = FIELD_BY_COL_KEY.get(col_key, col_key)
        resolved.setdefault(field, index)

    if not resolved:
        return None
    _logger.debug("resolved %d columns from metadata: %s", len(resolved), resolved)
    return MappingProxyType(resolved)


def lookup(cells: Sequence[QboCell], field: str, column_map: ColumnKeyMap | None) -> str:
    """Return the text of ``field`` in ``cells``.

    With a metadata map only the map is consulted (a field missing from the
    map resolves to ``""``); without one the fixed order applies. Missing
    cells also resolve to ``""``.
    """

    index = (column_map if column_map is not None else FIXED_COLUMN_ORDER).get(field)
    if index is None or index >= len(cells):
        return ""
    return cells[index].text


__all__ = [
    "COL_KEY_META_NAME",
    "ColumnKeyMap",
    "FIELD_BY_COL_KEY",
    "FIXED_COLUMN_ORDER",
    "lookup",
    "resolve_columns",
]
