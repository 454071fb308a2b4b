"""Pydantic models for the upstream report and record payloads.

Two shapes arrive from the accounting platforms:

- QuickBooks Online (QBO) reports: a ``Columns`` metadata block plus a
  recursive ``Rows.Row`` tree. QBO serialises one-element arrays as bare
  objects in places, so list-valued fields accept either form.
- Xero reports (``Reports[].Rows`` with ``RowType``/``Title``/``Cells``) and
  flat invoice records. Xero payloads come either straight from the REST API
  (PascalCase keys) or through the SDK (camelCase keys); both spellings are
  accepted.

All models validate in lax mode and keep unknown keys, so upstream schema
additions never break parsing. Fields that are frequently mistyped upstream
(cell values, ids, amounts) are typed ``Any`` and interpreted by the engine.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _nested_rows(value: Any) -> list[Any]:
    # ``Rows`` is ``{"Row": [...]}`` in QBO reports but a bare list in a few
    # report variants (and in every Xero report).
    if isinstance(value, Mapping):
        return _as_list(value.get("Row"))
    if isinstance(value, list):
        return value
    return []


def cell_text(value: Any) -> str:
    """Render a raw cell value as text (``""`` for absent values)."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


# ---------------------------------------------------------------------------
# QuickBooks Online
# ---------------------------------------------------------------------------


class QboCell(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: Any = None
    id: Any = None

    @property
    def text(self) -> str:
        return cell_text(self.value)


class QboColumnMeta(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Any = Field(default=None, alias="Name")
    value: Any = Field(default=None, alias="Value")


class QboColumn(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    col_title: Any = Field(default=None, alias="ColTitle")
    col_type: Any = Field(default=None, alias="ColType")
    metadata: list[QboColumnMeta] = Field(default_factory=list, alias="MetaData")

    @field_validator("metadata", mode="before")
    @classmethod
    def _wrap_metadata(cls, v: Any) -> list[Any]:
        return _as_list(v)


class QboColumns(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    column: list[QboColumn] = Field(default_factory=list, alias="Column")

    @field_validator("column", mode="before")
    @classmethod
    def _wrap_column(cls, v: Any) -> list[Any]:
        return _as_list(v)


class QboCellGroup(BaseModel):
    """A ``Header`` or ``Summary`` block: an ordered list of cells."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    col_data: list[QboCell] = Field(default_factory=list, alias="ColData")

    @field_validator("col_data", mode="before")
    @classmethod
    def _wrap_col_data(cls, v: Any) -> list[Any]:
        return _as_list(v)

    @property
    def label(self) -> str:
        return self.col_data[0].text if self.col_data else ""


class QboRow(BaseModel):
    """One node of a QBO report tree (section, data row or summary holder)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: Any = None
    group: Any = None
    header: QboCellGroup | None = Field(default=None, alias="Header")
    col_data: list[QboCell] = Field(default_factory=list, alias="ColData")
    rows: list[QboRow] = Field(default_factory=list, alias="Rows")
    summary: QboCellGroup | None = Field(default=None, alias="Summary")

    @field_validator("col_data", mode="before")
    @classmethod
    def _wrap_col_data(cls, v: Any) -> list[Any]:
        return _as_list(v)

    @field_validator("rows", mode="before")
    @classmethod
    def _unwrap_rows(cls, v: Any) -> list[Any]:
        return _nested_rows(v)

    @property
    def label(self) -> str | None:
        if self.header is None:
            return None
        return self.header.label

    @property
    def header_id(self) -> str:
        if self.header is None or not self.header.col_data:
            return ""
        return cell_text(self.header.col_data[0].id)

    @property
    def children(self) -> Sequence[QboRow]:
        return self.rows

    @property
    def is_data(self) -> bool:
        return self.type == "Data"


class QboReport(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    header: Any = Field(default=None, alias="Header")
    columns: QboColumns | None = Field(default=None, alias="Columns")
    rows: list[QboRow] = Field(default_factory=list, alias="Rows")

    @field_validator("rows", mode="before")
    @classmethod
    def _unwrap_rows(cls, v: Any) -> list[Any]:
        return _nested_rows(v)


# ---------------------------------------------------------------------------
# Xero
# ---------------------------------------------------------------------------


def _either(pascal: str, camel: str) -> AliasChoices:
    return AliasChoices(pascal, camel)


class XeroCell(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: Any = Field(default=None, validation_alias=_either("Value", "value"))

    @property
    def text(self) -> str:
        return cell_text(self.value)


class XeroRow(BaseModel):
    model_config = ConfigDict(extra="allow")

    row_type: Any = Field(default=None, validation_alias=_either("RowType", "rowType"))
    title: Any = Field(default=None, validation_alias=_either("Title", "title"))
    cells: list[XeroCell] = Field(
        default_factory=list, validation_alias=_either("Cells", "cells")
    )
    rows: list[XeroRow] = Field(default_factory=list, validation_alias=_either("Rows", "rows"))

    @field_validator("cells", mode="before")
    @classmethod
    def _wrap_cells(cls, v: Any) -> list[Any]:
        return _as_list(v)

    @field_validator("rows", mode="before")
    @classmethod
    def _unwrap_rows(cls, v: Any) -> list[Any]:
        return _nested_rows(v)

    @property
    def label(self) -> str | None:
        if self.title is None:
            return None
        return cell_text(self.title)

    @property
    def children(self) -> Sequence[XeroRow]:
        return self.rows

    def cell(self, index: int) -> str:
        if index < len(self.cells):
            return self.cells[index].text
        return ""

    def raw_cell(self, index: int) -> Any:
        if index < len(self.cells):
            return self.cells[index].value
        return None


class XeroReport(BaseModel):
    model_config = ConfigDict(extra="allow")

    report_name: Any = Field(
        default=None, validation_alias=_either("ReportName", "reportName")
    )
    rows: list[XeroRow] = Field(default_factory=list, validation_alias=_either("Rows", "rows"))

    @field_validator("rows", mode="before")
    @classmethod
    def _unwrap_rows(cls, v: Any) -> list[Any]:
        return _nested_rows(v)


class XeroReportEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    reports: list[XeroReport] = Field(
        default_factory=list, validation_alias=_either("Reports", "reports")
    )

    @field_validator("reports", mode="before")
    @classmethod
    def _wrap_reports(cls, v: Any) -> list[Any]:
        return _as_list(v)


class XeroContact(BaseModel):
    model_config = ConfigDict(extra="allow")

    contact_id: Any = Field(default=None, validation_alias=_either("ContactID", "contactID"))
    name: Any = Field(default=None, validation_alias=_either("Name", "name"))


class XeroLineItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    line_item_id: Any = Field(
        default=None, validation_alias=_either("LineItemID", "lineItemID")
    )
    description: Any = Field(default=None, validation_alias=_either("Description", "description"))
    account_code: Any = Field(
        default=None, validation_alias=_either("AccountCode", "accountCode")
    )
    account_id: Any = Field(
        default=None, validation_alias=AliasChoices("AccountID", "accountID", "accountId")
    )
    line_amount: Any = Field(default=None, validation_alias=_either("LineAmount", "lineAmount"))


class XeroInvoice(BaseModel):
    """A flat transactional record (bill or sales invoice)."""

    model_config = ConfigDict(extra="allow")

    invoice_id: Any = Field(default=None, validation_alias=_either("InvoiceID", "invoiceID"))
    type: Any = Field(default=None, validation_alias=_either("Type", "type"))
    status: Any = Field(default=None, validation_alias=_either("Status", "status"))
    date: Any = Field(
        default=None, validation_alias=AliasChoices("Date", "date", "DateString", "dateString")
    )
    invoice_number: Any = Field(
        default=None, validation_alias=_either("InvoiceNumber", "invoiceNumber")
    )
    reference: Any = Field(default=None, validation_alias=_either("Reference", "reference"))
    contact: XeroContact | None = Field(
        default=None, validation_alias=_either("Contact", "contact")
    )
    line_items: list[XeroLineItem] = Field(
        default_factory=list, validation_alias=_either("LineItems", "lineItems")
    )
    sub_total: Any = Field(default=None, validation_alias=_either("SubTotal", "subTotal"))

    @field_validator("line_items", mode="before")
    @classmethod
    def _wrap_line_items(cls, v: Any) -> list[Any]:
        return _as_list(v)


class XeroAccount(BaseModel):
    model_config = ConfigDict(extra="allow")

    account_id: Any = Field(
        default=None, validation_alias=AliasChoices("AccountID", "accountID", "accountId")
    )
    code: Any = Field(default=None, validation_alias=_either("Code", "code"))
    name: Any = Field(default=None, validation_alias=_either("Name", "name"))


__all__ = [
    "QboCell",
    "QboCellGroup",
    "QboColumn",
    "QboColumnMeta",
    "QboColumns",
    "QboReport",
    "QboRow",
    "XeroAccount",
    "XeroCell",
    "XeroContact",
    "XeroInvoice",
    "XeroLineItem",
    "XeroReport",
    "XeroReportEnvelope",
    "XeroRow",
    "cell_text",
]
