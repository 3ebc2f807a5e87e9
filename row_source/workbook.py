"""
row_source.workbook - Worksheet reading via openpyxl.

Workbooks are opened read-only with cached formula values, so large
sheets stream instead of being materialised cell-object by cell-object.
"""

from __future__ import annotations

import datetime as dt
from typing import BinaryIO, Optional

import openpyxl


class SheetNotFound(LookupError):
    """Raised when the requested worksheet does not exist."""


def read_rows(
    handle: BinaryIO,
    sheet_name: Optional[str],
    *,
    ignore_header: bool,
    max_rows: int | None = None,
) -> list[dict[int, str]]:
    """
    Return every row of the worksheet as {1-based column: display text}.
    All rows share the sheet's full column width; blank cells are "".
    """
    values = _read_values(handle, sheet_name, ignore_header, max_rows)
    width = max((len(r) for r in values), default=0)
    rows = []
    for raw in values:
        row = {col: "" for col in range(1, width + 1)}
        for col, value in enumerate(raw, start=1):
            row[col] = cell_text(value)
        rows.append(row)
    return rows


def read_header(handle: BinaryIO, sheet_name: Optional[str]) -> list[str]:
    """Display text of row 1."""
    values = _read_values(handle, sheet_name, ignore_header=False, max_rows=1)
    return [cell_text(v) for v in values[0]] if values else []


def sheet_names(handle: BinaryIO) -> list[str]:
    wb = openpyxl.load_workbook(handle, read_only=True, data_only=True)
    try:
        return list(wb.sheetnames)
    finally:
        wb.close()


def cell_text(value) -> str:
    """Render a cached cell value the way Excel would display it, trimmed."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, dt.datetime):
        if value.time() == dt.time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (dt.date, dt.time)):
        return value.isoformat()
    return str(value).strip()


# ── Private helpers ────────────────────────────────────────────────────

def _read_values(handle, sheet_name, ignore_header, max_rows) -> list[tuple]:
    wb = openpyxl.load_workbook(handle, read_only=True, data_only=True)
    try:
        if sheet_name:
            if sheet_name not in wb.sheetnames:
                raise SheetNotFound(sheet_name)
            ws = wb[sheet_name]
        else:
            ws = wb.active

        rows_iter = ws.iter_rows(min_row=2 if ignore_header else 1, values_only=True)
        values = []
        for row in rows_iter:
            if max_rows is not None and len(values) >= max_rows:
                break
            values.append(row)
        return values
    finally:
        wb.close()
