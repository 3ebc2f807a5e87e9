"""
row_source - Spreadsheet rows for the catalog engine.

Public API:
    load_rows(path, sheet_name, ignore_header) → list[{column: text}]
    list_sheets(path)                          → list[str]
    load_preview(path, sheet_name, …)          → Preview
"""

from row_source.loader import load_rows, load_header, list_sheets, kind_of   # noqa: F401
from row_source.preview import load_preview, Preview, ColumnOption          # noqa: F401
