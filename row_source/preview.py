"""
row_source.preview - First rows of a sheet plus column descriptors.

Feeds column-binding tools: each column gets its spreadsheet letter
and, when the sheet has a header row, the header text that ends up in
FieldMapping.column_header.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from openpyxl.utils import get_column_letter

import config
from row_source.loader import load_header, load_rows


@dataclass
class ColumnOption:
    index: int
    letter: str
    header: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.letter} - {self.header}" if self.header else self.letter


@dataclass
class Preview:
    columns: list[ColumnOption] = field(default_factory=list)
    rows: list[dict[int, str]] = field(default_factory=list)


def load_preview(
    path: str | Path,
    sheet_name: Optional[str] = None,
    ignore_header: bool = True,
    max_rows: int = config.PREVIEW_ROWS,
) -> Preview:
    """Never raises; an unreadable sheet yields an empty Preview."""
    rows = load_rows(path, sheet_name, ignore_header, max_rows=max(max_rows, 1))
    headers = load_header(path, sheet_name) if ignore_header else []

    width = max([len(headers)] + [max(r, default=0) for r in rows])
    columns = []
    for col in range(1, width + 1):
        header = headers[col - 1] if col <= len(headers) else ""
        columns.append(ColumnOption(index=col, letter=get_column_letter(col),
                                    header=header or None))
    return Preview(columns=columns, rows=rows)
