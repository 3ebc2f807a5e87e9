"""
row_source.delimited - Low-level CSV / TSV reading and cleaning.

Responsibilities:
  • BOM removal (UTF-8 / UTF-8-SIG)
  • RFC-4180 quoting via the csv module
  • Cell whitespace stripping, 1-based column keys
"""

from __future__ import annotations

import csv
import io
from typing import BinaryIO


def read_rows(
    handle: BinaryIO,
    *,
    ignore_header: bool,
    delimiter: str = ",",
    max_rows: int | None = None,
) -> list[dict[int, str]]:
    """
    Parse a delimited file into rows keyed by 1-based column index.
    Line 1 is skipped when `ignore_header` is set.
    """
    text = _decode(handle.read())
    if not text.strip():
        return []

    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    rows: list[dict[int, str]] = []
    for line_no, values in enumerate(reader, start=1):
        if ignore_header and line_no == 1:
            continue
        if max_rows is not None and len(rows) >= max_rows:
            break
        rows.append({col: val.strip() for col, val in enumerate(values, start=1)})
    return rows


def read_header(handle: BinaryIO, *, delimiter: str = ",") -> list[str]:
    """Return the stripped cells of line 1 (empty list for an empty file)."""
    text = _decode(handle.read())
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    first = next(reader, None)
    return [h.strip() for h in first] if first else []


def _decode(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        # Strip UTF-8 BOM
        if raw.startswith(b"\xef\xbb\xbf"):
            raw = raw[3:]
        return raw.decode("utf-8", errors="replace")
    if raw.startswith("\ufeff"):
        return raw[1:]
    return raw
