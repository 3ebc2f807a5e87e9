"""
row_source.loader - Extension-based dispatch to the concrete readers.

Failures of any kind (missing file, lock that outlives the temp-copy
fallback, corrupt workbook, missing sheet) are logged and produce an
empty result: one unreadable sheet must never take the catalog down.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from row_source import delimited, workbook
from row_source.file_access import open_shared

logger = logging.getLogger(__name__)

WORKBOOK_SUFFIXES = frozenset({".xlsx", ".xlsm"})
DELIMITERS = {".csv": ",", ".txt": ",", ".tsv": "\t"}


def kind_of(path: str | Path) -> Optional[str]:
    """'workbook', 'delimited' or None for unsupported files."""
    suffix = Path(path).suffix.lower()
    if suffix in WORKBOOK_SUFFIXES:
        return "workbook"
    if suffix in DELIMITERS:
        return "delimited"
    return None


def load_rows(
    path: str | Path,
    sheet_name: Optional[str] = None,
    ignore_header: bool = True,
    *,
    max_rows: int | None = None,
) -> list[dict[int, str]]:
    """
    Read one sheet into an ordered list of rows ({1-based column: text}).
    Returns [] on any error.
    """
    kind = kind_of(path)
    if kind is None:
        logger.warning(f"Unsupported source file type: {path}")
        return []

    try:
        with open_shared(path) as fh:
            if kind == "workbook":
                return workbook.read_rows(fh, sheet_name, ignore_header=ignore_header,
                                          max_rows=max_rows)
            return delimited.read_rows(fh, ignore_header=ignore_header,
                                       delimiter=_delimiter(path), max_rows=max_rows)
    except workbook.SheetNotFound:
        logger.warning(f"Sheet {sheet_name!r} not found in {path}")
    except Exception as exc:
        logger.warning(f"Could not read {path} [{sheet_name}]: {exc}")
    return []


def load_header(path: str | Path, sheet_name: Optional[str] = None) -> list[str]:
    """Row / line 1 of a sheet as text, [] on any error."""
    kind = kind_of(path)
    if kind is None:
        return []
    try:
        with open_shared(path) as fh:
            if kind == "workbook":
                return workbook.read_header(fh, sheet_name)
            return delimited.read_header(fh, delimiter=_delimiter(path))
    except Exception as exc:
        logger.warning(f"Could not read header of {path} [{sheet_name}]: {exc}")
    return []


def list_sheets(path: str | Path) -> list[str]:
    """
    Worksheet names of a workbook; a delimited file is a single sheet
    named after the file stem.
    """
    kind = kind_of(path)
    if kind == "delimited":
        return [Path(path).stem]
    if kind is None:
        return []
    try:
        with open_shared(path) as fh:
            return workbook.sheet_names(fh)
    except Exception as exc:
        logger.warning(f"Could not list sheets of {path}: {exc}")
    return []


def _delimiter(path: str | Path) -> str:
    return DELIMITERS.get(Path(path).suffix.lower(), ",")
