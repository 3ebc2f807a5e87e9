"""
row_source.file_access - Shared-read opening with a temp-copy fallback.

Spreadsheets are usually open in Excel while we read them.  On Windows
that surfaces as PermissionError for a short while after every save,
so opening is retried with a linear backoff; if the file stays locked
it is copied to a temporary file and the copy is read instead.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

import config

logger = logging.getLogger(__name__)


@contextmanager
def open_shared(
    path: str | Path,
    *,
    retries: int = config.LOAD_RETRIES,
    backoff: float = config.RETRY_BACKOFF,
) -> Iterator[BinaryIO]:
    """
    Yield a binary read handle for `path`.

    Raises FileNotFoundError for a missing file and OSError when neither
    the file nor a temporary copy of it can be opened.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(str(path))

    handle = _open_with_retries(path, retries, backoff)
    temp_copy: Path | None = None
    if handle is None:
        temp_copy = _copy_to_temp(path)
        try:
            handle = open(temp_copy, "rb")
        except OSError:
            _discard(temp_copy)
            raise
        logger.info(f"{path.name} is locked, reading temporary copy {temp_copy.name}")

    try:
        yield handle
    finally:
        handle.close()
        if temp_copy is not None:
            _discard(temp_copy)


# ── Private helpers ────────────────────────────────────────────────────

def _open_with_retries(path: Path, retries: int, backoff: float) -> BinaryIO | None:
    for attempt in range(1, max(retries, 1) + 1):
        try:
            return open(path, "rb")
        except FileNotFoundError:
            raise
        except OSError as exc:
            logger.debug(f"Open attempt {attempt} for {path} failed: {exc}")
            if attempt < retries:
                time.sleep(backoff * attempt)
    return None


def _copy_to_temp(path: Path) -> Path:
    fd, temp_name = tempfile.mkstemp(prefix="sheetbridge_", suffix=path.suffix)
    os.close(fd)
    temp_path = Path(temp_name)
    try:
        shutil.copyfile(path, temp_path)
    except OSError:
        _discard(temp_path)
        raise
    return temp_path


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except OSError as exc:
        logger.warning(f"Could not delete temporary copy {path}: {exc}")
