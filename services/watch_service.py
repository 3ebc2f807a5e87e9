"""
services.watch_service - Debounced change detection for source files.

Polls (mtime, size) of every configured source file.  A burst of
changes to the same files (Excel writes temp files, renames, then
touches the target) collapses into a single callback once the files
have been quiet for `debounce` seconds.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Callable, Iterable, Optional

import config
from services import catalog_service

logger = logging.getLogger(__name__)

Signature = Optional[tuple[int, int]]


def file_signature(path: str) -> Signature:
    """(mtime_ns, size), or None when the file is absent."""
    try:
        st = os.stat(path)
    except OSError:
        return None
    return st.st_mtime_ns, st.st_size


class SourceWatcher:

    def __init__(
        self,
        paths_provider: Callable[[], Iterable[str]],
        on_change: Callable[[list[str]], None],
        *,
        interval: float = config.WATCH_INTERVAL,
        debounce: float = config.WATCH_DEBOUNCE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._paths_provider = paths_provider
        self._on_change = on_change
        self._interval = interval
        self._debounce = debounce
        self._clock = clock
        self._signatures: dict[str, Signature] = {}
        self._pending: dict[str, float] = {}        # path → time of last change
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ── Lifecycle ──────────────────────────────────────────────────────

    def start(self) -> None:
        if self._thread is not None:
            return
        self.poll()     # baseline signatures, nothing fires
        self._thread = threading.Thread(target=self._run, name="source-watcher", daemon=True)
        self._thread.start()
        logger.info(f"Watching source files every {self._interval}s")

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self._interval * 2)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.poll()

    # ── Detection ──────────────────────────────────────────────────────

    def poll(self) -> list[str]:
        """
        One detection step.  Returns the paths handed to the callback
        (empty while changes are still settling).
        """
        now = self._clock()
        current = {p: file_signature(p) for p in self._paths_provider()}

        for path, sig in current.items():
            if path not in self._signatures:
                self._signatures[path] = sig
                continue
            if sig != self._signatures[path]:
                self._signatures[path] = sig
                self._pending[path] = now

        for path in list(self._signatures):
            if path not in current:
                del self._signatures[path]
                self._pending.pop(path, None)

        due = [p for p, changed_at in self._pending.items()
               if now - changed_at >= self._debounce]
        if not due:
            return []
        for path in due:
            del self._pending[path]

        try:
            self._on_change(due)
        except Exception as exc:
            # The next change to the file retries
            logger.error(f"Reload after change to {due} failed: {exc}")
        return due

    def acknowledge(self, path: str) -> None:
        """Take the current state of `path` as the baseline, so our own write never fires."""
        self._signatures[path] = file_signature(path)
        self._pending.pop(path, None)


def watched_paths(store) -> list[str]:
    """The configured source files plus config.json itself."""
    return [*store.snapshot().source_files, str(store.path)]


def refresh_and_reload(
    paths: list[str],
    on_saved: Optional[Callable[[str], None]] = None,
) -> None:
    """
    Default watcher callback.

    A changed config.json is re-read first (mapping, file and prefix edits
    made by hand).  Changed source files get their sheet lists resynced and
    the result is saved.  The catalog is rebuilt in every case.
    """
    store = catalog_service.get_store()
    config_key = os.path.normcase(os.path.abspath(store.path))
    sources = [p for p in paths if os.path.normcase(os.path.abspath(p)) != config_key]

    if len(sources) < len(paths):
        logger.info(f"Configuration {store.path} changed - reloading it")
        store.reload()

    if sources:
        for path in sources:
            if os.path.exists(path):
                store.refresh_sheets(path)
            else:
                logger.warning(f"Source file disappeared: {path}")
        if store.save() and on_saved is not None:
            on_saved(str(store.path))

    catalog_service.reload_catalog()


def start_watcher(store) -> SourceWatcher:
    watcher = SourceWatcher(lambda: watched_paths(store),
                            lambda paths: refresh_and_reload(paths, watcher.acknowledge))
    watcher.start()
    return watcher
