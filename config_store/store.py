"""
config_store.store - Persisted catalog settings (config.json).

Holds the AppConfiguration behind a lock.  Readers get deep-copied
snapshots, so a configuration edit can never be observed half-done by
an engine rebuild or a request reading the prefixes.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional

import config
from row_source import list_sheets, load_preview
from schema import fields as schema_fields
from schema.mapping import AppConfiguration, Prefixes, SheetMapping

logger = logging.getLogger(__name__)

_READ_ERRORS = (OSError, json.JSONDecodeError, TypeError, ValueError, AttributeError)


class ConfigStore:

    def __init__(self, path: str | Path = config.CONFIG_PATH):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._config = AppConfiguration()

    # ── Persistence ────────────────────────────────────────────────────

    def load(self) -> AppConfiguration:
        """
        Read config.json.  A missing or malformed file yields the default
        configuration; it is never an error.
        """
        cfg = self._read_file()
        with self._lock:
            self._config = cfg
        return self.snapshot()

    def save(self) -> bool:
        """Write config.json (indented).  Returns False on I/O failure."""
        with self._lock:
            payload = self._config.to_dict()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error(f"Could not save configuration to {self.path}: {exc}")
            return False
        return True

    def reload(self) -> bool:
        """
        Re-read config.json after an edit on disk.  Unlike load(), an
        unreadable or malformed file keeps the current configuration.
        """
        try:
            cfg = self._parse_file()
        except _READ_ERRORS as exc:
            logger.warning(f"Ignoring unreadable configuration {self.path} ({exc})")
            return False
        with self._lock:
            self._config = cfg
        return True

    def _read_file(self) -> AppConfiguration:
        if not self.path.exists():
            logger.info(f"No configuration at {self.path} - using defaults")
            return AppConfiguration()
        try:
            return self._parse_file()
        except _READ_ERRORS as exc:
            logger.warning(f"Malformed configuration {self.path} ({exc}) - using defaults")
            return AppConfiguration()

    def _parse_file(self) -> AppConfiguration:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("top-level JSON value is not an object")
        return parse_configuration(data)

    # ── Reads ──────────────────────────────────────────────────────────

    def snapshot(self) -> AppConfiguration:
        with self._lock:
            return copy.deepcopy(self._config)

    def prefixes(self) -> Prefixes:
        with self._lock:
            return self._config.prefixes

    # ── Edits ──────────────────────────────────────────────────────────

    def replace(self, cfg: AppConfiguration) -> None:
        cfg = copy.deepcopy(cfg)
        for mapping in cfg.sheet_mappings:
            schema_fields.reconcile(mapping.field_mappings)
        with self._lock:
            self._config = cfg

    def update_prefixes(self, symbol: Optional[str] = None, footprint: Optional[str] = None) -> None:
        with self._lock:
            if symbol is not None:
                self._config.symbol_prefix = symbol.strip()
            if footprint is not None:
                self._config.footprint_prefix = footprint.strip()

    def add_source_file(self, path: str | Path) -> list[SheetMapping]:
        """Register a file and create a default mapping per sheet.  Returns the file's mappings."""
        path = str(Path(path).resolve())
        with self._lock:
            if path not in self._config.source_files:
                self._config.source_files.append(path)
        return self.refresh_sheets(path)

    def remove_source_file(self, path: str | Path) -> None:
        """Forget a file together with every mapping that points at it."""
        key = _path_key(path)
        with self._lock:
            self._config.source_files = [f for f in self._config.source_files
                                         if _path_key(f) != key]
            self._config.sheet_mappings = [m for m in self._config.sheet_mappings
                                           if _path_key(m.source_file) != key]

    def refresh_sheets(self, path: str | Path) -> list[SheetMapping]:
        """
        Sync the mappings of one file with the sheets it currently has:
        vanished sheets lose their mapping, new sheets get a default one,
        surviving mappings keep their label and bindings.
        """
        sheets = list_sheets(path)
        key = _path_key(path)
        with self._lock:
            existing = {m.sheet_name: m for m in self._config.sheet_mappings
                        if _path_key(m.source_file) == key}
            if not sheets and existing:
                # Unreadable right now (mid-save); keep what we have
                return copy.deepcopy(list(existing.values()))

            kept = [m for m in self._config.sheet_mappings
                    if _path_key(m.source_file) != key or m.sheet_name in sheets]
            for sheet in sheets:
                mapping = existing.get(sheet)
                if mapping is None:
                    kept.append(_new_mapping(path, sheet))
                else:
                    mapping.source_file = str(path)
                    schema_fields.reconcile(mapping.field_mappings)
            self._config.sheet_mappings = kept
            return copy.deepcopy([m for m in kept if _path_key(m.source_file) == key])


def parse_configuration(data: dict) -> AppConfiguration:
    """
    Build an AppConfiguration from decoded config.json content.

    Older files carried a single root-level IgnoreHeader; it applies to
    every sheet entry without its own IgnoreHeader.
    """
    cfg = AppConfiguration.from_dict(data)

    legacy_ignore = data.get("IgnoreHeader")
    raw_sheets = [m for m in data.get("SheetMappings") or [] if isinstance(m, dict)]
    if isinstance(legacy_ignore, bool):
        for raw, mapping in zip(raw_sheets, cfg.sheet_mappings):
            if "IgnoreHeader" not in raw:
                mapping.ignore_header = legacy_ignore

    for mapping in cfg.sheet_mappings:
        schema_fields.reconcile(mapping.field_mappings)
    return cfg


def _new_mapping(path: str | Path, sheet: str) -> SheetMapping:
    """Default mapping for a newly seen sheet, bound by header names where possible."""
    mapping = SheetMapping(source_file=str(path), sheet_name=sheet,
                           field_mappings=schema_fields.defaults())
    columns = load_preview(path, sheet, ignore_header=True, max_rows=1).columns
    schema_fields.auto_map(mapping.field_mappings, columns)
    missing = mapping.missing_required()
    if missing:
        logger.info(f"{Path(path).name} [{sheet}]: no column for {', '.join(missing)}")
    return mapping


def _path_key(path: str | Path) -> str:
    return os.path.normcase(str(Path(path).resolve()))
