"""
services.catalog_service - Current-engine holder.

Requests call get_catalog() once and keep using that instance; a
reload builds a complete new CatalogEngine from a fresh configuration
snapshot and only then swaps the reference, so no request ever sees a
half-built catalog.
"""

from __future__ import annotations

import logging
import threading

from catalog import CatalogEngine
from config_store import ConfigStore

logger = logging.getLogger(__name__)

_store: ConfigStore | None = None
_engine: CatalogEngine | None = None
_reload_lock = threading.Lock()


def init_catalog(store: ConfigStore) -> CatalogEngine:
    """Bind the configuration store and build the first engine."""
    global _store
    _store = store
    return reload_catalog()


def reload_catalog() -> CatalogEngine:
    """Rebuild from the store's current configuration and swap it in."""
    global _engine
    store = get_store()
    # Serialise rebuilds so an older snapshot cannot overwrite a newer one
    with _reload_lock:
        snapshot = store.snapshot()
        engine = CatalogEngine(snapshot.source_files, snapshot.sheet_mappings)
        _engine = engine
    stats = engine.stats()
    logger.info(f"Catalog loaded: {stats['categories']} categories from "
                f"{stats['sheets']} sheets ({stats['rows']} rows)")
    return engine


def get_catalog() -> CatalogEngine:
    """Return the engine currently being served."""
    if _engine is None:
        raise RuntimeError("Catalog not initialised - call init_catalog() first")
    return _engine


def get_store() -> ConfigStore:
    if _store is None:
        raise RuntimeError("Catalog not initialised - call init_catalog() first")
    return _store
