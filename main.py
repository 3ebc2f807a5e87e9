#!/usr/bin/env python3
"""
SheetBridge - KiCad HTTP parts library served from spreadsheets
===============================================================

Single-command run:  python main.py

See config.py for all environment-variable tunables; the catalog
itself (source files, sheet mappings, prefixes, port) lives in the
JSON file at config.CONFIG_PATH.
"""

from __future__ import annotations

import logging

from flask import Flask

import config
from api import kicad_bp
from config_store import ConfigStore
from services.catalog_service import init_catalog


def create_app(store: ConfigStore | None = None) -> Flask:
    """Flask application factory."""

    app = Flask(__name__)
    # KiCad payloads are emitted in their documented key order
    app.json.sort_keys = False

    # ── Load configuration + first catalog ──────────────────────────
    if store is None:
        store = ConfigStore(config.CONFIG_PATH)
        store.load()
    engine = init_catalog(store)
    stats = engine.stats()
    print(f"  Catalog: {stats['categories']} categories, "
          f"{stats['sheets']} sheets, {stats['rows']} rows")

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(kicad_bp)

    return app


def _server_port(store: ConfigStore) -> int:
    if config.PORT:
        return int(config.PORT)
    return store.snapshot().server_port


def main():
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    print("=" * 56)
    print("  SheetBridge - KiCad HTTP library from spreadsheets")
    print("=" * 56)

    store = ConfigStore(config.CONFIG_PATH)
    store.load()
    print(f"  Config: {store.path}")

    app = create_app(store)

    if config.WATCH_ENABLED:
        from services.watch_service import start_watcher
        start_watcher(store)

    port = _server_port(store)
    print(f"\n  http://{config.HOST}:{port}/{config.API_ROOT}/v1/")
    print("=" * 56)

    # Reloader off: a second process would run a second watcher
    app.run(host=config.HOST, port=port, debug=config.DEBUG, use_reloader=False)


if __name__ == "__main__":
    main()
