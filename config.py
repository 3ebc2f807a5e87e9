"""
SheetBridge - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.  The per-user catalog settings
(source files, sheet mappings, prefixes, port) are persisted separately
by config_store.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR    = Path(__file__).resolve().parent
CONFIG_PATH = Path(os.environ.get("SHEETBRIDGE_CONFIG",
                                  Path.home() / ".sheetbridge" / "config.json"))

# ── Server ─────────────────────────────────────────────────────────────
HOST     = os.environ.get("SHEETBRIDGE_HOST", "127.0.0.1")
# Empty means "use ServerPort from the persisted configuration"
PORT     = os.environ.get("SHEETBRIDGE_PORT", "")
API_ROOT = os.environ.get("SHEETBRIDGE_API_ROOT", "kicad-api").strip("/")
DEBUG    = os.environ.get("SHEETBRIDGE_DEBUG", "0") == "1"

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("SHEETBRIDGE_LOG_LEVEL", "INFO").upper()

# ── Catalog defaults (used when no config file exists) ────────────────
DEFAULT_SYMBOL_PREFIX    = "symbol"
DEFAULT_FOOTPRINT_PREFIX = "footprint"
DEFAULT_SERVER_PORT      = 8088

# ── Spreadsheet loading ────────────────────────────────────────────────
LOAD_RETRIES  = 3        # shared-read attempts before the temp-copy fallback
RETRY_BACKOFF = 0.15     # seconds, multiplied by the attempt number
PREVIEW_ROWS  = 20

# ── Change detection ───────────────────────────────────────────────────
WATCH_ENABLED  = os.environ.get("SHEETBRIDGE_WATCH", "1") == "1"
WATCH_INTERVAL = 1.0     # seconds between polls
WATCH_DEBOUNCE = 0.5     # quiet period before a reload fires
