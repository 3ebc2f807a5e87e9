"""
services - Glue between the HTTP layer, the configuration store and the engine.
"""

from services.catalog_service import (       # noqa: F401
    init_catalog,
    reload_catalog,
    get_catalog,
    get_store,
)
