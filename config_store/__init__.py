"""
config_store - Load / save the user's catalog configuration.

Public API:
    ConfigStore(path).load() / save() / snapshot() / prefixes()
    parse_configuration(data) → AppConfiguration
"""

from config_store.store import ConfigStore, parse_configuration   # noqa: F401
