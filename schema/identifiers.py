"""
schema.identifiers - Slugs, part-id composition and prefix handling.

Format:  <category-slug>:<part-slug>
         both halves lowercase [a-z0-9] runs joined by single hyphens.
"""

from __future__ import annotations

import re

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(text: str | None) -> str:
    """
    Lowercase, collapse every run of non [a-z0-9] characters into a
    single hyphen and trim hyphens from both ends.  Idempotent.
    """
    if not text:
        return ""
    return _NON_SLUG.sub("-", text.lower()).strip("-")


def compose_part_id(library: str, raw_id: str) -> str:
    """Join a category slug and a part slug; a blank library yields the bare id."""
    lib = (library or "").strip()
    pid = (raw_id or "").strip()
    return pid if not lib else f"{lib}:{pid}"


def split_part_id(part_id: str) -> tuple[str, str]:
    """
    Split 'library:raw_id' on the first colon.
    Without a usable separator (absent, leading or trailing) the whole
    string is returned as both halves.
    """
    trimmed = (part_id or "").strip()
    idx = trimmed.find(":")
    if idx <= 0 or idx >= len(trimmed) - 1:
        return trimmed, trimmed
    return trimmed[:idx], trimmed[idx + 1:]


def apply_prefix(prefix: str, value: str) -> str:
    """Return '<prefix>:<value>' when both are non-blank, else the value as-is."""
    value = (value or "").strip()
    prefix = (prefix or "").strip()
    if not value:
        return ""
    if not prefix:
        return value
    return f"{prefix}:{value}"
