"""
schema.mapping - Sheet mappings and the persisted application configuration.

A SheetMapping binds one logical table (a worksheet, or a whole
delimited file) to a category label and a list of FieldMappings.
The JSON key names match the on-disk config.json format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Optional

import config
from schema import fields as schema_fields
from schema.fields import FieldMapping


class Prefixes(NamedTuple):
    """One consistent read of the symbol / footprint prefix settings."""
    symbol: str = ""
    footprint: str = ""


@dataclass
class SheetMapping:
    source_file: str = ""
    sheet_name: str = ""
    category_label: str = ""
    ignore_header: bool = True
    field_mappings: list[FieldMapping] = field(default_factory=list)

    def find_field(self, name: str) -> Optional[FieldMapping]:
        return schema_fields.find(self.field_mappings, name)

    def column_for(self, name: str) -> Optional[int]:
        """Bound column index for a field, or None."""
        fm = self.find_field(name)
        if fm is None or not fm.is_bound:
            return None
        return fm.column_index

    def split_fields(self) -> list[FieldMapping]:
        """Bound split fields, in declaration order."""
        return [fm for fm in self.field_mappings if fm.split and fm.is_bound]

    def missing_required(self) -> list[str]:
        return schema_fields.missing_required(self.field_mappings)

    # ── Serialisation ──────────────────────────────────────────────────
    def to_dict(self) -> dict:
        return {
            "SourceFile": self.source_file,
            "SheetName": self.sheet_name,
            "CategoryLabel": self.category_label,
            "IgnoreHeader": self.ignore_header,
            "FieldMappings": [fm.to_dict() for fm in self.field_mappings],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SheetMapping":
        raw_fields = data.get("FieldMappings")
        if raw_fields is None:
            field_mappings = schema_fields.defaults()
        else:
            field_mappings = _unique_fields(
                FieldMapping.from_dict(f) for f in raw_fields if isinstance(f, dict)
            )
        return cls(
            source_file=str(data.get("SourceFile") or ""),
            sheet_name=str(data.get("SheetName") or ""),
            category_label=str(data.get("CategoryLabel") or ""),
            ignore_header=bool(data.get("IgnoreHeader", True)),
            field_mappings=field_mappings,
        )


def _unique_fields(candidates) -> list[FieldMapping]:
    """Drop nameless entries and later duplicates (names compare case-insensitively)."""
    seen: set[str] = set()
    result = []
    for fm in candidates:
        key = fm.field_name.lower()
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(fm)
    return result


@dataclass
class AppConfiguration:
    source_files: list[str] = field(default_factory=list)
    sheet_mappings: list[SheetMapping] = field(default_factory=list)
    symbol_prefix: str = config.DEFAULT_SYMBOL_PREFIX
    footprint_prefix: str = config.DEFAULT_FOOTPRINT_PREFIX
    server_port: int = config.DEFAULT_SERVER_PORT

    @property
    def prefixes(self) -> Prefixes:
        return Prefixes(self.symbol_prefix, self.footprint_prefix)

    def to_dict(self) -> dict:
        return {
            "SourceFiles": list(self.source_files),
            "SheetMappings": [m.to_dict() for m in self.sheet_mappings],
            "SymbolPrefix": self.symbol_prefix,
            "FootprintPrefix": self.footprint_prefix,
            "ServerPort": self.server_port,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfiguration":
        files: list[str] = []
        for f in data.get("SourceFiles") or []:
            if isinstance(f, str) and f.strip() and f not in files:
                files.append(f)
        return cls(
            source_files=files,
            sheet_mappings=[SheetMapping.from_dict(m)
                            for m in data.get("SheetMappings") or []
                            if isinstance(m, dict)],
            symbol_prefix=str(data.get("SymbolPrefix", config.DEFAULT_SYMBOL_PREFIX) or "").strip(),
            footprint_prefix=str(data.get("FootprintPrefix", config.DEFAULT_FOOTPRINT_PREFIX) or "").strip(),
            server_port=int(data.get("ServerPort") or config.DEFAULT_SERVER_PORT),
        )
