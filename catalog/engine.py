"""
catalog.engine - The catalog resolution engine.

A CatalogEngine is built from one configuration snapshot: it loads
every reachable sheet once, derives the category list and then only
answers queries.  Nothing is mutated after __init__, so one instance
can serve concurrent requests without locking; reconfiguration builds
a new engine (see services.catalog_service).

Query methods are total: unknown ids give [] / None, never an error.
"""

from __future__ import annotations

import copy
import logging
import os
from typing import Callable, Iterable, Iterator, Optional

from catalog.categories import CategoryInfo, derive_categories
from catalog.payloads import CategorySummary, FieldValue, PartDetail, PartSummary
from row_source import load_rows
from schema.fields import (
    DESCRIPTION_FIELD, FOOTPRINT_FIELD, ID_FIELD, PART_NUMBER_FIELD, SYMBOL_FIELD,
)
from schema.identifiers import apply_prefix, compose_part_id, slugify, split_part_id
from schema.mapping import Prefixes, SheetMapping

logger = logging.getLogger(__name__)

Row = dict[int, str]
RowLoader = Callable[[str, Optional[str], bool], list[Row]]

# Surfaced as top-level attributes of a part, not inside "fields"
_DEDICATED_FIELDS = frozenset(f.lower() for f in (PART_NUMBER_FIELD, ID_FIELD, SYMBOL_FIELD))


def normalize_path(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))


class CatalogEngine:

    def __init__(
        self,
        source_files: Iterable[str],
        sheet_mappings: Iterable[SheetMapping],
        row_loader: RowLoader = load_rows,
    ):
        self._source_files = frozenset(normalize_path(f) for f in source_files if f)
        self._mappings: tuple[SheetMapping, ...] = tuple(copy.deepcopy(list(sheet_mappings)))
        self._tables: dict[tuple[str, str], tuple[Row, ...]] = {}

        self._load(row_loader)
        reachable = [m for m in self._mappings if self._key(m)[0] in self._source_files]
        for mapping in reachable:
            missing = mapping.missing_required()
            if mapping.category_label.strip() and missing:
                logger.warning(f"{mapping.category_label!r} ({mapping.sheet_name}) has no column "
                               f"for required field(s): {', '.join(missing)}")
        self._categories: tuple[CategoryInfo, ...] = tuple(
            derive_categories(reachable, self._rows_for)
        )
        self._by_id = {c.id: c for c in self._categories}

    # ── Loading ────────────────────────────────────────────────────────

    def _load(self, row_loader: RowLoader) -> None:
        for mapping in self._mappings:
            key = self._key(mapping)
            if key[0] not in self._source_files:
                continue
            if key in self._tables:
                # Several mappings may share one physical sheet
                continue
            try:
                rows = row_loader(mapping.source_file, mapping.sheet_name or None,
                                  mapping.ignore_header)
            except Exception as exc:
                logger.warning(f"Loading {mapping.source_file} [{mapping.sheet_name}] failed: {exc}")
                rows = []
            self._tables[key] = tuple(rows)

    @staticmethod
    def _key(mapping: SheetMapping) -> tuple[str, str]:
        return normalize_path(mapping.source_file or ""), mapping.sheet_name or ""

    def _rows_for(self, mapping: SheetMapping) -> tuple[Row, ...]:
        return self._tables.get(self._key(mapping), ())

    # ── Queries ────────────────────────────────────────────────────────

    def categories(self) -> list[CategorySummary]:
        return [CategorySummary(id=c.id, name=c.name) for c in self._categories]

    def find_category(self, category_id: Optional[str]) -> Optional[CategoryInfo]:
        return self._by_id.get((category_id or "").strip().lower())

    def parts_for_category(
        self,
        category_id: Optional[str],
        prefixes: Prefixes = Prefixes(),
    ) -> list[PartSummary]:
        category = self.find_category(category_id)
        if category is None:
            return []

        mapping = category.mapping
        parts = []
        for row, part_slug in self._candidate_rows(category):
            parts.append(PartSummary(
                id=compose_part_id(category.id, part_slug),
                name=self._value(mapping, row, PART_NUMBER_FIELD) or part_slug,
                description=self._value(mapping, row, DESCRIPTION_FIELD),
                symbol_id_str=apply_prefix(prefixes.symbol,
                                           self._value(mapping, row, SYMBOL_FIELD)),
            ))
        return parts

    def part_details(
        self,
        part_id: Optional[str],
        prefixes: Prefixes = Prefixes(),
    ) -> Optional[PartDetail]:
        library, raw_id = split_part_id(part_id or "")
        category = self.find_category(library)
        if category is None:
            return None

        wanted = raw_id.strip().lower()
        mapping = category.mapping
        for row, part_slug in self._candidate_rows(category):
            if part_slug != wanted:
                continue
            return PartDetail(
                id=compose_part_id(category.id, part_slug),
                name=self._value(mapping, row, PART_NUMBER_FIELD) or part_slug,
                symbol_id_str=apply_prefix(prefixes.symbol,
                                           self._value(mapping, row, SYMBOL_FIELD)),
                fields=self._field_payload(mapping, row, prefixes),
            )
        return None

    def stats(self) -> dict:
        return {
            "sheets": len(self._tables),
            "rows": sum(len(t) for t in self._tables.values()),
            "categories": len(self._categories),
        }

    # ── Private helpers ────────────────────────────────────────────────

    def _candidate_rows(self, category: CategoryInfo) -> Iterator[tuple[Row, str]]:
        """Rows of the category that pass its filters and carry a usable ID."""
        id_column = category.mapping.column_for(ID_FIELD)
        if id_column is None:
            return
        for row in self._rows_for(category.mapping):
            if not category.matches(row):
                continue
            part_slug = slugify(row.get(id_column, ""))
            if not part_slug:
                continue
            yield row, part_slug

    @staticmethod
    def _value(mapping: SheetMapping, row: Row, field_name: str) -> str:
        col = mapping.column_for(field_name)
        return row.get(col, "") if col else ""

    @staticmethod
    def _field_payload(mapping: SheetMapping, row: Row, prefixes: Prefixes) -> dict[str, FieldValue]:
        payload: dict[str, FieldValue] = {}
        for fm in mapping.field_mappings:
            if not fm.is_bound or fm.field_name.lower() in _DEDICATED_FIELDS:
                continue
            value = row.get(fm.column_index, "")
            if fm.field_name.lower() == FOOTPRINT_FIELD.lower():
                value = apply_prefix(prefixes.footprint, value)
            payload[fm.field_name] = FieldValue(value=value, visible=fm.visible)
        return payload
