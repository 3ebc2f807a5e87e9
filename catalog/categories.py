"""
catalog.categories - Category derivation from sheet mappings.

One category per labelled sheet, or, when the sheet has bound split
fields, one per distinct combination of split values seen in its rows.
Ids are slugs, made unique in configuration order with -2, -3, …
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable

from schema.identifiers import slugify
from schema.mapping import SheetMapping

FALLBACK_SLUG = "category"

Rows = list[dict[int, str]]


@dataclass(frozen=True)
class CategoryInfo:
    id: str
    name: str
    mapping: SheetMapping = field(compare=False, repr=False)
    filters: dict[str, str] = field(default_factory=dict, compare=False)

    def matches(self, row: dict[int, str]) -> bool:
        """True when the row satisfies every split filter (case-insensitive)."""
        for field_name, expected in self.filters.items():
            col = self.mapping.column_for(field_name)
            actual = row.get(col, "") if col else ""
            if actual.lower() != expected.lower():
                return False
        return True


class SlugAllocator:
    """Hands out slugs, suffixing -2, -3, … on collision."""

    def __init__(self):
        self._used: set[str] = set()

    def allocate(self, name: str) -> str:
        base = slugify(name) or FALLBACK_SLUG
        candidate = base
        n = 2
        while candidate in self._used:
            candidate = f"{base}-{n}"
            n += 1
        self._used.add(candidate)
        return candidate


def derive_categories(
    mappings: Iterable[SheetMapping],
    rows_for: Callable[[SheetMapping], Rows],
) -> list[CategoryInfo]:
    """
    Build the ordered category list.

    `rows_for` returns the loaded rows of a mapping's sheet ([] when the
    sheet was not loaded).
    """
    slugs = SlugAllocator()
    categories: list[CategoryInfo] = []

    for mapping in mappings:
        label = (mapping.category_label or "").strip()
        if not label:
            continue

        split_fields = mapping.split_fields()
        if not split_fields:
            categories.append(CategoryInfo(id=slugs.allocate(label), name=label,
                                           mapping=mapping))
            continue

        for values in distinct_split_values(rows_for(mapping), split_fields):
            name = split_name(label, values)
            filters = {fm.field_name: v for fm, v in zip(split_fields, values)}
            categories.append(CategoryInfo(id=slugs.allocate(name), name=name,
                                           mapping=mapping, filters=filters))
    return categories


def distinct_split_values(rows: Rows, split_fields) -> list[tuple[str, ...]]:
    """Value tuples in first-seen order; case variants count as one."""
    seen: set[tuple[str, ...]] = set()
    result = []
    for row in rows:
        values = tuple(row.get(fm.column_index, "") for fm in split_fields)
        key = tuple(v.lower() for v in values)
        if key in seen:
            continue
        seen.add(key)
        result.append(values)
    return result


def split_name(label: str, values: tuple[str, ...]) -> str:
    """'Label - v1 - v2', blank values included (the slug drops their hyphens)."""
    return " - ".join([label, *values])
