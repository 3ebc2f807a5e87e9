"""
schema.fields - Canonical part-field schema.

Each sheet carries an ordered list of FieldMapping entries binding a
schema field (ID, Symbol, …) or a user-defined custom field to a
spreadsheet column.  The schema is authoritative for a field's
category and required flag; visibility is the user's choice once the
field is bound to a column.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional

REQUIRED = "Required"
COMMON = "Common"
CUSTOM = "Custom"

# Fields that have a dedicated top-level attribute in KiCad part payloads
ID_FIELD = "ID"
SYMBOL_FIELD = "Symbol"
FOOTPRINT_FIELD = "Footprint"
PART_NUMBER_FIELD = "PartNumber"
DESCRIPTION_FIELD = "Description"


class FieldDefinition(NamedTuple):
    name: str
    category: str
    default_visible: bool
    is_required: bool


SCHEMA_FIELDS: tuple[FieldDefinition, ...] = (
    FieldDefinition(ID_FIELD,          REQUIRED, False, True),
    FieldDefinition(SYMBOL_FIELD,      REQUIRED, True,  True),
    FieldDefinition(FOOTPRINT_FIELD,   REQUIRED, True,  True),
    FieldDefinition("Value",           REQUIRED, True,  True),
    FieldDefinition(PART_NUMBER_FIELD, COMMON,   True,  False),
    FieldDefinition("Manufacturer",    COMMON,   True,  False),
    FieldDefinition("Supplier",        COMMON,   False, False),
    FieldDefinition("Datasheet",       COMMON,   False, False),
    FieldDefinition(DESCRIPTION_FIELD, COMMON,   True,  False),
)


@dataclass
class FieldMapping:
    field_name: str
    column_index: Optional[int] = None
    column_header: Optional[str] = None
    visible: bool = True
    category: str = COMMON
    is_required: bool = False
    split: bool = False

    @property
    def is_bound(self) -> bool:
        return isinstance(self.column_index, int) and self.column_index > 0

    @property
    def is_custom(self) -> bool:
        return self.category.lower() == CUSTOM.lower() and not self.is_required

    def rename(self, new_name: str) -> None:
        """Only custom fields may be renamed."""
        if not self.is_custom:
            raise ValueError(f"Field {self.field_name!r} is not a custom field")
        new_name = (new_name or "").strip()
        if not new_name:
            raise ValueError("Field name must not be empty")
        self.field_name = new_name

    # ── Serialisation ──────────────────────────────────────────────────
    def to_dict(self) -> dict:
        return {
            "FieldName": self.field_name,
            "ColumnIndex": self.column_index,
            "ColumnHeader": self.column_header,
            "Visible": self.visible,
            "Category": self.category,
            "IsRequired": self.is_required,
            "Split": self.split,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FieldMapping":
        return cls(
            field_name=str(data.get("FieldName") or "").strip(),
            column_index=_as_column(data.get("ColumnIndex")),
            column_header=data.get("ColumnHeader"),
            visible=bool(data.get("Visible", True)),
            category=str(data.get("Category") or COMMON),
            is_required=bool(data.get("IsRequired", False)),
            split=bool(data.get("Split", False)),
        )


def _as_column(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        col = int(value)
    except (TypeError, ValueError):
        return None
    return col if col > 0 else None


# ── Public helpers ────────────────────────────────────────────────────

def defaults() -> list[FieldMapping]:
    """Return a fresh, unbound FieldMapping for every schema field."""
    return [_from_definition(d) for d in SCHEMA_FIELDS]


def custom_field(name: str, column_index: Optional[int] = None) -> FieldMapping:
    return FieldMapping(field_name=name.strip(), column_index=column_index,
                        visible=True, category=CUSTOM, is_required=False)


def find(mappings: list[FieldMapping], name: str) -> Optional[FieldMapping]:
    """Case-insensitive lookup by field name."""
    wanted = name.lower()
    for fm in mappings:
        if fm.field_name.lower() == wanted:
            return fm
    return None


def reconcile(mappings: list[FieldMapping]) -> list[FieldMapping]:
    """
    Bring an existing mapping list in line with the schema (in place).

    Missing schema fields are appended with their defaults.  Present ones
    get category / required from the schema; their visibility resets to
    the default only while they are not bound to a column.
    """
    for definition in SCHEMA_FIELDS:
        existing = find(mappings, definition.name)
        if existing is None:
            mappings.append(_from_definition(definition))
            continue
        existing.category = definition.category
        existing.is_required = definition.is_required
        if not existing.is_bound:
            existing.visible = definition.default_visible
    return mappings


def _from_definition(d: FieldDefinition) -> FieldMapping:
    return FieldMapping(field_name=d.name, visible=d.default_visible,
                        category=d.category, is_required=d.is_required)


# ── Column binding ────────────────────────────────────────────────────

def normalize_header(value: Optional[str]) -> str:
    """Letters and digits only, lowercased: 'Part Number' -> 'partnumber'."""
    return "".join(ch.lower() for ch in (value or "") if ch.isalnum())


def auto_map(mappings: list[FieldMapping], columns) -> list[FieldMapping]:
    """
    Bind every unbound field to the first column whose header matches the
    field name after normalize_header().  `columns` are ColumnOption-like
    objects (index, header).  Matched fields become visible.

    Returns the fields that were bound.
    """
    columns = list(columns)
    bound = []
    for fm in mappings:
        wanted = normalize_header(fm.field_name)
        if fm.is_bound or not wanted:
            continue
        for col in columns:
            if normalize_header(col.header) == wanted:
                fm.column_index = col.index
                fm.column_header = col.header
                fm.visible = True
                bound.append(fm)
                break
    return bound


def missing_required(mappings: list[FieldMapping]) -> list[str]:
    """Names of required fields that have no column."""
    return [fm.field_name for fm in mappings if fm.is_required and not fm.is_bound]
