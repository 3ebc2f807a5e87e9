"""
catalog.payloads - Named response shapes for the KiCad HTTP library.

KiCad expects every value as a string, booleans included ("True" /
"False"), and the key order below is what gets serialised.
"""

from __future__ import annotations

from dataclasses import dataclass, field


def bool_str(flag: bool) -> str:
    return "True" if flag else "False"


@dataclass(frozen=True)
class CategorySummary:
    id: str
    name: str
    description: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}


@dataclass(frozen=True)
class PartSummary:
    id: str
    name: str
    description: str = ""
    symbol_id_str: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "symbolIdStr": self.symbol_id_str,
        }


@dataclass(frozen=True)
class FieldValue:
    value: str
    visible: bool

    def to_dict(self) -> dict:
        return {"value": self.value, "visible": bool_str(self.visible)}


@dataclass(frozen=True)
class PartDetail:
    id: str
    name: str
    symbol_id_str: str = ""
    fields: dict[str, FieldValue] = field(default_factory=dict, compare=False)
    exclude_from_bom: bool = False
    exclude_from_board: bool = False
    exclude_from_sim: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "symbolIdStr": self.symbol_id_str,
            "exclude_from_bom": bool_str(self.exclude_from_bom),
            "exclude_from_board": bool_str(self.exclude_from_board),
            "exclude_from_sim": bool_str(self.exclude_from_sim),
            "fields": {name: fv.to_dict() for name, fv in self.fields.items()},
        }
