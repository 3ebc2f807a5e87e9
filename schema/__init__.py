"""
schema - Part-field schema, sheet mappings and identifier rules.

Public API:
    fields.defaults / fields.reconcile / fields.custom_field
    fields.auto_map / fields.missing_required
    mapping.SheetMapping / mapping.AppConfiguration / mapping.Prefixes
    identifiers.slugify / compose_part_id / split_part_id / apply_prefix
"""

from schema.fields import (                          # noqa: F401
    FieldMapping,
    defaults,
    reconcile,
    custom_field,
    auto_map,
    missing_required,
)
from schema.identifiers import (                     # noqa: F401
    slugify,
    compose_part_id,
    split_part_id,
    apply_prefix,
)
from schema.mapping import SheetMapping, AppConfiguration, Prefixes   # noqa: F401
