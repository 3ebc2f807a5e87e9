"""
catalog - Catalog resolution engine.

Public API:
    CatalogEngine(source_files, sheet_mappings) → engine
    engine.categories() / parts_for_category() / part_details()
"""

from catalog.engine import CatalogEngine                       # noqa: F401
from catalog.categories import CategoryInfo, derive_categories  # noqa: F401
from catalog.payloads import (                                  # noqa: F401
    CategorySummary,
    PartSummary,
    PartDetail,
    FieldValue,
)
