"""api.routes_kicad - KiCad HTTP Library protocol endpoints.

To configure in KiCad:
1. Preferences > Manage Symbol Libraries
2. Add a library of type "KiCad HTTP Library"
3. Point its .kicad_httplib file at http://localhost:<port>/kicad-api/v1/

Every handler grabs the current engine once; the symbol / footprint
prefixes are read once per request and passed down explicitly.
"""

from flask import Response, jsonify

from api import kicad_bp
from services.catalog_service import get_catalog, get_store


@kicad_bp.route("/")
@kicad_bp.route("")
def kicad_http_root():
    """
    GET /kicad-api/v1/

    Endpoint validation.  KiCad only checks that both keys exist.
    """
    return jsonify({"categories": "", "parts": ""})


@kicad_bp.route("/categories.json")
def kicad_http_categories():
    """GET /kicad-api/v1/categories.json - categories in derivation order."""
    engine = get_catalog()
    return jsonify([c.to_dict() for c in engine.categories()])


@kicad_bp.route("/parts/category/<category_id>.json")
def kicad_http_parts_by_category(category_id):
    """
    GET /kicad-api/v1/parts/category/<category_id>.json

    Unknown categories give an empty list, not a 404.
    """
    engine = get_catalog()
    prefixes = get_store().prefixes()
    parts = engine.parts_for_category(category_id, prefixes)
    return jsonify([p.to_dict() for p in parts])


@kicad_bp.route("/parts/<part_id>.json")
def kicad_http_part_detail(part_id):
    """
    GET /kicad-api/v1/parts/<part_id>.json

    Full part including the field payload KiCad places on the symbol.
    """
    engine = get_catalog()
    prefixes = get_store().prefixes()
    part = engine.part_details(part_id, prefixes)
    if part is None:
        return Response(status=404)
    return jsonify(part.to_dict())
