"""
api - KiCad HTTP Library layer.

All route modules register on a single Flask Blueprint with
url_prefix /<API_ROOT>/v1 (default /kicad-api/v1).
"""

from flask import Blueprint

import config

kicad_bp = Blueprint("kicad_httplib", __name__, url_prefix=f"/{config.API_ROOT}/v1")

# Import route modules so their @kicad_bp decorators execute
from api import routes_kicad      # noqa: F401, E402
from api import errors            # noqa: F401, E402
