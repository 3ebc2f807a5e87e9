"""
api.errors - Application-wide error handlers and request logging.

KiCad treats any non-200 as "nothing here", so unroutable paths and
wrong methods both answer a bare 404.  Unexpected exceptions answer
500 with the exception message as plain text (local, trusted client).
"""

import logging

from flask import Response, request
from werkzeug.exceptions import HTTPException

from api import kicad_bp

logger = logging.getLogger(__name__)


@kicad_bp.app_errorhandler(404)
def api_not_found(_e):
    return Response(status=404)


@kicad_bp.app_errorhandler(405)
def api_wrong_method(_e):
    return Response(status=404)


@kicad_bp.app_errorhandler(Exception)
def api_server_error(e):
    if isinstance(e, HTTPException):
        return e
    logger.exception(f"Error handling {request.method} {request.path}")
    return Response(str(e), status=500, mimetype="text/plain")


@kicad_bp.after_app_request
def log_request(response):
    logger.info(f"{request.method} {request.full_path.rstrip('?')} -> {response.status_code}")
    return response
