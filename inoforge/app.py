"""HTTP API for browser clients.

Routes:
    POST /compile       compile through the configured service
    GET  /compile       service status and supported boards
    POST /compile/demo  offline demo compile (placeholder binary)
"""

import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from inoforge.config import Settings, load_settings
from inoforge.dispatcher import CompileDispatcher
from inoforge.logging_setup import configure_logging
from inoforge.models import CompileRequest, CompileResponse, Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)

EXTENSION_KEY = "inoforge.dispatcher"
MAX_BODY_BYTES = 10 * 1024 * 1024

compile_bp = Blueprint("compile", __name__)


def _dispatcher() -> CompileDispatcher:
    return current_app.extensions[EXTENSION_KEY]


def _body() -> CompileRequest:
    return CompileRequest.from_json(request.get_json(force=True, silent=True))


@compile_bp.post("/compile")
def compile_sketch():
    response, status = _dispatcher().compile(_body())
    return jsonify(response.to_dict()), status


@compile_bp.get("/compile")
def compile_status():
    return jsonify(_dispatcher().status())


@compile_bp.post("/compile/demo")
def compile_demo():
    response, status = _dispatcher().demo(_body())
    return jsonify(response.to_dict()), status


def _internal_error(error: Exception):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Compile API error")
    failure = CompileResponse.failure(Diagnostic(DiagnosticKind.INTERNAL, {"reason": str(error)}))
    return jsonify(failure.to_dict()), 500


def create_app(settings: Settings | None = None, dispatcher: CompileDispatcher | None = None) -> Flask:
    """Application factory."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.config["MAX_CONTENT_LENGTH"] = MAX_BODY_BYTES
    CORS(app, origins=settings.server.cors_origins)
    app.extensions[EXTENSION_KEY] = dispatcher or CompileDispatcher.from_settings(settings)
    app.register_blueprint(compile_bp)
    app.register_error_handler(Exception, _internal_error)

    if settings.service.configured:
        logger.info("Compile service: %s", settings.service.url)
    else:
        logger.warning("COMPILE_SERVICE_URL is not set; /compile will answer 503")
    return app
