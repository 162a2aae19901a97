"""Remote compile peer: a small HTTP service wrapping arduino-cli.

Speaks the wire contract the compile API's remote client expects:
``POST /compile`` with ``{sketch, fqbn, libraries, verbose}`` and
``GET /health``.
"""

import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from inoforge.compiler import Compiler
from inoforge.compilers.arduino_cli import ArduinoCliCompiler
from inoforge.config import Settings, load_settings
from inoforge.logging_setup import configure_logging
from inoforge.models import CompileRequest, CompileResponse

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 10 * 1024 * 1024

peer_bp = Blueprint("peer", __name__)


@peer_bp.get("/health")
def health():
    boards = current_app.extensions["inoforge.boards"]
    return jsonify({"status": "ok", "boards": boards.names()})


@peer_bp.post("/compile")
def compile_sketch():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        data = {}
    sketch = data.get("sketch")
    if not sketch or not isinstance(sketch, str):
        failure = CompileResponse(success=False, errors=["No sketch provided"])
        return jsonify(failure.to_dict()), 400

    boards = current_app.extensions["inoforge.boards"]
    default_fqbn = current_app.config["INOFORGE_DEFAULT_FQBN"]
    label = data.get("fqbn")
    fqbn = boards.resolve(label) if isinstance(label, str) and label else default_fqbn

    compile_request = CompileRequest.from_json({
        "code": sketch,
        "board": fqbn,
        "libraries": data.get("libraries"),
        "verbose": data.get("verbose", False),
    })
    compiler: Compiler = current_app.extensions["inoforge.compiler"]
    result = compiler.compile(compile_request, fqbn)
    logger.info("Compile for %s finished: success=%s", fqbn, result.success)
    return jsonify(result.to_dict())


def create_peer_app(settings: Settings | None = None, compiler: Compiler | None = None) -> Flask:
    """Application factory for the peer service."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.config["MAX_CONTENT_LENGTH"] = MAX_BODY_BYTES
    app.config["INOFORGE_DEFAULT_FQBN"] = settings.peer.default_fqbn
    CORS(app)
    app.extensions["inoforge.boards"] = settings.board_table()
    app.extensions["inoforge.compiler"] = compiler or ArduinoCliCompiler(
        cli_path=settings.peer.arduino_cli,
        compile_timeout=settings.peer.compile_timeout,
        library_timeout=settings.peer.library_timeout,
    )
    app.register_blueprint(peer_bp)
    return app
