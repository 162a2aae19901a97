"""Compilation dispatcher: validate, resolve the board, hand off to a compiler."""

from __future__ import annotations

import logging

from inoforge.boards import BoardTable
from inoforge.compiler import Compiler
from inoforge.compilers.mock import MockCompiler
from inoforge.compilers.remote import RemoteCompiler
from inoforge.config import Settings
from inoforge.models import CompileRequest, CompileResponse, Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_SERVICE_UNAVAILABLE = 503


def validate(request: CompileRequest) -> CompileResponse | None:
    """Return a failed response if code or board is missing, else None."""
    if not request.code:
        return CompileResponse.failure(Diagnostic(DiagnosticKind.MISSING_CODE))
    if not request.board:
        return CompileResponse.failure(Diagnostic(DiagnosticKind.MISSING_BOARD))
    return None


class CompileDispatcher:
    """Routes compile requests to the compiler chosen at construction time.

    ``compiler`` is None when no compile service is configured; requests
    then fail with 503 and are never silently handed to the mock compiler.
    The mock compiler is only reachable through ``demo``.
    """

    def __init__(self, boards: BoardTable, compiler: Compiler | None = None,
                 demo_compiler: Compiler | None = None):
        self.boards = boards
        self.compiler = compiler
        self.demo_compiler = demo_compiler or MockCompiler()

    @classmethod
    def from_settings(cls, settings: Settings) -> CompileDispatcher:
        compiler = None
        if settings.service.configured:
            compiler = RemoteCompiler(
                settings.service.url,
                timeout=settings.service.timeout,
                health_timeout=settings.service.health_timeout,
            )
        return cls(settings.board_table(), compiler=compiler)

    @property
    def configured(self) -> bool:
        return self.compiler is not None

    def compile(self, request: CompileRequest) -> tuple[CompileResponse, int]:
        """Compile once with the configured compiler. Returns (response, HTTP status)."""
        invalid = validate(request)
        if invalid is not None:
            return invalid, HTTP_BAD_REQUEST

        if self.compiler is None:
            logger.warning("Compile requested but no compile service is configured")
            return (
                CompileResponse.failure(Diagnostic(DiagnosticKind.SERVICE_NOT_CONFIGURED)),
                HTTP_SERVICE_UNAVAILABLE,
            )

        fqbn = self.boards.resolve(request.board)
        logger.info("Compiling %d bytes for %s via %s", len(request.code), fqbn, self.compiler.name)
        return self.compiler.compile(request, fqbn), HTTP_OK

    def demo(self, request: CompileRequest) -> tuple[CompileResponse, int]:
        """Run the offline demo compiler. Same validation, never 503."""
        invalid = validate(request)
        if invalid is not None:
            return invalid, HTTP_BAD_REQUEST
        fqbn = self.boards.resolve(request.board)
        return self.demo_compiler.compile(request, fqbn), HTTP_OK

    def status(self) -> dict:
        """Report whether a service is configured and reachable. Never raises."""
        online = False
        if self.compiler is not None:
            try:
                online = bool(self.compiler.doctor().get("ok"))
            except Exception:
                logger.exception("Status probe failed")
                online = False
        return {
            "serviceConfigured": self.configured,
            "serviceOnline": online,
            "supportedBoards": self.boards.names(),
        }
