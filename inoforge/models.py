"""Request, response and diagnostic types shared by every compile path."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class InoforgeError(Exception):
    """Base class for inoforge errors."""
    pass


class DiagnosticKind(Enum):
    MISSING_CODE = "missing_code"
    MISSING_BOARD = "missing_board"
    SERVICE_NOT_CONFIGURED = "service_not_configured"
    TRANSPORT_FAILURE = "transport_failure"
    SERVICE_ERROR = "service_error"
    INVALID_SERVICE_RESPONSE = "invalid_service_response"
    UNBALANCED_BRACES = "unbalanced_braces"
    UNBALANCED_PARENS = "unbalanced_parens"
    MISSING_ENTRY_POINT = "missing_entry_point"
    MISSING_SEMICOLON = "missing_semicolon"
    LIBRARY_INSTALL_FAILED = "library_install_failed"
    TOOLCHAIN_MISSING = "toolchain_missing"
    TOOLCHAIN_TIMEOUT = "toolchain_timeout"
    TOOLCHAIN_ERROR = "toolchain_error"
    NO_ARTIFACT = "no_artifact"
    INTERNAL = "internal"


_TEMPLATES: dict[DiagnosticKind, str] = {
    DiagnosticKind.MISSING_CODE: "No code provided",
    DiagnosticKind.MISSING_BOARD: "No board specified",
    DiagnosticKind.SERVICE_NOT_CONFIGURED: (
        "Compilation service not configured. Set COMPILE_SERVICE_URL environment variable."
    ),
    DiagnosticKind.TRANSPORT_FAILURE: "Failed to connect to compilation service: {reason}",
    DiagnosticKind.SERVICE_ERROR: "Compilation service error: {status} - {body}",
    DiagnosticKind.INVALID_SERVICE_RESPONSE: "Compilation service returned an invalid response: {reason}",
    DiagnosticKind.UNBALANCED_BRACES: (
        "Unbalanced braces: every '{{' needs a matching '}}' (found {opened} '{{' and {closed} '}}')"
    ),
    DiagnosticKind.UNBALANCED_PARENS: (
        "Unbalanced parentheses: every '(' needs a matching ')' (found {opened} '(' and {closed} ')')"
    ),
    DiagnosticKind.MISSING_ENTRY_POINT: "Missing required function: void {function}()",
    DiagnosticKind.MISSING_SEMICOLON: "Line {line}: possible missing semicolon: {text}",
    DiagnosticKind.LIBRARY_INSTALL_FAILED: "Failed to install library: {library}",
    DiagnosticKind.TOOLCHAIN_MISSING: "{tool} not found. Install from https://arduino.github.io/arduino-cli/",
    DiagnosticKind.TOOLCHAIN_TIMEOUT: "Compilation timed out after {seconds} seconds",
    DiagnosticKind.TOOLCHAIN_ERROR: "{line}",
    DiagnosticKind.NO_ARTIFACT: "Compilation succeeded but no binary found",
    DiagnosticKind.INTERNAL: "Internal server error: {reason}",
}


@dataclass(frozen=True)
class Diagnostic:
    """A machine-inspectable error or warning.

    The context holds the values the message is built from, so tests and
    callers can look at counts, line numbers or function names without
    parsing text. Rendering happens only when a response is built.
    """
    kind: DiagnosticKind
    context: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return _TEMPLATES[self.kind].format(**self.context)


@dataclass
class CompileRequest:
    code: str
    board: str
    libraries: list[str] = field(default_factory=list)
    verbose: bool = False

    @classmethod
    def from_json(cls, data) -> CompileRequest:
        """Build a request from a decoded JSON body. Anything malformed becomes empty."""
        if not isinstance(data, dict):
            data = {}
        code = data.get("code")
        board = data.get("board")
        libraries = data.get("libraries") or []
        if not isinstance(libraries, list):
            libraries = []
        return cls(
            code=code if isinstance(code, str) else "",
            board=board if isinstance(board, str) else "",
            libraries=[lib for lib in libraries if isinstance(lib, str)],
            verbose=bool(data.get("verbose", False)),
        )

    def to_peer_payload(self, fqbn: str) -> dict:
        """Return the JSON body the remote compile peer expects."""
        return {
            "sketch": self.code,
            "fqbn": fqbn,
            "libraries": list(self.libraries),
            "verbose": self.verbose,
        }


@dataclass
class CompileResponse:
    success: bool
    binary: str | None = None
    size: int | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    output: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, *diagnostics: Diagnostic, warnings=None, output=None) -> CompileResponse:
        """Build a failed response from one or more diagnostics."""
        return cls(
            success=False,
            errors=[str(d) for d in diagnostics],
            warnings=[str(w) for w in (warnings or [])],
            output=list(output or []),
        )

    @classmethod
    def from_dict(cls, data: dict) -> CompileResponse:
        """Parse a response produced by a compile peer."""
        size = data.get("size")
        return cls(
            success=bool(data.get("success", False)),
            binary=data.get("binary"),
            size=size if isinstance(size, int) else None,
            errors=[str(e) for e in data.get("errors") or []],
            warnings=[str(w) for w in data.get("warnings") or []],
            output=[str(line) for line in data.get("output") or []],
        )

    def to_dict(self) -> dict:
        result: dict = {"success": self.success}
        if self.binary is not None:
            result["binary"] = self.binary
        if self.size is not None:
            result["size"] = self.size
        result["errors"] = list(self.errors)
        result["warnings"] = list(self.warnings)
        result["output"] = list(self.output)
        return result
