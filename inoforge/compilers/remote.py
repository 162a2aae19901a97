"""Client for a remote compile service (an inoforge peer or compatible)."""

import logging

import requests

from inoforge.compiler import Compiler
from inoforge.compilers import register_compiler
from inoforge.models import CompileRequest, CompileResponse, Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)

HEALTH_TIMEOUT = 5.0

LIST_FIELDS = ("errors", "warnings", "output")


def _shape_problem(data: dict) -> str | None:
    """Describe what is wrong with a compile service reply, or None if it is usable."""
    for field in LIST_FIELDS:
        value = data.get(field)
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            return f"'{field}' must be a list of strings"
    if data.get("success") is True:
        if not isinstance(data.get("binary"), str):
            return "successful response is missing 'binary'"
        size = data.get("size")
        if not isinstance(size, int) or isinstance(size, bool):
            return "successful response is missing 'size'"
    return None


class RemoteCompiler(Compiler):
    """Forwards sketches to ``{base_url}/compile`` and probes ``{base_url}/health``."""

    def __init__(self, base_url: str, timeout: float | None = None,
                 health_timeout: float = HEALTH_TIMEOUT, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.health_timeout = health_timeout
        self._session = session or requests

    @property
    def name(self) -> str:
        return "remote"

    def compile(self, request: CompileRequest, fqbn: str) -> CompileResponse:
        url = f"{self.base_url}/compile"
        logger.info("Forwarding compile for %s to %s", fqbn, url)
        try:
            response = self._session.post(
                url,
                json=request.to_peer_payload(fqbn),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Compile service unreachable at %s: %s", url, e)
            return CompileResponse.failure(
                Diagnostic(DiagnosticKind.TRANSPORT_FAILURE, {"reason": str(e)})
            )

        if not response.ok:
            logger.warning("Compile service answered %s", response.status_code)
            return CompileResponse.failure(
                Diagnostic(DiagnosticKind.SERVICE_ERROR, {"status": response.status_code, "body": response.text})
            )

        try:
            data = response.json()
        except ValueError as e:
            return CompileResponse.failure(
                Diagnostic(DiagnosticKind.INVALID_SERVICE_RESPONSE, {"reason": str(e)})
            )
        if not isinstance(data, dict):
            return CompileResponse.failure(
                Diagnostic(DiagnosticKind.INVALID_SERVICE_RESPONSE, {"reason": "expected a JSON object"})
            )
        problem = _shape_problem(data)
        if problem is not None:
            logger.warning("Compile service sent a malformed response: %s", problem)
            return CompileResponse.failure(
                Diagnostic(DiagnosticKind.INVALID_SERVICE_RESPONSE, {"reason": problem})
            )
        return CompileResponse.from_dict(data)

    def health(self) -> bool:
        """Return True if the service answers its health check with a 2xx status."""
        try:
            response = self._session.get(f"{self.base_url}/health", timeout=self.health_timeout)
        except requests.RequestException as e:
            logger.info("Health check failed for %s: %s", self.base_url, e)
            return False
        return response.ok

    def doctor(self) -> dict:
        if self.health():
            return {"ok": True, "message": f"Compile service online at {self.base_url}"}
        return {"ok": False, "message": f"Compile service at {self.base_url} is not reachable"}


register_compiler("remote", RemoteCompiler)
