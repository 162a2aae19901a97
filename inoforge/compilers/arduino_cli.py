"""Local compiler that shells out to arduino-cli.

This is what an inoforge peer runs behind ``POST /compile``. Every build
happens in a fresh temporary directory that is removed afterwards,
whatever the outcome.
"""

import base64
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

from inoforge.compiler import Compiler
from inoforge.compilers import register_compiler
from inoforge.models import CompileRequest, CompileResponse, Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)

COMPILE_TIMEOUT = 300
LIBRARY_TIMEOUT = 60
MAX_ERROR_CHARS = 500
SKETCH_NAME = "sketch"


def _find_artifact(build_dir: Path) -> Path | None:
    """Prefer the sketch's own .bin/.hex over bootloader or partition images."""
    for candidate in (f"{SKETCH_NAME}.ino.bin", f"{SKETCH_NAME}.ino.hex"):
        path = build_dir / candidate
        if path.is_file():
            return path
    for pattern in ("*.bin", "*.hex"):
        matches = sorted(build_dir.glob(pattern))
        if matches:
            return matches[0]
    return None


def _error_lines(text: str) -> list[str]:
    lines = [line for line in text.splitlines() if "error" in line]
    if lines:
        return lines
    return [text[:MAX_ERROR_CHARS]]


class ArduinoCliCompiler(Compiler):
    """Compiles sketches with arduino-cli."""

    def __init__(self, cli_path: str = "arduino-cli", compile_timeout: int = COMPILE_TIMEOUT,
                 library_timeout: int = LIBRARY_TIMEOUT):
        self.cli_path = cli_path
        self.compile_timeout = compile_timeout
        self.library_timeout = library_timeout

    @property
    def name(self) -> str:
        return "arduino-cli"

    def compile(self, request: CompileRequest, fqbn: str) -> CompileResponse:
        with tempfile.TemporaryDirectory(prefix="arduino-") as tmp:
            return self._compile_in(Path(tmp), request, fqbn)

    def install_library(self, library: str) -> bool:
        """Install one library. Returns False if arduino-cli failed or is missing."""
        try:
            subprocess.run(
                [self.cli_path, "lib", "install", library],
                capture_output=True, text=True, timeout=self.library_timeout, check=True,
            )
        except (FileNotFoundError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
            logger.warning("Library install failed for %s: %s", library, e)
            return False
        return True

    def doctor(self) -> dict:
        """Check if arduino-cli is installed."""
        path = shutil.which(self.cli_path)
        if path:
            return {"ok": True, "message": f"arduino-cli found at {path}"}
        return {"ok": False, "message": "arduino-cli not found. Install from https://arduino.github.io/arduino-cli/"}

    # -- Private helpers ------------------------------------------------------

    def _compile_in(self, workspace: Path, request: CompileRequest, fqbn: str) -> CompileResponse:
        sketch_dir = workspace / SKETCH_NAME
        build_dir = workspace / "build"
        sketch_dir.mkdir()
        build_dir.mkdir()
        (sketch_dir / f"{SKETCH_NAME}.ino").write_text(request.code, encoding="utf-8")

        output: list[str] = []
        warnings: list[Diagnostic] = []

        for library in request.libraries:
            if self.install_library(library):
                output.append(f"Installed library: {library}")
            else:
                warnings.append(Diagnostic(DiagnosticKind.LIBRARY_INSTALL_FAILED, {"library": library}))

        cmd = [self.cli_path, "compile", "--fqbn", fqbn, "--output-dir", str(build_dir)]
        if request.verbose:
            cmd.append("-v")
        cmd.append(str(sketch_dir))

        output.append(f"Compiling for {fqbn}...")
        logger.info("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.compile_timeout)
        except FileNotFoundError:
            return CompileResponse.failure(
                Diagnostic(DiagnosticKind.TOOLCHAIN_MISSING, {"tool": self.cli_path}),
                warnings=warnings, output=output,
            )
        except subprocess.TimeoutExpired:
            return CompileResponse.failure(
                Diagnostic(DiagnosticKind.TOOLCHAIN_TIMEOUT, {"seconds": self.compile_timeout}),
                warnings=warnings, output=output,
            )

        output.extend(line for line in result.stdout.splitlines() if line.strip())

        if result.returncode != 0:
            message = result.stderr or result.stdout or f"arduino-cli exited with status {result.returncode}"
            return CompileResponse.failure(
                *[Diagnostic(DiagnosticKind.TOOLCHAIN_ERROR, {"line": line}) for line in _error_lines(message)],
                warnings=warnings, output=output,
            )

        artifact = _find_artifact(build_dir)
        if artifact is None:
            return CompileResponse.failure(
                Diagnostic(DiagnosticKind.NO_ARTIFACT), warnings=warnings, output=output,
            )

        data = artifact.read_bytes()
        output.append(f"Compilation complete. Binary size: {len(data)} bytes")
        return CompileResponse(
            success=True,
            binary=base64.b64encode(data).decode("ascii"),
            size=len(data),
            warnings=[str(w) for w in warnings],
            output=output,
        )


register_compiler("arduino-cli", ArduinoCliCompiler)
