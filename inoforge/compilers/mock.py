"""Offline demo compiler.

Runs the heuristic analyzer and, when it finds no errors, reports a
made-up binary size and returns a placeholder payload. The payload is
plain text, not machine code, and must never be flashed.
"""

import base64
import logging
from decimal import Decimal, ROUND_HALF_UP

from inoforge.analyzer import analyze
from inoforge.boards import fqbn_family
from inoforge.compiler import Compiler
from inoforge.compilers import register_compiler
from inoforge.models import CompileRequest, CompileResponse

logger = logging.getLogger(__name__)

BASE_SIZES = {"esp32": 250000, "esp8266": 200000, "avr": 15000}
ESP_FLASH_SIZE = 1310720
AVR_FLASH_SIZE = 32256
BYTES_PER_CHAR = Decimal("1.2")

PLACEHOLDER_MAGIC = "INOFORGE-MOCK"


def estimate_size(code: str, fqbn: str) -> int:
    """Base size for the chip family plus 1.2 bytes per source character."""
    extra = (Decimal(len(code)) * BYTES_PER_CHAR).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return BASE_SIZES[fqbn_family(fqbn)] + int(extra)


def flash_size(fqbn: str) -> int:
    if fqbn_family(fqbn) == "avr":
        return AVR_FLASH_SIZE
    return ESP_FLASH_SIZE


def placeholder_binary(fqbn: str, size: int) -> str:
    """Return the base64 placeholder payload (deterministic, not flashable)."""
    text = f"{PLACEHOLDER_MAGIC} fqbn={fqbn} size={size} NOT-FLASHABLE\n"
    return base64.b64encode(text.encode("ascii")).decode("ascii")


class MockCompiler(Compiler):

    @property
    def name(self):
        return "mock"

    def compile(self, request: CompileRequest, fqbn: str) -> CompileResponse:
        output = [
            f"Compiling sketch for {fqbn} (offline demo mode)...",
            "Running static checks...",
        ]
        report = analyze(request.code)
        warnings = [str(w) for w in report.warnings]

        if not report.ok:
            output.append(f"Compilation failed with {len(report.errors)} error(s)")
            logger.info("Mock compile for %s failed with %d error(s)", fqbn, len(report.errors))
            return CompileResponse(
                success=False,
                errors=[str(e) for e in report.errors],
                warnings=warnings,
                output=output,
            )

        size = estimate_size(request.code, fqbn)
        maximum = flash_size(fqbn)
        percent = size * 100 // maximum
        output.append(
            f"Sketch uses {size} bytes ({percent}%) of program storage space. Maximum is {maximum} bytes."
        )
        output.append("Offline demo build: the binary is a placeholder and cannot be flashed.")
        return CompileResponse(
            success=True,
            binary=placeholder_binary(fqbn, size),
            size=size,
            warnings=warnings,
            output=output,
        )

    def doctor(self) -> dict:
        return {"ok": True, "message": "Offline demo compiler (placeholder binaries only)"}


register_compiler("mock", MockCompiler)
