"""Compiler abstraction for inoforge."""

from abc import ABC, abstractmethod

from inoforge.models import CompileRequest, CompileResponse


class Compiler(ABC):
    """Something that turns a sketch and an FQBN into a CompileResponse.

    Implementations convert every expected failure into a failed
    response instead of raising.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier (e.g., 'remote', 'mock')."""

    @abstractmethod
    def compile(self, request: CompileRequest, fqbn: str) -> CompileResponse:
        """Compile request.code for the already-resolved fqbn."""

    def doctor(self) -> dict:
        """Check if this compiler can be used. Returns {"ok": bool, "message": str}."""
        return {"ok": True, "message": "No checks configured"}
