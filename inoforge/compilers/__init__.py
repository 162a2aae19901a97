"""Compiler registry for inoforge."""

from inoforge.compiler import Compiler

_REGISTRY: dict[str, type[Compiler]] = {}


def register_compiler(name: str, compiler_cls: type[Compiler]) -> None:
    """Register a compiler class under a name."""
    _REGISTRY[name] = compiler_cls


def get_compiler_class(name: str) -> type[Compiler] | None:
    """Get a compiler class by name."""
    return _REGISTRY.get(name)


def list_compilers() -> list[str]:
    """Return the names of all registered compilers."""
    return list(_REGISTRY)


# Auto-import compiler modules so they self-register.
from inoforge.compilers import remote as _remote  # noqa: F401, E402
from inoforge.compilers import mock as _mock  # noqa: F401, E402
from inoforge.compilers import arduino_cli as _arduino_cli  # noqa: F401, E402
