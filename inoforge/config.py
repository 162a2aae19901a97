"""Settings for inoforge, read from inoforge.toml and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

from inoforge.boards import BoardTable, default_board_table
from inoforge.models import InoforgeError

CONFIG_FILENAME = "inoforge.toml"
SERVICE_URL_ENV = "COMPILE_SERVICE_URL"
LOG_LEVEL_ENV = "INOFORGE_LOG_LEVEL"


class ConfigError(InoforgeError):
    """Raised when inoforge.toml holds a value of the wrong type."""
    pass


@dataclass
class ServiceConfig:
    url: str | None = None
    timeout: float | None = None
    health_timeout: float = 5.0

    @property
    def configured(self) -> bool:
        return bool(self.url)


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: str = "*"


@dataclass
class PeerConfig:
    host: str = "127.0.0.1"
    port: int = 3001
    arduino_cli: str = "arduino-cli"
    compile_timeout: int = 300
    library_timeout: int = 60
    default_fqbn: str = "esp32:esp32:esp32"


@dataclass
class Settings:
    service: ServiceConfig = field(default_factory=ServiceConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    peer: PeerConfig = field(default_factory=PeerConfig)
    log_level: str = "INFO"
    extra_boards: dict = field(default_factory=dict)

    def board_table(self) -> BoardTable:
        """Return the built-in boards plus any [boards] entries."""
        table = default_board_table()
        if self.extra_boards:
            table = table.extended(self.extra_boards)
        return table


def _read_toml(project_dir: Path) -> dict:
    toml_path = project_dir / CONFIG_FILENAME
    if not toml_path.exists():
        return {}
    with open(toml_path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid {CONFIG_FILENAME}: {e}") from e


def _typed(section: dict, key: str, kind, default, section_name: str):
    value = section.get(key, default)
    if value is None:
        return None
    # TOML ints are acceptable where floats are expected.
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, kind) or (isinstance(value, bool) and kind is not bool):
        raise ConfigError(f"{section_name}.{key} must be {kind.__name__}, got {value!r}")
    return value


def _normalize_url(url: str | None) -> str | None:
    if url is None:
        return None
    url = url.strip().rstrip("/")
    return url or None


def load_settings(project_dir: Path | str | None = None, environ: dict | None = None) -> Settings:
    """Build Settings from inoforge.toml (if present) and environment overrides."""
    project_dir = Path(project_dir) if project_dir is not None else Path.cwd()
    environ = os.environ if environ is None else environ
    data = _read_toml(project_dir)

    service_data = data.get("service", {})
    server_data = data.get("server", {})
    peer_data = data.get("peer", {})
    logging_data = data.get("logging", {})
    boards_data = data.get("boards", {})

    service = ServiceConfig(
        url=_normalize_url(_typed(service_data, "url", str, None, "service")),
        timeout=_typed(service_data, "timeout", float, None, "service"),
        health_timeout=_typed(service_data, "health_timeout", float, 5.0, "service"),
    )
    server = ServerConfig(
        host=_typed(server_data, "host", str, "127.0.0.1", "server"),
        port=_typed(server_data, "port", int, 3000, "server"),
        cors_origins=_typed(server_data, "cors_origins", str, "*", "server"),
    )
    peer = PeerConfig(
        host=_typed(peer_data, "host", str, "127.0.0.1", "peer"),
        port=_typed(peer_data, "port", int, 3001, "peer"),
        arduino_cli=_typed(peer_data, "arduino_cli", str, "arduino-cli", "peer"),
        compile_timeout=_typed(peer_data, "compile_timeout", int, 300, "peer"),
        library_timeout=_typed(peer_data, "library_timeout", int, 60, "peer"),
        default_fqbn=_typed(peer_data, "default_fqbn", str, "esp32:esp32:esp32", "peer"),
    )

    extra_boards = {}
    for name, fqbn in boards_data.items():
        if not isinstance(fqbn, str):
            raise ConfigError(f"boards.{name} must be an FQBN string, got {fqbn!r}")
        extra_boards[name] = fqbn

    log_level = _typed(logging_data, "level", str, "INFO", "logging")

    # Environment wins over the file.
    if SERVICE_URL_ENV in environ:
        service.url = _normalize_url(environ[SERVICE_URL_ENV])
    if environ.get(LOG_LEVEL_ENV):
        log_level = environ[LOG_LEVEL_ENV]

    return Settings(
        service=service,
        server=server,
        peer=peer,
        log_level=log_level.upper(),
        extra_boards=extra_boards,
    )


def get_config_value(project_dir: Path | str, key: str):
    """Dotted key lookup in inoforge.toml, e.g. 'service.url', 'peer.port'."""
    data = _read_toml(Path(project_dir))
    parts = key.split(".", 1)
    if len(parts) == 2:
        section, k = parts
        return data.get(section, {}).get(k)
    return data.get(key)
