"""Board definitions for inoforge."""

from dataclasses import dataclass
from typing import Iterable, Iterator


class BoardNotFoundError(KeyError):
    """Raised when a board display name is not in the table."""
    pass


@dataclass(frozen=True)
class BoardIdentity:
    name: str
    fqbn: str

    @property
    def family(self) -> str:
        """Return 'esp32', 'esp8266' or 'avr' (anything that is not ESP)."""
        return fqbn_family(self.fqbn)


def fqbn_family(fqbn: str) -> str:
    """Classify an FQBN by the chip family it mentions."""
    lowered = fqbn.lower()
    if "esp32" in lowered:
        return "esp32"
    if "esp8266" in lowered:
        return "esp8266"
    return "avr"


class BoardTable:
    """Read-only lookup of display names to FQBNs.

    Built once at process start and handed to whatever needs to resolve
    board labels. Entries keep their insertion order.
    """

    def __init__(self, boards: Iterable[BoardIdentity]) -> None:
        self._boards: dict[str, BoardIdentity] = {}
        for board in boards:
            self._boards[board.name] = board

    def resolve(self, label: str) -> str:
        """Return the FQBN for a display name, or the label itself if unknown."""
        board = self._boards.get(label)
        if board is None:
            return label
        return board.fqbn

    def get(self, name: str) -> BoardIdentity:
        """Get a board by its display name. Raises BoardNotFoundError if not found."""
        if name not in self._boards:
            raise BoardNotFoundError(f"Unknown board: {name}. Use 'inoforge boards' to list supported boards.")
        return self._boards[name]

    def names(self) -> list[str]:
        return list(self._boards)

    def list_boards(self) -> list[BoardIdentity]:
        return list(self._boards.values())

    def extended(self, extra: dict[str, str]) -> "BoardTable":
        """Return a new table with additional name -> FQBN entries."""
        added = [BoardIdentity(name=name, fqbn=fqbn) for name, fqbn in extra.items()]
        return BoardTable(self.list_boards() + added)

    def __contains__(self, name: object) -> bool:
        return name in self._boards

    def __iter__(self) -> Iterator[BoardIdentity]:
        return iter(self._boards.values())

    def __len__(self) -> int:
        return len(self._boards)


DEFAULT_BOARDS: tuple[BoardIdentity, ...] = (
    # --- ESP32 ---
    BoardIdentity("ESP32 Dev Module", "esp32:esp32:esp32"),
    BoardIdentity("ESP32-S2 Dev Module", "esp32:esp32:esp32s2"),
    BoardIdentity("ESP32-S3 Dev Module", "esp32:esp32:esp32s3"),
    BoardIdentity("ESP32-C3 Dev Module", "esp32:esp32:esp32c3"),
    BoardIdentity("NodeMCU-32S", "esp32:esp32:nodemcu-32s"),
    BoardIdentity("LOLIN D32", "esp32:esp32:d32"),
    BoardIdentity("LOLIN D32 Pro", "esp32:esp32:d32_pro"),
    # --- ESP8266 ---
    BoardIdentity("Generic ESP8266 Module", "esp8266:esp8266:generic"),
    BoardIdentity("NodeMCU 1.0", "esp8266:esp8266:nodemcuv2"),
    BoardIdentity("Wemos D1 Mini", "esp8266:esp8266:d1_mini"),
    # --- Arduino AVR ---
    BoardIdentity("Arduino Uno", "arduino:avr:uno"),
    BoardIdentity("Arduino Mega", "arduino:avr:mega"),
    BoardIdentity("Arduino Nano", "arduino:avr:nano"),
    BoardIdentity("Arduino Leonardo", "arduino:avr:leonardo"),
    # --- Arduino SAMD ---
    BoardIdentity("Arduino MKR WiFi 1010", "arduino:samd:mkrwifi1010"),
    BoardIdentity("Arduino Nano 33 IoT", "arduino:samd:nano_33_iot"),
)


def default_board_table() -> BoardTable:
    """Return a fresh table holding the built-in boards."""
    return BoardTable(DEFAULT_BOARDS)
