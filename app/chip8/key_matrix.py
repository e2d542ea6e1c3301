import threading
from enum import IntEnum
from typing import Final, Union

from bitarray import bitarray  # type: ignore

KEY_COUNT: Final[int] = 16


class Chip8Key(IntEnum):
    """The sixteen logical keys of the CHIP-8 hex keypad."""

    K0 = 0x0
    K1 = 0x1
    K2 = 0x2
    K3 = 0x3
    K4 = 0x4
    K5 = 0x5
    K6 = 0x6
    K7 = 0x7
    K8 = 0x8
    K9 = 0x9
    KA = 0xA
    KB = 0xB
    KC = 0xC
    KD = 0xD
    KE = 0xE
    KF = 0xF

    @classmethod
    def from_name(cls, name: str) -> "Chip8Key":
        """``"A"`` / ``"a"`` / ``"KA"`` -> ``Chip8Key.KA``."""
        name = name.strip().upper()
        if not name.startswith("K"):
            name = f"K{name}"
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Invalid CHIP-8 key name: {name!r}") from None


class KeyMatrix:
    """
    Pressed/released state of the 16 keys, shared between the host and the
    emulation thread.

    The host writes presses and releases, the emulation thread only reads.
    Every access takes the lock for that single key read or write.
    """

    def __init__(self) -> None:
        self._bits = bitarray(KEY_COUNT)
        self._bits.setall(0)
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<KeyMatrix pressed={self.pressed_keys()}>"

    def is_pressed(self, index: Union[int, Chip8Key]) -> bool:
        if not 0 <= index < KEY_COUNT:
            return False
        with self._lock:
            return bool(self._bits[index])

    def press(self, index: Union[int, Chip8Key]) -> None:
        if not 0 <= index < KEY_COUNT:
            return
        with self._lock:
            self._bits[index] = 1

    def release(self, index: Union[int, Chip8Key]) -> None:
        if not 0 <= index < KEY_COUNT:
            return
        with self._lock:
            self._bits[index] = 0

    def pressed_keys(self) -> list[Chip8Key]:
        with self._lock:
            return [Chip8Key(i) for i in range(KEY_COUNT) if self._bits[i]]

    def to_bits(self) -> bitarray:
        with self._lock:
            return self._bits.copy()

    def load(self, bits: bitarray) -> None:
        if len(bits) != KEY_COUNT:
            raise ValueError(f"Key matrix needs {KEY_COUNT} bits, got {len(bits)}")
        with self._lock:
            self._bits = bits.copy()
