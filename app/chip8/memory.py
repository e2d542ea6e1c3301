from typing import Final, Union

import numpy as np
from logger import log
from numpy.typing import NDArray

from chip8.exceptions import OutOfBoundsAccess

# 16 glyphs (0-F), 5 rows each
FONT_DATA: Final[bytes] = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)

FONT_START_ADDR: Final[int] = 0x050
FONT_GLYPH_SIZE: Final[int] = 5
ROM_START_ADDR: Final[int] = 0x200
MEMORY_SIZE: Final[int] = 4096
MAX_ROM_SIZE: Final[int] = MEMORY_SIZE - ROM_START_ADDR  # 3584 bytes


class Memory:
    """
    Flat 4 KB CHIP-8 address space.

    The font glyphs are installed at ``FONT_START_ADDR`` on construction and
    ROM images are copied from ``ROM_START_ADDR`` upwards, so a ROM can never
    overwrite the font. Every access at an address >= 4096 raises
    :class:`OutOfBoundsAccess`.
    """

    def __init__(self) -> None:
        self.data: NDArray[np.uint8] = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        self._load_font()

    def __repr__(self) -> str:
        return f"<Memory size={MEMORY_SIZE} rom_start=${ROM_START_ADDR:03X}>"

    def read(self, addr: int) -> int:
        if not 0 <= addr < MEMORY_SIZE:
            raise OutOfBoundsAccess(addr)
        return int(self.data[addr])

    def write(self, addr: int, byte: int) -> None:
        if not 0 <= addr < MEMORY_SIZE:
            raise OutOfBoundsAccess(addr)
        self.data[addr] = byte & 0xFF

    def load_rom(self, rom: Union[bytes, bytearray, NDArray[np.uint8]]) -> int:
        """
        Copy a ROM image into memory starting at ``ROM_START_ADDR``.

        Bytes that do not fit are dropped, not rejected.

        Returns:
            The number of bytes actually copied.
        """
        image = np.frombuffer(bytes(rom), dtype=np.uint8)
        if len(image) > MAX_ROM_SIZE:
            log.warning(f"ROM is {len(image)} bytes, extra {len(image) - MAX_ROM_SIZE} bytes ignored")
            image = image[:MAX_ROM_SIZE]
        self.data[ROM_START_ADDR : ROM_START_ADDR + len(image)] = image
        return len(image)

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> "Memory":
        """Rebuild a memory image from exactly ``MEMORY_SIZE`` raw bytes."""
        if len(data) != MEMORY_SIZE:
            raise ValueError(f"Memory image must be {MEMORY_SIZE} bytes, got {len(data)}")
        memory = cls.__new__(cls)
        memory.data = np.frombuffer(data, dtype=np.uint8).copy()
        return memory

    def _load_font(self) -> None:
        self.data[FONT_START_ADDR : FONT_START_ADDR + len(FONT_DATA)] = np.frombuffer(FONT_DATA, dtype=np.uint8)
