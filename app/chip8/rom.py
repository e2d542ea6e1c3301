from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from logger import log
from numpy.typing import NDArray
from returns.result import Failure, Result, Success

from chip8.memory import MAX_ROM_SIZE


class Rom:
    """
    A CHIP-8 program image.

    CHIP-8 ROMs have no header: the file is raw bytecode copied verbatim to
    0x200. Images longer than the 3584 bytes that fit are accepted; the tail is
    dropped with a warning. Empty images are rejected: a session started from
    one would only ever execute zeroed memory.
    """

    def __init__(self) -> None:
        self.file: str = ""
        self.data: NDArray[np.uint8] = np.zeros(0, dtype=np.uint8)

    def __repr__(self) -> str:
        return f"<Rom file={self.file!r} size={len(self.data)} bytes>"

    def __len__(self) -> int:
        return len(self.data)

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> Result["Rom", str]:
        """
        Validate a raw ROM image.

        Args:
            data: Raw bytes of the ROM file

        Returns:
            Result containing either a Rom instance or an error string.
        """
        if not isinstance(data, (bytes, bytearray)):
            return Failure(f"Expected bytes or bytearray, got {type(data).__name__}")

        if len(data) == 0:
            return Failure("ROM is empty")

        arr = np.frombuffer(bytes(data), dtype=np.uint8)
        if len(arr) > MAX_ROM_SIZE:
            log.warning(f"Extra {len(arr) - MAX_ROM_SIZE} bytes at end of ROM ignored")
            arr = arr[:MAX_ROM_SIZE]

        obj = cls()
        obj.data = arr.copy()
        return Success(obj)

    @classmethod
    def is_valid_file(cls, filepath: Union[Path, str]) -> Tuple[bool, Optional[str]]:
        """Returns ``(is_valid, error_message)``."""
        try:
            with open(str(filepath), "rb") as f:
                data = f.read()
        except OSError as e:
            return False, f"Failed to read file: {e}"

        result = cls.from_bytes(data)
        if isinstance(result, Success):
            return True, None
        else:
            return False, result.failure()

    @classmethod
    def from_file(cls, filepath: Union[Path, str]) -> Result["Rom", str]:
        try:
            with open(filepath, "rb") as f:
                data = f.read()
        except OSError as e:
            return Failure(f"Failed to read file {filepath}: {e}")

        def attach_file(rom: "Rom") -> "Rom":
            rom.file = str(filepath)
            return rom

        return cls.from_bytes(data).map(attach_file)
