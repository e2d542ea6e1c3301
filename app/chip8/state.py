"""
Save-state blob.

Fixed, versionless big-endian layout::

    V0..VF        16 x u8
    I             u16
    Stack         16 x u16
    PC            u16
    SP, DT, ST    3 x u8
    memory        4096 bytes
    frame buffer  2048 bits (256 bytes, row-major)
    key matrix    16 bits (2 bytes)
    pending key   u8 flag + u8 key
    await-key     u8 register, 0xFF when running
"""

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Optional, Union

from bitarray import bitarray  # type: ignore
from returns.result import Failure, Result, Success

from chip8.cpu import REGISTER_COUNT, STACK_SIZE, Registers
from chip8.frame_buffer import PIXEL_COUNT
from chip8.key_matrix import KEY_COUNT, Chip8Key
from chip8.memory import MEMORY_SIZE

_REGISTERS: Final[struct.Struct] = struct.Struct(f">{REGISTER_COUNT}BH{STACK_SIZE}HHBBB")
_TRAILER: Final[struct.Struct] = struct.Struct(">BBB")

FRAME_BUFFER_BYTES: Final[int] = PIXEL_COUNT // 8
KEY_MATRIX_BYTES: Final[int] = KEY_COUNT // 8
NOT_AWAITING: Final[int] = 0xFF

STATE_SIZE: Final[int] = _REGISTERS.size + MEMORY_SIZE + FRAME_BUFFER_BYTES + KEY_MATRIX_BYTES + _TRAILER.size


@dataclass(frozen=True)
class Chip8State:
    registers: Registers
    memory: bytes
    frame_buffer: bitarray
    key_matrix: bitarray
    last_released_key: Optional[Chip8Key] = None
    awaiting_register: Optional[int] = None

    def to_bytes(self) -> bytes:
        r = self.registers
        head = _REGISTERS.pack(*r.V, r.I, *r.Stack, r.PC, r.SP, r.DT, r.ST)
        trailer = _TRAILER.pack(
            1 if self.last_released_key is not None else 0,
            int(self.last_released_key) if self.last_released_key is not None else 0,
            self.awaiting_register if self.awaiting_register is not None else NOT_AWAITING,
        )
        return b"".join((head, self.memory, self.frame_buffer.tobytes(), self.key_matrix.tobytes(), trailer))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Chip8State":
        """Raises ValueError on a blob of the wrong size or with out-of-range fields."""
        if len(data) != STATE_SIZE:
            raise ValueError(f"Save state must be {STATE_SIZE} bytes, got {len(data)}")

        fields = _REGISTERS.unpack_from(data, 0)
        V = list(fields[:REGISTER_COUNT])
        I = fields[REGISTER_COUNT]
        stack = list(fields[REGISTER_COUNT + 1 : REGISTER_COUNT + 1 + STACK_SIZE])
        PC, SP, DT, ST = fields[REGISTER_COUNT + 1 + STACK_SIZE :]
        if SP > STACK_SIZE:
            raise ValueError(f"Stack pointer {SP} exceeds stack size {STACK_SIZE}")

        offset = _REGISTERS.size
        memory = bytes(data[offset : offset + MEMORY_SIZE])
        offset += MEMORY_SIZE

        frame_buffer = bitarray()
        frame_buffer.frombytes(bytes(data[offset : offset + FRAME_BUFFER_BYTES]))
        offset += FRAME_BUFFER_BYTES

        key_matrix = bitarray()
        key_matrix.frombytes(bytes(data[offset : offset + KEY_MATRIX_BYTES]))
        offset += KEY_MATRIX_BYTES

        has_key, key, awaiting = _TRAILER.unpack_from(data, offset)
        if has_key and key >= KEY_COUNT:
            raise ValueError(f"Invalid pending key {key}")
        if awaiting != NOT_AWAITING and awaiting >= REGISTER_COUNT:
            raise ValueError(f"Invalid await-key register {awaiting}")

        return cls(
            registers=Registers(V, I, PC, SP, DT, ST, stack),
            memory=memory,
            frame_buffer=frame_buffer,
            key_matrix=key_matrix,
            last_released_key=Chip8Key(key) if has_key else None,
            awaiting_register=None if awaiting == NOT_AWAITING else awaiting,
        )

    def save(self, path: Union[str, Path]) -> None:
        """Write the blob to ``path``. OSError propagates to the caller."""
        Path(path).write_bytes(self.to_bytes())

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> Result["Chip8State", str]:
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            return Failure(f"Failed to read save state {path}: {e}")

        try:
            return Success(cls.from_bytes(data))
        except ValueError as e:
            return Failure(f"Corrupt save state {path}: {e}")
