"""
CHIP-8 instruction set.

Each 16-bit opcode decodes to exactly one frozen dataclass below. Opcodes that
match no known pattern decode to :class:`Unknown`, which carries the raw bits
and is executed as a logged no-op.

Nibble naming follows the usual CHIP-8 tables:

    nnn  lowest 12 bits (address)
    kk   lowest 8 bits (byte)
    x    bits 8-11 (register)
    y    bits 4-7 (register)
    n    lowest 4 bits (nibble)
"""

from dataclasses import dataclass
from typing import ClassVar, Tuple


@dataclass(frozen=True)
class Instruction:
    """Base class of every decoded instruction."""

    @property
    def mnemonic(self) -> str:
        return type(self).__name__.upper()

    def __str__(self) -> str:
        return self.mnemonic


# CONTROL FLOW


@dataclass(frozen=True)
class Cls(Instruction):
    """00E0 - clear the screen."""


@dataclass(frozen=True)
class Ret(Instruction):
    """00EE - return from subroutine."""


@dataclass(frozen=True)
class Jp(Instruction):
    """1nnn - jump to nnn."""

    addr: int

    def __str__(self) -> str:
        return f"JP 0x{self.addr:03X}"


@dataclass(frozen=True)
class JpV0(Instruction):
    """Bnnn - jump to nnn + V0."""

    addr: int

    def __str__(self) -> str:
        return f"JP V0, 0x{self.addr:03X}"


@dataclass(frozen=True)
class Call(Instruction):
    """2nnn - call subroutine at nnn."""

    addr: int

    def __str__(self) -> str:
        return f"CALL 0x{self.addr:03X}"


# SKIPS


@dataclass(frozen=True)
class SeByte(Instruction):
    """3xkk - skip next if Vx == kk."""

    vx: int
    byte: int

    def __str__(self) -> str:
        return f"SE V{self.vx:X}, 0x{self.byte:02X}"


@dataclass(frozen=True)
class SneByte(Instruction):
    """4xkk - skip next if Vx != kk."""

    vx: int
    byte: int

    def __str__(self) -> str:
        return f"SNE V{self.vx:X}, 0x{self.byte:02X}"


@dataclass(frozen=True)
class SeReg(Instruction):
    """5xy0 - skip next if Vx == Vy."""

    vx: int
    vy: int

    def __str__(self) -> str:
        return f"SE V{self.vx:X}, V{self.vy:X}"


@dataclass(frozen=True)
class SneReg(Instruction):
    """9xy0 - skip next if Vx != Vy."""

    vx: int
    vy: int

    def __str__(self) -> str:
        return f"SNE V{self.vx:X}, V{self.vy:X}"


@dataclass(frozen=True)
class Skp(Instruction):
    """Ex9E - skip next if key Vx is pressed."""

    vx: int

    def __str__(self) -> str:
        return f"SKP V{self.vx:X}"


@dataclass(frozen=True)
class Sknp(Instruction):
    """ExA1 - skip next if key Vx is not pressed."""

    vx: int

    def __str__(self) -> str:
        return f"SKNP V{self.vx:X}"


# REGISTER LOADS AND ARITHMETIC


@dataclass(frozen=True)
class LdByte(Instruction):
    """6xkk - Vx = kk."""

    vx: int
    byte: int

    def __str__(self) -> str:
        return f"LD V{self.vx:X}, 0x{self.byte:02X}"


@dataclass(frozen=True)
class AddByte(Instruction):
    """7xkk - Vx += kk, no carry flag."""

    vx: int
    byte: int

    def __str__(self) -> str:
        return f"ADD V{self.vx:X}, 0x{self.byte:02X}"


@dataclass(frozen=True)
class _RegPair(Instruction):
    vx: int
    vy: int

    _OP: ClassVar[str] = ""

    def __str__(self) -> str:
        return f"{self._OP} V{self.vx:X}, V{self.vy:X}"


@dataclass(frozen=True)
class LdReg(_RegPair):
    """8xy0 - Vx = Vy."""

    _OP: ClassVar[str] = "LD"


@dataclass(frozen=True)
class OrReg(_RegPair):
    """8xy1 - Vx |= Vy."""

    _OP: ClassVar[str] = "OR"


@dataclass(frozen=True)
class AndReg(_RegPair):
    """8xy2 - Vx &= Vy."""

    _OP: ClassVar[str] = "AND"


@dataclass(frozen=True)
class XorReg(_RegPair):
    """8xy3 - Vx ^= Vy."""

    _OP: ClassVar[str] = "XOR"


@dataclass(frozen=True)
class AddRegCarry(_RegPair):
    """8xy4 - Vx += Vy, VF = carry."""

    _OP: ClassVar[str] = "ADD"


@dataclass(frozen=True)
class SubReg(_RegPair):
    """8xy5 - Vx -= Vy, VF = NOT borrow."""

    _OP: ClassVar[str] = "SUB"


@dataclass(frozen=True)
class SubNReg(_RegPair):
    """8xy7 - Vx = Vy - Vx, VF = NOT borrow."""

    _OP: ClassVar[str] = "SUBN"


@dataclass(frozen=True)
class Shr(Instruction):
    """8xy6 - Vx >>= 1, VF = old bit 0."""

    vx: int

    def __str__(self) -> str:
        return f"SHR V{self.vx:X}"


@dataclass(frozen=True)
class Shl(Instruction):
    """8xyE - Vx <<= 1, VF = old bit 7."""

    vx: int

    def __str__(self) -> str:
        return f"SHL V{self.vx:X}"


@dataclass(frozen=True)
class Rnd(Instruction):
    """Cxkk - Vx = random byte & kk."""

    vx: int
    byte: int

    def __str__(self) -> str:
        return f"RND V{self.vx:X}, 0x{self.byte:02X}"


# INDEX REGISTER AND MEMORY


@dataclass(frozen=True)
class LdI(Instruction):
    """Annn - I = nnn."""

    addr: int

    def __str__(self) -> str:
        return f"LD I, 0x{self.addr:03X}"


@dataclass(frozen=True)
class AddI(Instruction):
    """Fx1E - I += Vx."""

    vx: int

    def __str__(self) -> str:
        return f"ADD I, V{self.vx:X}"


@dataclass(frozen=True)
class LdFont(Instruction):
    """Fx29 - I = address of font glyph for digit Vx."""

    vx: int

    def __str__(self) -> str:
        return f"LD F, V{self.vx:X}"


@dataclass(frozen=True)
class StoreBcd(Instruction):
    """Fx33 - store BCD of Vx at I, I+1, I+2."""

    vx: int

    def __str__(self) -> str:
        return f"LD B, V{self.vx:X}"


@dataclass(frozen=True)
class Store(Instruction):
    """Fx55 - store V0..Vx at I."""

    vx: int

    def __str__(self) -> str:
        return f"LD [I], V{self.vx:X}"


@dataclass(frozen=True)
class Read(Instruction):
    """Fx65 - read V0..Vx from I."""

    vx: int

    def __str__(self) -> str:
        return f"LD V{self.vx:X}, [I]"


# TIMERS AND INPUT


@dataclass(frozen=True)
class LdRegDt(Instruction):
    """Fx07 - Vx = DT."""

    vx: int

    def __str__(self) -> str:
        return f"LD V{self.vx:X}, DT"


@dataclass(frozen=True)
class LdDt(Instruction):
    """Fx15 - DT = Vx."""

    vx: int

    def __str__(self) -> str:
        return f"LD DT, V{self.vx:X}"


@dataclass(frozen=True)
class LdSt(Instruction):
    """Fx18 - ST = Vx."""

    vx: int

    def __str__(self) -> str:
        return f"LD ST, V{self.vx:X}"


@dataclass(frozen=True)
class KeyWait(Instruction):
    """Fx0A - wait for a key release, store it in Vx."""

    vx: int

    def __str__(self) -> str:
        return f"LD V{self.vx:X}, K"


# DISPLAY


@dataclass(frozen=True)
class Drw(Instruction):
    """Dxyn - draw n-byte sprite from I at (Vx, Vy), VF = collision."""

    vx: int
    vy: int
    nibble: int

    def __str__(self) -> str:
        return f"DRW V{self.vx:X}, V{self.vy:X}, {self.nibble}"


@dataclass(frozen=True)
class Unknown(Instruction):
    """Any opcode that matches no known pattern."""

    opcode: int

    def __str__(self) -> str:
        return f"??? 0x{self.opcode:04X}"


def nibbles(opcode: int) -> Tuple[int, int, int, int]:
    """Split an opcode into its four nibbles, most significant first."""
    return (opcode >> 12) & 0xF, (opcode >> 8) & 0xF, (opcode >> 4) & 0xF, opcode & 0xF


def decode(opcode: int) -> Instruction:
    """Decode one 16-bit opcode. Never raises; unmatched opcodes decode to ``Unknown``."""
    opcode &= 0xFFFF
    nnn = opcode & 0x0FFF
    kk = opcode & 0x00FF
    op, x, y, n = nibbles(opcode)

    match (op, x, y, n):
        case (0x0, 0x0, 0xE, 0x0):
            return Cls()
        case (0x0, 0x0, 0xE, 0xE):
            return Ret()
        case (0x1, _, _, _):
            return Jp(nnn)
        case (0x2, _, _, _):
            return Call(nnn)
        case (0x3, _, _, _):
            return SeByte(x, kk)
        case (0x4, _, _, _):
            return SneByte(x, kk)
        case (0x5, _, _, 0x0):
            return SeReg(x, y)
        case (0x6, _, _, _):
            return LdByte(x, kk)
        case (0x7, _, _, _):
            return AddByte(x, kk)
        case (0x8, _, _, 0x0):
            return LdReg(x, y)
        case (0x8, _, _, 0x1):
            return OrReg(x, y)
        case (0x8, _, _, 0x2):
            return AndReg(x, y)
        case (0x8, _, _, 0x3):
            return XorReg(x, y)
        case (0x8, _, _, 0x4):
            return AddRegCarry(x, y)
        case (0x8, _, _, 0x5):
            return SubReg(x, y)
        case (0x8, _, _, 0x6):
            return Shr(x)
        case (0x8, _, _, 0x7):
            return SubNReg(x, y)
        case (0x8, _, _, 0xE):
            return Shl(x)
        case (0x9, _, _, 0x0):
            return SneReg(x, y)
        case (0xA, _, _, _):
            return LdI(nnn)
        case (0xB, _, _, _):
            return JpV0(nnn)
        case (0xC, _, _, _):
            return Rnd(x, kk)
        case (0xD, _, _, _):
            return Drw(x, y, n)
        case (0xE, _, 0x9, 0xE):
            return Skp(x)
        case (0xE, _, 0xA, 0x1):
            return Sknp(x)
        case (0xF, _, 0x0, 0x7):
            return LdRegDt(x)
        case (0xF, _, 0x0, 0xA):
            return KeyWait(x)
        case (0xF, _, 0x1, 0x5):
            return LdDt(x)
        case (0xF, _, 0x1, 0x8):
            return LdSt(x)
        case (0xF, _, 0x1, 0xE):
            return AddI(x)
        case (0xF, _, 0x2, 0x9):
            return LdFont(x)
        case (0xF, _, 0x3, 0x3):
            return StoreBcd(x)
        case (0xF, _, 0x5, 0x5):
            return Store(x)
        case (0xF, _, 0x6, 0x5):
            return Read(x)
        case _:
            return Unknown(opcode)
