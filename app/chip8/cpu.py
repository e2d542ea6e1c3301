from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from string import Template
from typing import Final, List, Optional

import numpy as np
from logger import log as _logger

from chip8 import instruction as ins
from chip8.exceptions import StackOverflow, StackUnderflow
from chip8.frame_buffer import HEIGHT, WIDTH, FrameBuffer
from chip8.key_matrix import Chip8Key, KeyMatrix
from chip8.memory import FONT_GLYPH_SIZE, FONT_START_ADDR, ROM_START_ADDR, Memory

STACK_SIZE: Final[int] = 16
REGISTER_COUNT: Final[int] = 16
VF: Final[int] = 0xF
SPRITE_WIDTH: Final[int] = 8

# Template
TEMPLATE: Final[Template] = Template("${PC}: opcode: ${OP} | ${INS} | I: ${I} | SP: ${SP} | DT: ${DT} | ST: ${ST}")


class RunState(Enum):
    """Execution state of the CPU between ticks."""

    Running = 0
    AwaitingKey = 1


@dataclass
class Registers:
    V: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    I: int = 0
    PC: int = ROM_START_ADDR
    SP: int = 0
    DT: int = 0
    ST: int = 0
    Stack: List[int] = field(default_factory=lambda: [0] * STACK_SIZE)

    def copy(self) -> "Registers":
        return Registers(list(self.V), self.I, self.PC, self.SP, self.DT, self.ST, list(self.Stack))


class Cpu:
    """
    CHIP-8 execution engine: register file, call stack, fetch/decode/execute
    and the 60Hz timer decay.

    The CPU never blocks. ``LD Vx, K`` switches it to ``RunState.AwaitingKey``;
    while in that state a tick consumes the released key handed in by the
    caller (if any) and resumes, otherwise it does nothing.
    """

    def __init__(self, registers: Optional[Registers] = None, seed: Optional[int] = None) -> None:
        self.registers: Registers = registers if registers is not None else Registers()
        self.state: RunState = RunState.Running
        self.awaiting_register: Optional[int] = None
        self.trace: bool = False
        self.tracelog: deque[str] = deque(maxlen=2048)
        self._rng = np.random.default_rng(seed)

    def __repr__(self) -> str:
        r = self.registers
        return f"<Cpu PC=${r.PC:04X} I=${r.I:04X} SP={r.SP} DT={r.DT} ST={r.ST} state={self.state.name}>"

    @property
    def is_awaiting_key(self) -> bool:
        return self.state is RunState.AwaitingKey

    def await_key(self, register: int) -> None:
        self.state = RunState.AwaitingKey
        self.awaiting_register = register

    def tick_60hz(self) -> None:
        r = self.registers
        if r.DT > 0:
            r.DT -= 1
        if r.ST > 0:
            r.ST -= 1

    def tick(
        self,
        memory: Memory,
        frame_buffer: FrameBuffer,
        key_matrix: KeyMatrix,
        released_key: Optional[Chip8Key] = None,
    ) -> bool:
        """
        Run one instruction.

        Args:
            memory: address space owned by the emulation thread.
            frame_buffer: shared display.
            key_matrix: shared keypad state.
            released_key: most recent key release, consumed only by a pending ``LD Vx, K``.

        Returns:
            True if the frame buffer changed and the host should redraw.

        Raises:
            OutOfBoundsAccess, StackOverflow, StackUnderflow: the program is malformed.
                Side effects of earlier steps of the faulting instruction are kept.
        """
        if self.state is RunState.AwaitingKey:
            if released_key is not None:
                assert self.awaiting_register is not None
                self.registers.V[self.awaiting_register] = int(released_key)
                self.state = RunState.Running
                self.awaiting_register = None
            return False

        opcode = self._fetch(memory)
        instruction = ins.decode(opcode)

        if self.trace:
            self._tracelogger(opcode, instruction)

        return self.execute(instruction, memory, frame_buffer, key_matrix)

    def _fetch(self, memory: Memory) -> int:
        pc = self.registers.PC
        msb = memory.read(pc)
        lsb = memory.read(pc + 1)
        self.registers.PC = (pc + 2) & 0xFFFF
        return (msb << 8) | lsb

    def _tracelogger(self, opcode: int, instruction: ins.Instruction) -> None:
        r = self.registers
        line = TEMPLATE.substitute(
            PC=f"{(r.PC - 2) & 0xFFFF:04X}",
            OP=f"{opcode:04X}",
            INS=f"{str(instruction):<16}",
            I=f"{r.I:04X}",
            SP=f"{r.SP:X}",
            DT=f"{r.DT:02X}",
            ST=f"{r.ST:02X}",
        )
        self.tracelog.append(line)
        _logger.debug(line)

    def execute(
        self,
        instruction: ins.Instruction,
        memory: Memory,
        frame_buffer: FrameBuffer,
        key_matrix: KeyMatrix,
    ) -> bool:
        """Execute an already decoded instruction. Returns True on a redraw."""
        r = self.registers
        V = r.V

        match instruction:
            # CONTROL FLOW
            case ins.Cls():
                frame_buffer.clear()
                return True

            case ins.Ret():
                if r.SP == 0:
                    raise StackUnderflow((r.PC - 2) & 0xFFFF)
                r.SP -= 1
                r.PC = r.Stack[r.SP]

            case ins.Call(addr=addr):
                if r.SP >= STACK_SIZE:
                    raise StackOverflow((r.PC - 2) & 0xFFFF)
                r.Stack[r.SP] = r.PC
                r.SP += 1
                r.PC = addr

            case ins.Jp(addr=addr):
                r.PC = addr

            case ins.JpV0(addr=addr):
                r.PC = addr + V[0]

            # SKIPS
            case ins.SeByte(vx=x, byte=byte):
                if V[x] == byte:
                    r.PC += 2

            case ins.SneByte(vx=x, byte=byte):
                if V[x] != byte:
                    r.PC += 2

            case ins.SeReg(vx=x, vy=y):
                if V[x] == V[y]:
                    r.PC += 2

            case ins.SneReg(vx=x, vy=y):
                if V[x] != V[y]:
                    r.PC += 2

            case ins.Skp(vx=x):
                if key_matrix.is_pressed(V[x]):
                    r.PC += 2

            case ins.Sknp(vx=x):
                if not key_matrix.is_pressed(V[x]):
                    r.PC += 2

            # REGISTER LOADS AND ARITHMETIC
            case ins.LdByte(vx=x, byte=byte):
                V[x] = byte

            case ins.AddByte(vx=x, byte=byte):
                V[x] = (V[x] + byte) & 0xFF

            case ins.LdReg(vx=x, vy=y):
                V[x] = V[y]

            case ins.OrReg(vx=x, vy=y):
                V[x] |= V[y]

            case ins.AndReg(vx=x, vy=y):
                V[x] &= V[y]

            case ins.XorReg(vx=x, vy=y):
                V[x] ^= V[y]

            case ins.AddRegCarry(vx=x, vy=y):
                total = V[x] + V[y]
                V[x] = total & 0xFF
                V[VF] = 1 if total > 0xFF else 0

            case ins.SubReg(vx=x, vy=y):
                no_borrow = V[x] >= V[y]
                V[x] = (V[x] - V[y]) & 0xFF
                V[VF] = 1 if no_borrow else 0

            case ins.SubNReg(vx=x, vy=y):
                no_borrow = V[y] >= V[x]
                V[x] = (V[y] - V[x]) & 0xFF
                V[VF] = 1 if no_borrow else 0

            case ins.Shr(vx=x):
                old = V[x]
                V[x] = old >> 1
                V[VF] = old & 0x01

            case ins.Shl(vx=x):
                old = V[x]
                V[x] = (old << 1) & 0xFF
                V[VF] = (old >> 7) & 0x01

            case ins.Rnd(vx=x, byte=byte):
                V[x] = int(self._rng.integers(0, 256)) & byte

            # INDEX REGISTER AND MEMORY
            case ins.LdI(addr=addr):
                r.I = addr

            case ins.AddI(vx=x):
                r.I = (r.I + V[x]) & 0xFFFF

            case ins.LdFont(vx=x):
                r.I = FONT_START_ADDR + (V[x] & 0x0F) * FONT_GLYPH_SIZE

            case ins.StoreBcd(vx=x):
                value = V[x]
                memory.write(r.I, value // 100)
                memory.write(r.I + 1, (value // 10) % 10)
                memory.write(r.I + 2, value % 10)

            case ins.Store(vx=x):
                for offset in range(x + 1):
                    memory.write(r.I + offset, V[offset])

            case ins.Read(vx=x):
                for offset in range(x + 1):
                    V[offset] = memory.read(r.I + offset)

            # TIMERS AND INPUT
            case ins.LdRegDt(vx=x):
                V[x] = r.DT

            case ins.LdDt(vx=x):
                r.DT = V[x]

            case ins.LdSt(vx=x):
                r.ST = V[x]

            case ins.KeyWait(vx=x):
                self.await_key(x)

            # DISPLAY
            case ins.Drw(vx=x, vy=y, nibble=nibble):
                return self._draw(V[x], V[y], nibble, memory, frame_buffer)

            case ins.Unknown(opcode=opcode):
                _logger.error(f"Unknown OpCode: ${opcode:04X} at PC=${(r.PC - 2) & 0xFFFF:04X}")

        return False

    def _draw(self, vx_val: int, vy_val: int, nibble: int, memory: Memory, frame_buffer: FrameBuffer) -> bool:
        r = self.registers
        # read the whole sprite first so a bad I faults before any pixel changes
        sprite = [memory.read(r.I + offset) for offset in range(nibble)]

        x = vx_val % WIDTH
        y = vy_val % HEIGHT

        r.V[VF] = 0
        for cy in range(y, min(y + nibble, HEIGHT)):
            row = sprite[cy - y]
            for cx in range(x, min(x + SPRITE_WIDTH, WIDTH)):
                bit = (row >> (7 - (cx - x))) & 1
                if frame_buffer.xor(cx, cy, bit == 1):
                    r.V[VF] = 1

        return True
