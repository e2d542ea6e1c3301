from collections import deque
from typing import Any, Callable, Optional, Union

from chip8.cpu import Cpu
from chip8.exceptions import EmulatorError
from chip8.frame_buffer import FrameBuffer
from chip8.key_matrix import Chip8Key, KeyMatrix
from chip8.memory import Memory
from chip8.rom import Rom
from chip8.state import Chip8State


class Chip8:
    """
    A complete CHIP-8 machine: CPU, memory, display and keypad.

    Not thread-safe by itself; the scheduler thread is its only driver. The
    frame buffer and key matrix are the pieces handed out to the host.

    Events (register with :meth:`on`):
        ``"draw"``   after a tick that changed the frame buffer, with the frame buffer.
        ``"timer"``  after each 60Hz tick, with ``(DT, ST)``.
    """

    def __init__(self, trace: bool = False, seed: Optional[int] = None) -> None:
        self.cpu = Cpu(seed=seed)
        self.cpu.trace = trace
        self.memory = Memory()
        self.frame_buffer = FrameBuffer()
        self.key_matrix = KeyMatrix()
        self.paused: bool = False
        self.last_released_key: Optional[Chip8Key] = None
        self._events: dict[str, deque[Callable]] = {}

    def __repr__(self) -> str:
        return f"<Chip8 {self.cpu!r} paused={self.paused}>"

    def on(self, event_name: str):
        def decorator(func: Callable):
            self._events.setdefault(event_name, deque()).append(func)
            return func

        return decorator

    def _emit(self, event_name: str, *args: Any, **kwargs: Any) -> None:
        callbacks = self._events.get(event_name)
        if not callbacks:
            return

        for callback in callbacks:
            if not callable(callback):
                raise EmulatorError(ValueError(f"Callback {callback} is not Callable"))
            callback(*args, **kwargs)

    def load_rom(self, rom: Union[Rom, bytes, bytearray]) -> int:
        data = rom.to_bytes() if isinstance(rom, Rom) else rom
        return self.memory.load_rom(data)

    # RUN STATE

    def pause(self) -> None:
        self.paused = True

    def unpause(self) -> None:
        self.paused = False

    def is_paused(self) -> bool:
        return self.paused

    def set_last_released_key(self, key: Chip8Key) -> None:
        """Record a key release for a pending ``LD Vx, K``. Ignored while paused."""
        if not self.paused:
            self.last_released_key = key

    def take_last_released_key(self) -> Optional[Chip8Key]:
        key, self.last_released_key = self.last_released_key, None
        return key

    # EXECUTION

    def tick(self) -> bool:
        """Run one instruction. Returns True if the host needs to redraw."""
        redraw = self.cpu.tick(self.memory, self.frame_buffer, self.key_matrix, self.take_last_released_key())
        if redraw:
            self._emit("draw", self.frame_buffer)
        return redraw

    def tick_60hz(self) -> None:
        self.cpu.tick_60hz()
        self._emit("timer", self.cpu.registers.DT, self.cpu.registers.ST)

    # SAVE STATE

    def to_state(self) -> Chip8State:
        return Chip8State(
            registers=self.cpu.registers.copy(),
            memory=self.memory.to_bytes(),
            frame_buffer=self.frame_buffer.to_bits(),
            key_matrix=self.key_matrix.to_bits(),
            last_released_key=self.last_released_key,
            awaiting_register=self.cpu.awaiting_register,
        )

    def snapshot(self) -> bytes:
        return self.to_state().to_bytes()

    @classmethod
    def from_state(cls, state: Chip8State, trace: bool = False) -> "Chip8":
        """Rebuild a machine from a saved state. The result is always running, never paused."""
        machine = cls(trace=trace)
        machine.cpu.registers = state.registers.copy()
        if state.awaiting_register is not None:
            machine.cpu.await_key(state.awaiting_register)
        machine.memory = Memory.from_bytes(state.memory)
        machine.frame_buffer.load(state.frame_buffer)
        machine.key_matrix.load(state.key_matrix)
        machine.last_released_key = state.last_released_key
        machine.paused = False
        return machine

    @classmethod
    def restore(cls, blob: bytes, trace: bool = False) -> "Chip8":
        return cls.from_state(Chip8State.from_bytes(blob), trace=trace)
