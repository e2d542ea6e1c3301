import threading
from concurrent.futures import CancelledError, Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from types import TracebackType
from typing import Optional, Type, Union

from logger import log as _log
from returns.result import Failure
from util.config import Config, load_config

from chip8.channel import (
    ChannelDisconnected,
    Draw,
    Fault,
    KeyReleased,
    Message,
    Pause,
    Save,
    Shutdown,
    Snapshot,
    Unpause,
    duplex,
)
from chip8.chip8 import Chip8
from chip8.exceptions import Chip8LoadError, EmulatorError
from chip8.frame_buffer import FrameBuffer
from chip8.key_matrix import Chip8Key, KeyMatrix
from chip8.rom import Rom
from chip8.scheduler import Scheduler
from chip8.state import Chip8State

SNAPSHOT_POLL: float = 0.05


class Chip8Handle:
    """
    Host side of a running CHIP-8 session.

    The scheduler thread owns the machine. The host only touches the shared
    frame buffer and key matrix and talks to the thread through the duplex
    channel. Use one of the constructors (:meth:`start`, :meth:`from_rom_file`,
    :meth:`from_save_file`, :meth:`restore`); each raises
    :class:`Chip8LoadError` before any thread is started if its input is bad.

    Example::

        with Chip8Handle.from_rom_file("roms/PONG") as session:
            while session.is_alive():
                if session.poll_draw():
                    render(session.frame_buffer.to_array())
    """

    def __init__(self, machine: Chip8, config: Optional[Config] = None) -> None:
        cfg = config if config is not None else load_config()
        machine.cpu.trace = cfg["debug"]["trace"]

        self._machine = machine
        self._host, scheduler_end = duplex()
        self._scheduler = Scheduler(
            machine,
            scheduler_end,
            tick_interval=cfg["timing"]["tick_interval_ms"] / 1000.0,
            timer_hz=cfg["timing"]["timer_hz"],
        )
        self._thread = threading.Thread(target=self._scheduler.run, name="Chip8 Scheduler Thread", daemon=True)
        self._shut_down = False
        self.fault: Optional[EmulatorError] = None

    def __repr__(self) -> str:
        return f"<Chip8Handle alive={self.is_alive()} fault={self.fault!r}>"

    def __enter__(self) -> "Chip8Handle":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.shutdown()

    def _run(self) -> "Chip8Handle":
        self._thread.start()
        return self

    # CONSTRUCTORS

    @classmethod
    def start(cls, rom_bytes: bytes, config: Optional[Config] = None) -> "Chip8Handle":
        result = Rom.from_bytes(rom_bytes)
        if isinstance(result, Failure):
            raise Chip8LoadError(result.failure())
        machine = Chip8()
        machine.load_rom(result.unwrap())
        return cls(machine, config)._run()

    @classmethod
    def from_rom_file(cls, path: Union[str, Path], config: Optional[Config] = None) -> "Chip8Handle":
        result = Rom.from_file(path)
        if isinstance(result, Failure):
            raise Chip8LoadError(result.failure())
        rom = result.unwrap()
        _log.info(f"Loaded {rom!r}")
        machine = Chip8()
        machine.load_rom(rom)
        return cls(machine, config)._run()

    @classmethod
    def from_save_file(cls, path: Union[str, Path], config: Optional[Config] = None) -> "Chip8Handle":
        result = Chip8State.from_file(path)
        if isinstance(result, Failure):
            raise Chip8LoadError(result.failure())
        return cls(Chip8.from_state(result.unwrap()), config)._run()

    @classmethod
    def restore(cls, blob: bytes, config: Optional[Config] = None) -> "Chip8Handle":
        try:
            machine = Chip8.restore(blob)
        except ValueError as e:
            raise Chip8LoadError(f"Corrupt save state: {e}") from e
        return cls(machine, config)._run()

    # SHARED STATE

    @property
    def frame_buffer(self) -> FrameBuffer:
        return self._machine.frame_buffer

    @property
    def key_matrix(self) -> KeyMatrix:
        return self._machine.key_matrix

    # COMMANDS

    def _send(self, message: Message) -> None:
        try:
            self._host.send(message)
        except ChannelDisconnected:
            _log.debug(f"Dropped {message!r}: session is shut down")

    def send_key_press(self, key: Union[int, Chip8Key]) -> None:
        """Raises ValueError for a key outside 0x0-0xF."""
        self.key_matrix.press(Chip8Key(key))

    def send_key_release(self, key: Union[int, Chip8Key]) -> None:
        """Raises ValueError for a key outside 0x0-0xF."""
        key = Chip8Key(key)
        self.key_matrix.release(key)
        self._send(KeyReleased(key))

    def send_pause(self) -> None:
        self._send(Pause())

    def send_unpause(self) -> None:
        self._send(Unpause())

    def send_save(self, path: Union[str, Path]) -> None:
        """Fire-and-forget; the scheduler logs the outcome."""
        self._send(Save(Path(path)))

    def poll_draw(self) -> bool:
        """True if at least one redraw is pending. Drains every pending event."""
        redraw = False
        for message in self._host.drain():
            match message:
                case Draw():
                    redraw = True
                case Fault(error=error):
                    self.fault = error
        return redraw

    def snapshot(self) -> bytes:
        """Serialized machine state, taken on the scheduler thread while it runs."""
        if not self.is_alive():
            return self._machine.snapshot()

        future: Future[bytes] = Future()
        self._send(Snapshot(future))
        while True:
            try:
                return future.result(timeout=SNAPSHOT_POLL)
            except CancelledError:
                self._thread.join()
                break
            except FutureTimeoutError:
                if not self.is_alive():
                    break
        # the thread stopped before answering, the machine is no longer shared
        return self._machine.snapshot()

    # LIFECYCLE

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def shutdown(self) -> None:
        """Stop the scheduler and wait for the in-flight tick to finish. Idempotent."""
        if self._shut_down:
            return
        self._shut_down = True

        self._send(Shutdown())
        self._host.close()
        if self._thread.ident is not None:
            self._thread.join()
        self.poll_draw()
        _log.info("Session shut down")
