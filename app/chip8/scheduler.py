import time
from pathlib import Path
from typing import Callable, Final, Optional

from logger import log as _log
from util.timer import Timer

from chip8.channel import (
    ChannelDisconnected,
    Draw,
    Endpoint,
    Fault,
    KeyReleased,
    Message,
    Pause,
    Save,
    Shutdown,
    Snapshot,
    Unpause,
)
from chip8.chip8 import Chip8
from chip8.exceptions import EmulatorError

DEFAULT_TICK_INTERVAL: Final[float] = 0.002  # seconds
DEFAULT_TIMER_HZ: Final[float] = 60.0
PAUSED_SLEEP: Final[float] = 0.005


class Scheduler:
    """
    Drives one :class:`Chip8` on the session thread.

    Two wall-clock cadences: one instruction every ``tick_interval`` seconds
    and one 60Hz timer tick every ``1 / timer_hz`` seconds. The timer cadence
    is measured with a pausable :class:`Timer`, so time spent paused is never
    counted towards the next timer tick.

    Fault policy: any exception escaping a tick halts the session. It is
    logged, wrapped in :class:`EmulatorError`, posted to the host as
    :class:`Fault` and kept in :attr:`fault`.
    """

    def __init__(
        self,
        machine: Chip8,
        endpoint: Endpoint,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        timer_hz: float = DEFAULT_TIMER_HZ,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.machine = machine
        self.endpoint = endpoint
        self.tick_interval = tick_interval
        self.timer_interval = 1.0 / timer_hz
        self.fault: Optional[EmulatorError] = None
        self.running: bool = True

        self._clock = clock or time.perf_counter
        self._timer = Timer(self._clock)
        self._timer.start()

        @machine.on("draw")
        def _(_frame_buffer) -> None:
            self.endpoint.send(Draw())

    def __repr__(self) -> str:
        return f"<Scheduler running={self.running} paused={self.machine.is_paused()} fault={self.fault!r}>"

    def handle(self, message: Message) -> None:
        match message:
            case Shutdown():
                self.running = False

            case Pause():
                if not self.machine.is_paused():
                    self.machine.pause()
                    self._timer.pause()

            case Unpause():
                if self.machine.is_paused():
                    self.machine.unpause()
                    self._timer.resume()

            case KeyReleased(key=key):
                self.machine.set_last_released_key(key)

            case Save(path=path):
                self._save(path)

            case Snapshot(future=future):
                if future.set_running_or_notify_cancel():
                    future.set_result(self.machine.snapshot())

            case _:
                _log.warning(f"Scheduler ignored unexpected message {message!r}")

    def _save(self, path: Path) -> None:
        try:
            self.machine.to_state().save(path)
        except (OSError, ValueError) as e:
            _log.error(f"Failed to write save state {path}: {e}", exc_info=(type(e), e, e.__traceback__))
            return
        _log.info(f"Save state written to {path}")

    def run_once(self) -> bool:
        """
        One loop iteration: at most one command, then (when running) the timer
        check and one instruction tick. Never waits.

        Returns:
            False once the loop has to stop (shutdown, disconnect or fault).
        """
        try:
            message = self.endpoint.try_recv()
        except ChannelDisconnected:
            self.running = False
            return False

        if message is not None:
            try:
                self.handle(message)
            except Exception as e:
                self._halt(e)
                return False
            if not self.running:
                return False

        if self.machine.is_paused():
            return True

        try:
            if self._timer.get_elapsed_time() >= self.timer_interval:
                self.machine.tick_60hz()
                self._timer.restart()

            self.machine.tick()
        except Exception as e:
            self._halt(e)
            return False

        return True

    def _halt(self, e: Exception) -> None:
        self.fault = e if isinstance(e, EmulatorError) else EmulatorError(e)
        self.running = False
        _log.error(f"Session halted: {self.fault.message}", exc_info=(type(e), e, e.__traceback__))
        self.endpoint.send(Fault(self.fault))

    def run(self) -> None:
        _log.info("Session started")
        try:
            while True:
                started = self._clock()
                if not self.run_once():
                    break
                if self.machine.is_paused():
                    time.sleep(PAUSED_SLEEP)
                    continue
                while self._clock() - started < self.tick_interval:
                    time.sleep(0)
        finally:
            for message in self.endpoint.drain():
                if isinstance(message, Snapshot):
                    message.future.cancel()
            self.endpoint.close()
            _log.info("Session stopped")
