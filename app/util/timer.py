import time
from typing import Any, Callable, Optional


class Timer:
    """Pausable stopwatch over a monotonic clock.

    Paused time is never counted, so a timer paused for an arbitrary wall-clock
    interval resumes with exactly the elapsed value it had when it was paused.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self.start_time: Optional[float] = None
        self.elapsed_time: float = 0.0
        self.running: bool = False
        self._clock = clock or time.perf_counter  # High-resolution monotonic clock

    def start(self) -> None:
        if not self.running:
            self.start_time = self._clock()
            self.running = True

    def stop(self) -> None:
        if self.running:
            assert self.start_time is not None
            self.elapsed_time += self._clock() - self.start_time
            self.start_time = None
            self.running = False

    def pause(self) -> None:
        self.stop()

    def resume(self) -> None:
        self.start()

    def get_elapsed_time(self) -> float:
        if self.running:
            assert self.start_time is not None
            return self.elapsed_time + (self._clock() - self.start_time)
        return self.elapsed_time

    def reset(self) -> None:
        self.start_time = None
        self.elapsed_time = 0.0
        self.running = False

    def restart(self) -> None:
        """Zero the elapsed time and keep (or start) running."""
        self.reset()
        self.start()

    def is_running(self) -> bool:
        return self.running

    def __str__(self) -> str:
        elapsed = self.get_elapsed_time()
        state = "running" if self.running else "stopped"
        return f"Timer({state}, {elapsed:.4f}s)"

    def __repr__(self) -> str:
        return f"Timer(running={self.running}, elapsed_time={self.elapsed_time:.6f}, start_time={self.start_time})"

    def __format__(self, format_spec: str) -> str:
        return format(self.get_elapsed_time(), format_spec)

    def __call__(self) -> float:
        """Shortcut for get_elapsed_time()."""
        return self.get_elapsed_time()

    def _get_comparable_value(self, other: Any) -> float:
        if isinstance(other, Timer):
            return other.get_elapsed_time()
        elif isinstance(other, (int, float)):
            return float(other)
        else:
            return NotImplemented

    def __lt__(self, other: Any) -> bool:
        val = self._get_comparable_value(other)
        if val is NotImplemented:
            return NotImplemented
        return self.get_elapsed_time() < val

    def __ge__(self, other: Any) -> bool:
        val = self._get_comparable_value(other)
        if val is NotImplemented:
            return NotImplemented
        return self.get_elapsed_time() >= val
