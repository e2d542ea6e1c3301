"""
Duplex channel between the host and the scheduler thread.

Two unbounded one-way queues joined into a pair of endpoints. Receiving never
blocks: :meth:`Endpoint.try_recv` returns ``None`` when nothing is pending and
raises :class:`ChannelDisconnected` once the far end has closed and every
message it sent has been consumed.
"""

import threading
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, SimpleQueue
from typing import Optional, Tuple

from chip8.exceptions import EmulatorError
from chip8.key_matrix import Chip8Key


class Message:
    pass


# host -> scheduler


@dataclass(frozen=True)
class Shutdown(Message):
    pass


@dataclass(frozen=True)
class Pause(Message):
    pass


@dataclass(frozen=True)
class Unpause(Message):
    pass


@dataclass(frozen=True)
class KeyReleased(Message):
    key: Chip8Key


@dataclass(frozen=True)
class Save(Message):
    path: Path


@dataclass(frozen=True)
class Snapshot(Message):
    """Ask the scheduler for a serialized state; the answer is set on ``future``."""

    future: "Future[bytes]"


# scheduler -> host


@dataclass(frozen=True)
class Draw(Message):
    pass


@dataclass(frozen=True)
class Fault(Message):
    error: EmulatorError


class ChannelDisconnected(Exception):
    """The far end of the channel has been closed and nothing is left to receive."""


class _Pipe:
    def __init__(self) -> None:
        self.queue: SimpleQueue[Message] = SimpleQueue()
        self.closed = threading.Event()


class Endpoint:
    def __init__(self, outbound: _Pipe, inbound: _Pipe) -> None:
        self._outbound = outbound
        self._inbound = inbound

    def send(self, message: Message) -> None:
        if self._outbound.closed.is_set():
            raise ChannelDisconnected("send on a closed channel")
        self._outbound.queue.put(message)

    def try_recv(self) -> Optional[Message]:
        try:
            return self._inbound.queue.get_nowait()
        except Empty:
            if self._inbound.closed.is_set():
                raise ChannelDisconnected("far end closed") from None
            return None

    def drain(self) -> list[Message]:
        """Every pending message, oldest first. Never raises."""
        messages = []
        while True:
            try:
                messages.append(self._inbound.queue.get_nowait())
            except Empty:
                return messages

    def close(self) -> None:
        """Stop sending; the far end sees ``ChannelDisconnected`` after draining."""
        self._outbound.closed.set()


def duplex() -> Tuple[Endpoint, Endpoint]:
    """Returns ``(host_end, scheduler_end)``."""
    to_scheduler = _Pipe()
    to_host = _Pipe()
    return Endpoint(to_scheduler, to_host), Endpoint(to_host, to_scheduler)
