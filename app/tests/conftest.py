import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from chip8.chip8 import Chip8  # noqa: E402


def program(*opcodes: int) -> bytes:
    """Assemble big-endian opcodes into a ROM image."""
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


@pytest.fixture
def machine() -> Chip8:
    return Chip8(seed=1234)


@pytest.fixture
def run():
    """Load opcodes into a machine and tick once per opcode."""

    def _run(machine: Chip8, *opcodes: int, ticks: int = 0) -> list[bool]:
        machine.load_rom(program(*opcodes))
        return [machine.tick() for _ in range(ticks or len(opcodes))]

    return _run
