import threading
from typing import Final

import numpy as np
from bitarray import bitarray  # type: ignore
from numpy.typing import NDArray

WIDTH: Final[int] = 64
HEIGHT: Final[int] = 32
PIXEL_COUNT: Final[int] = WIDTH * HEIGHT


class FrameBuffer:
    """
    64x32 monochrome display shared between the emulation thread and the host.

    Pixels are drawn with an XOR blit. The emulation thread is the only writer;
    the host reads through :meth:`to_array` to render. The lock is held for a
    single pixel access (or one whole-buffer copy), never across a blocking call.
    """

    def __init__(self) -> None:
        self._pixels: NDArray[np.bool_] = np.zeros((HEIGHT, WIDTH), dtype=np.bool_)
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<FrameBuffer {WIDTH}x{HEIGHT} lit={self.lit_count()}>"

    def xor(self, x: int, y: int, value: bool) -> bool:
        """XOR one pixel. Returns True if the pixel went from on to off."""
        with self._lock:
            old_val = bool(self._pixels[y, x])
            new_val = old_val ^ bool(value)
            self._pixels[y, x] = new_val
        return old_val and not new_val

    def get(self, x: int, y: int) -> bool:
        with self._lock:
            return bool(self._pixels[y, x])

    def clear(self) -> None:
        with self._lock:
            self._pixels[:] = False

    def lit_count(self) -> int:
        with self._lock:
            return int(np.count_nonzero(self._pixels))

    def to_array(self) -> NDArray[np.bool_]:
        """Copy of the pixel grid, shape ``(32, 64)``, indexed ``[y, x]``."""
        with self._lock:
            return self._pixels.copy()

    def to_bits(self) -> bitarray:
        """Row-major packing of all 2048 pixels."""
        bits = bitarray()
        bits.pack(self.to_array().tobytes())
        return bits

    def load(self, bits: bitarray) -> None:
        if len(bits) != PIXEL_COUNT:
            raise ValueError(f"Frame buffer needs {PIXEL_COUNT} bits, got {len(bits)}")
        pixels = np.frombuffer(bits.unpack(), dtype=np.bool_).reshape((HEIGHT, WIDTH))
        with self._lock:
            self._pixels = pixels.copy()
