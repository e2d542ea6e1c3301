from typing import Final, Mapping, Optional

import pygame
from logger import log as _log

from chip8.key_matrix import Chip8Key

# physical layout   CHIP-8 keypad
#   1 2 3 4           1 2 3 C
#   Q W E R           4 5 6 D
#   A S D F           7 8 9 E
#   Z X C V           A 0 B F
DEFAULT_KEYMAP: Final[dict[int, Chip8Key]] = {
    pygame.K_1: Chip8Key.K1,
    pygame.K_2: Chip8Key.K2,
    pygame.K_3: Chip8Key.K3,
    pygame.K_4: Chip8Key.KC,
    pygame.K_q: Chip8Key.K4,
    pygame.K_w: Chip8Key.K5,
    pygame.K_e: Chip8Key.K6,
    pygame.K_r: Chip8Key.KD,
    pygame.K_a: Chip8Key.K7,
    pygame.K_s: Chip8Key.K8,
    pygame.K_d: Chip8Key.K9,
    pygame.K_f: Chip8Key.KE,
    pygame.K_z: Chip8Key.KA,
    pygame.K_x: Chip8Key.K0,
    pygame.K_c: Chip8Key.KB,
    pygame.K_v: Chip8Key.KF,
}


def key_code_from_name(name: str) -> int:
    """``"q"`` -> ``pygame.K_q``, ``"enter"`` -> ``pygame.K_RETURN``. Raises ValueError."""
    py_key_name = name.strip()
    if py_key_name.lower() == "enter":
        py_key_name = "RETURN"

    py_key_name = py_key_name.lower() if len(py_key_name) == 1 else py_key_name.upper()
    try:
        return getattr(pygame, f"K_{py_key_name}")
    except AttributeError:
        raise ValueError(f"Invalid key name: {name!r}") from None


class KeyMapping:
    """
    One-to-one binding between physical key codes and CHIP-8 keys.

    ``_forward`` (code -> key) and ``_reverse`` (key -> code) always hold the
    same pairs; every mutation updates both.
    """

    def __init__(self) -> None:
        self._forward: dict[int, Chip8Key] = {}
        self._reverse: dict[Chip8Key, int] = {}
        self.reset_keymap()

    def __repr__(self) -> str:
        pairs = ", ".join(f"{pygame.key.name(code) or code}->{key.name}" for code, key in self._forward.items())
        return f"<KeyMapping {pairs}>"

    def __len__(self) -> int:
        return len(self._forward)

    def reset_keymap(self) -> None:
        self._forward = dict(DEFAULT_KEYMAP)
        self._reverse = {key: code for code, key in self._forward.items()}

    def get_chip8_key(self, code: int) -> Optional[Chip8Key]:
        return self._forward.get(code)

    def get_key(self, chip8_key: Chip8Key) -> Optional[int]:
        return self._reverse.get(chip8_key)

    def remap(self, chip8_key: Chip8Key, code: int) -> None:
        """Bind ``code`` to ``chip8_key``; any previous binding of either side is dropped."""
        old_code = self._reverse.pop(chip8_key, None)
        if old_code is not None:
            del self._forward[old_code]

        old_key = self._forward.pop(code, None)
        if old_key is not None:
            del self._reverse[old_key]

        self._forward[code] = chip8_key
        self._reverse[chip8_key] = code

    @classmethod
    def from_config(cls, keyboard: Mapping[str, str]) -> "KeyMapping":
        """Build a mapping from the ``[keyboard]`` config section, starting from the defaults."""
        mapping = cls()
        for chip8_name, key_name in keyboard.items():
            try:
                chip8_key = Chip8Key.from_name(chip8_name)
                code = key_code_from_name(key_name)
            except ValueError as e:
                _log.warning(f"Invalid key binding '{chip8_name} = {key_name}' in config: {e}")
                continue
            mapping.remap(chip8_key, code)
        return mapping
