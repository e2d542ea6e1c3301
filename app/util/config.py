from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, TypedDict, Union

import tomllib
from logger import log as _log
from resources import config_file


class TimingConfig(TypedDict):
    tick_interval_ms: float
    timer_hz: float


class DebugConfig(TypedDict):
    trace: bool


class Config(TypedDict):
    timing: TimingConfig
    debug: DebugConfig
    keyboard: dict[str, str]


DEFAULT_CONFIG: Config = {
    "timing": {"tick_interval_ms": 2.0, "timer_hz": 60.0},
    "debug": {"trace": False},
    # CHIP-8 key -> physical key name
    "keyboard": {
        "1": "1",
        "2": "2",
        "3": "3",
        "C": "4",
        "4": "q",
        "5": "w",
        "6": "e",
        "D": "r",
        "7": "a",
        "8": "s",
        "9": "d",
        "E": "f",
        "A": "z",
        "0": "x",
        "B": "c",
        "F": "v",
    },
}


def _deep_merge(
    target: MutableMapping[str, Any],
    overrides: Mapping[str, Any],
) -> MutableMapping[str, Any]:
    for key, value in overrides.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
    return target


def _validate_config(cfg: Config) -> None:
    tick = cfg["timing"]["tick_interval_ms"]
    if isinstance(tick, bool) or not isinstance(tick, (int, float)) or tick < 0:
        raise ValueError("timing.tick_interval_ms must be a non-negative number")

    hz = cfg["timing"]["timer_hz"]
    if isinstance(hz, bool) or not isinstance(hz, (int, float)) or hz <= 0:
        raise ValueError("timing.timer_hz must be a positive number")

    if not isinstance(cfg["debug"]["trace"], bool):
        raise ValueError("debug.trace must be a boolean")

    for chip8_key, key_name in cfg["keyboard"].items():
        if not isinstance(key_name, str):
            raise ValueError(f"keyboard.{chip8_key} must be a key name string")


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """Load ``config.toml`` over the defaults; any problem falls back to the defaults."""
    file = Path(path) if path is not None else config_file
    if not file.exists():
        return deepcopy(DEFAULT_CONFIG)

    config = deepcopy(DEFAULT_CONFIG)

    try:
        with open(file, "rb") as f:
            data = tomllib.load(f)

        if not isinstance(data, dict):
            raise ValueError("Config file root must be a table (dict).")

        _deep_merge(config, data)
        _validate_config(config)

    except (OSError, ValueError, tomllib.TOMLDecodeError) as e:
        _log.error(f"Failed to load config: {e}", exc_info=(type(e), e, e.__traceback__))
        return deepcopy(DEFAULT_CONFIG)

    return config
