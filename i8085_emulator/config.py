"""
i8085 Emulator — Run Configuration

Profiles follow the same dict-of-settings layout as a target table:
pick one by name, then override individual keys from a JSON file or the
command line.

  classic  — PC=$0000, SP=$FFFF, 64-byte trace window. Unknown opcodes
             are soft no-ops; CY/AC are never computed.
  strict   — as classic, but an unknown opcode stops the run and the add
             family also computes CY/AC.
  trainer  — as classic, with a 256-byte (16 x 16) trace window.
"""

from __future__ import annotations
import json
from dataclasses import dataclass, fields, replace, asdict
from pathlib import Path
from typing import Optional, Union

__all__ = ['ConfigError', 'EmulatorConfig', 'PROFILES', 'DEFAULT_PROFILE',
           'get_profile', 'load_config', 'parse_int']


class ConfigError(ValueError):
    """Raised on an unknown profile, unknown key or out-of-range value."""


@dataclass(frozen=True)
class EmulatorConfig:
    origin: int = 0x0000
    initial_sp: int = 0xFFFF
    window_start: int = 0x0000
    window_length: int = 0x40
    compute_carry: bool = False
    strict_decode: bool = False

    def __post_init__(self):
        for name in ('origin', 'initial_sp', 'window_start'):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= 0xFFFF:
                raise ConfigError(f"{name} must be 0..FFFF, got {value!r}")
        if not isinstance(self.window_length, int) or not 0 <= self.window_length <= 0x10000:
            raise ConfigError(f"window_length must be 0..10000h, got {self.window_length!r}")

    def with_overrides(self, **overrides) -> EmulatorConfig:
        """Return a copy with the non-None overrides applied."""
        known = {f.name for f in fields(self)}
        changes = {}
        for key, value in overrides.items():
            if key not in known:
                raise ConfigError(f"Unknown config key: {key}")
            if value is not None:
                changes[key] = value
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return asdict(self)


PROFILES = {
    "classic": {
        "description": "Documented contract: soft unknown opcodes, no carry",
    },
    "strict": {
        "strict_decode": True,
        "compute_carry": True,
        "description": "Stop on unknown opcodes, complete CY/AC on add",
    },
    "trainer": {
        "window_length": 0x100,
        "description": "16 x 16 memory grid in every trace entry",
    },
}

DEFAULT_PROFILE = "classic"


def get_profile(name: str = DEFAULT_PROFILE) -> EmulatorConfig:
    if name not in PROFILES:
        raise ConfigError(
            f"Unknown profile '{name}' (choose from {', '.join(PROFILES)})")
    settings = {k: v for k, v in PROFILES[name].items() if k != "description"}
    return EmulatorConfig(**settings)


def parse_int(value, key: str = "value") -> int:
    """Accept ints, or strings in hex ('0x50', '$50', '50h') or decimal."""
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected a number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            if text.startswith("$"):
                return int(text[1:], 16)
            if text.lower().endswith("h"):
                return int(text[:-1], 16)
            return int(text)
        except ValueError:
            pass
    raise ConfigError(f"{key}: expected a number, got {value!r}")


def load_config(path: Optional[Union[str, Path]] = None,
                profile: str = DEFAULT_PROFILE) -> EmulatorConfig:
    """Build a config from a profile, then merge a JSON object file over it."""
    config = get_profile(profile)
    if path is None:
        return config

    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path}: invalid JSON ({e})") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"{path}: cannot read ({e})") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be an object")

    overrides = {}
    for key, value in data.items():
        if key in ("compute_carry", "strict_decode"):
            if not isinstance(value, bool):
                raise ConfigError(f"{key}: expected true/false, got {value!r}")
            overrides[key] = value
        else:
            overrides[key] = parse_int(value, key)
    return config.with_overrides(**overrides)
