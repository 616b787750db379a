from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from stackdrop.core.palette import DEFAULT_PALETTE_SIZE


@dataclass(frozen=True, slots=True)
class GameSettings:
    stack_size: int = 10
    palette_size: int = DEFAULT_PALETTE_SIZE
    initial_time: float = 30.0
    hit_reward: int = 1
    miss_penalty: float = 5.0
    rebuild_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.stack_size < 1:
            raise ValueError("stack_size must be at least 1")
        if self.palette_size < 1:
            raise ValueError("palette_size must be at least 1")
        if self.initial_time <= 0:
            raise ValueError("initial_time must be positive")
        if self.hit_reward < 0:
            raise ValueError("hit_reward must not be negative")
        if self.miss_penalty < 0:
            raise ValueError("miss_penalty must not be negative")
        if self.rebuild_delay < 0:
            raise ValueError("rebuild_delay must not be negative")

    def with_overrides(self, **overrides: Any) -> "GameSettings":
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


_ENV_FIELDS: dict[str, tuple[str, type]] = {
    "STACKDROP_STACK_SIZE": ("stack_size", int),
    "STACKDROP_PALETTE_SIZE": ("palette_size", int),
    "STACKDROP_INITIAL_TIME": ("initial_time", float),
    "STACKDROP_HIT_REWARD": ("hit_reward", int),
    "STACKDROP_MISS_PENALTY": ("miss_penalty", float),
    "STACKDROP_REBUILD_DELAY": ("rebuild_delay", float),
}


def settings_from_env(*, env_file: Path | None = None) -> GameSettings:
    """Read GameSettings from STACKDROP_* environment variables.

    If `env_file` exists it is loaded first without overriding variables that are
    already set.
    """

    if env_file is not None and env_file.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_file, override=False)

    values: dict[str, Any] = {}
    for env_name, (field_name, cast) in _ENV_FIELDS.items():
        raw = os.environ.get(env_name)
        if raw is None or not raw.strip():
            continue
        try:
            values[field_name] = cast(raw)
        except ValueError as e:
            raise ValueError(f"{env_name} must be a {cast.__name__}, got {raw!r}") from e

    return GameSettings(**values)
