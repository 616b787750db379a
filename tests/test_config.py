from __future__ import annotations

import os
from pathlib import Path

import pytest

from stackdrop.config import GameSettings, settings_from_env


def test_defaults() -> None:
    s = settings_from_env()
    assert s == GameSettings(
        stack_size=10,
        palette_size=4,
        initial_time=30.0,
        hit_reward=1,
        miss_penalty=5.0,
        rebuild_delay=1.0,
    )


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STACKDROP_STACK_SIZE", "5")
    monkeypatch.setenv("STACKDROP_MISS_PENALTY", "2.5")
    monkeypatch.setenv("STACKDROP_REBUILD_DELAY", "")

    s = settings_from_env()
    assert s.stack_size == 5
    assert s.miss_penalty == 2.5
    assert s.rebuild_delay == 1.0


def test_env_file_does_not_override_exported_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("STACKDROP_INITIAL_TIME=45\nSTACKDROP_PALETTE_SIZE=6\n", encoding="utf-8")
    monkeypatch.setenv("STACKDROP_PALETTE_SIZE", "3")

    s = settings_from_env(env_file=env_file)
    os.environ.pop("STACKDROP_INITIAL_TIME", None)

    assert s.initial_time == 45.0
    assert s.palette_size == 3


def test_bad_env_value_is_a_value_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STACKDROP_STACK_SIZE", "ten")
    with pytest.raises(ValueError, match="STACKDROP_STACK_SIZE"):
        settings_from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"stack_size": 0},
        {"palette_size": 0},
        {"initial_time": 0},
        {"hit_reward": -1},
        {"miss_penalty": -1.0},
        {"rebuild_delay": -0.5},
    ],
)
def test_invalid_settings_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        GameSettings(**kwargs)


def test_with_overrides_ignores_none() -> None:
    s = GameSettings().with_overrides(stack_size=4, initial_time=None)
    assert s.stack_size == 4
    assert s.initial_time == 30.0
