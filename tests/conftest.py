from __future__ import annotations

import random
from collections.abc import Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient

from stackdrop.core.stack import Stack
from stackdrop.high_scores import InMemoryHighScoreStore


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests independent of STACKDROP_* variables from the developer's shell."""

    for name in (
        "STACKDROP_STACK_SIZE",
        "STACKDROP_PALETTE_SIZE",
        "STACKDROP_INITIAL_TIME",
        "STACKDROP_HIT_REWARD",
        "STACKDROP_MISS_PENALTY",
        "STACKDROP_REBUILD_DELAY",
        "STACKDROP_PREFS_PREFIX",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def store() -> InMemoryHighScoreStore:
    return InMemoryHighScoreStore()


@pytest.fixture()
def scripted_builder():
    """Stack builder that hands out pre-scripted color lists, then repeats the last one."""

    def _make(*scripts: list[int]):
        queue = [list(s) for s in scripts]
        built: list[Stack] = []

        def _build(*, n: int, palette_size: int, rng: random.Random) -> Stack:
            colors = queue.pop(0) if len(queue) > 1 else queue[0]
            stack = Stack.from_colors(colors)
            built.append(stack)
            return stack

        _build.built = built  # type: ignore[attr-defined]
        return _build

    return _make


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """FastAPI TestClient wired to fakeredis and a fresh session registry."""

    from stackdrop.api.deps import get_redis
    from stackdrop.main import app
    from stackdrop.session_store import registry

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> fakeredis.FakeRedis:
        return r

    registry.clear()
    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
    registry.clear()
