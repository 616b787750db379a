from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Protocol

import redis

logger = logging.getLogger(__name__)

BEST_SCORE_KEY = "HighScore"
FINAL_SCORE_KEY = "FinalScore"

DEFAULT_PREFS_PREFIX = "stackdrop:prefs:"


class HighScoreStore(Protocol):
    """Integer key/value preferences with an explicit save step.

    Reads must see earlier writes from the same process even before `save()`.
    """

    def get_int(self, key: str, default: int = 0) -> int: ...

    def set_int(self, key: str, value: int) -> None: ...

    def save(self) -> None: ...


@dataclass(frozen=True, slots=True)
class HighScoreRecord:
    best_score: int
    last_final_score: int


def read_record(store: HighScoreStore) -> HighScoreRecord:
    return HighScoreRecord(
        best_score=store.get_int(BEST_SCORE_KEY, 0),
        last_final_score=store.get_int(FINAL_SCORE_KEY, 0),
    )


class InMemoryHighScoreStore:
    """Process-local store, used for tests and for hosts without Redis."""

    def __init__(self, initial: dict[str, int] | None = None) -> None:
        self._values: dict[str, int] = dict(initial or {})
        self.save_count = 0

    def get_int(self, key: str, default: int = 0) -> int:
        return self._values.get(key, default)

    def set_int(self, key: str, value: int) -> None:
        self._values[key] = int(value)

    def save(self) -> None:
        self.save_count += 1


def get_prefs_prefix() -> str:
    return os.environ.get("STACKDROP_PREFS_PREFIX", DEFAULT_PREFS_PREFIX)


class RedisHighScoreStore:
    """Redis-backed preferences.

    Writes are buffered until `save()`, which flushes them in one pipeline.
    Buffered values are served to reads so callers always see their own writes.
    """

    def __init__(self, *, r: redis.Redis, prefix: str | None = None) -> None:
        self._r = r
        self._prefix = prefix if prefix is not None else get_prefs_prefix()
        self._pending: dict[str, int] = {}

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get_int(self, key: str, default: int = 0) -> int:
        if key in self._pending:
            return self._pending[key]
        try:
            raw = self._r.get(self._key(key))
        except redis.RedisError as e:
            logger.warning("high score read failed for %s, using default %s: %s", key, default, e)
            return default
        if raw is None:
            return default
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("ignoring non-integer value %r stored under %s", raw, key)
            return default

    def set_int(self, key: str, value: int) -> None:
        self._pending[key] = int(value)

    def save(self) -> None:
        """Flush buffered writes.

        On failure the writes stay buffered (and readable) and the next save retries them.
        """

        if not self._pending:
            return
        try:
            pipe = self._r.pipeline()
            for key, value in self._pending.items():
                pipe.set(self._key(key), str(value))
            pipe.execute()
        except redis.RedisError as e:
            logger.warning("high score save failed, keeping %s pending write(s): %s", len(self._pending), e)
            return
        self._pending.clear()
