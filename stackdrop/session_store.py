from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4

import redis

from stackdrop.config import GameSettings, settings_from_env
from stackdrop.core.session import SessionEngine
from stackdrop.high_scores import RedisHighScoreStore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class SessionHandle:
    session_id: UUID
    engine: SessionEngine
    created_at: datetime
    # For reproducibility/debugging.
    seed: int


class SessionRegistry:
    """In-process registry of live sessions keyed by session id.

    Engines hold per-frame state (cursor, countdown, rebuild timer) and stay in
    memory; only the high-score record and the event streams go to Redis.
    """

    def __init__(self) -> None:
        self._sessions: dict[UUID, SessionHandle] = {}

    def create(
        self,
        *,
        r: redis.Redis,
        settings: GameSettings | None = None,
        seed: int | None = None,
    ) -> SessionHandle:
        if seed is None:
            seed = random.SystemRandom().randint(1, 2**31 - 1)

        engine = SessionEngine(
            store=RedisHighScoreStore(r=r),
            settings=settings or settings_from_env(),
            rng=random.Random(seed),
        )
        handle = SessionHandle(session_id=uuid4(), engine=engine, created_at=_now(), seed=seed)
        self._sessions[handle.session_id] = handle
        logger.info("created session %s (seed=%s)", handle.session_id, seed)
        return handle

    def get(self, session_id: UUID) -> SessionHandle | None:
        return self._sessions.get(session_id)

    def list_sessions(self) -> list[SessionHandle]:
        return sorted(self._sessions.values(), key=lambda h: h.created_at)

    def discard(self, session_id: UUID) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def clear(self) -> None:
        self._sessions.clear()


registry = SessionRegistry()
