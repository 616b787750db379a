from __future__ import annotations

import math
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from stackdrop.core.events import SessionEvent
from stackdrop.core.session import AttemptOutcome, SessionSnapshot
from stackdrop.fsm import RunStatus


class SessionCreateRequest(BaseModel):
    seed: int | None = Field(default=None, ge=1)

    # Per-session overrides of the environment defaults.
    stack_size: int | None = Field(default=None, ge=1, le=100)
    palette_size: int | None = Field(default=None, ge=1, le=16)
    initial_time: float | None = Field(default=None, gt=0)
    hit_reward: int | None = Field(default=None, ge=0)
    miss_penalty: float | None = Field(default=None, ge=0)
    rebuild_delay: float | None = Field(default=None, ge=0)

    def overrides(self) -> dict[str, Any]:
        return self.model_dump(exclude={"seed"}, exclude_none=True)


class TickRequest(BaseModel):
    delta_seconds: float = Field(..., ge=0)


class EventModel(BaseModel):
    type: str
    run_id: int
    payload: dict[str, Any]
    ts: datetime

    @classmethod
    def from_event(cls, event: SessionEvent) -> "EventModel":
        return cls(type=event.type, run_id=event.run_id, payload=event.payload, ts=event.ts)


class SessionState(BaseModel):
    session_id: UUID
    created_at: datetime
    seed: int

    run_id: int
    status: RunStatus
    score: int
    time_remaining: float
    # Whole seconds, rounded up, as the countdown label shows it.
    display_seconds: int
    best_score: int

    colors: list[int | None]
    yaws: list[float]
    cursor: int
    current_color: int | None

    rebuild_pending: bool = False
    rebuild_in: float | None = None

    @classmethod
    def from_snapshot(cls, *, session_id: UUID, created_at: datetime, seed: int, snap: SessionSnapshot) -> "SessionState":
        return cls(
            session_id=session_id,
            created_at=created_at,
            seed=seed,
            run_id=snap.run_id,
            status=snap.status,
            score=snap.score,
            time_remaining=snap.time_remaining,
            display_seconds=math.ceil(snap.time_remaining),
            best_score=snap.best_score,
            colors=snap.colors,
            yaws=snap.yaws,
            cursor=snap.cursor,
            current_color=snap.current_color,
            rebuild_pending=snap.rebuild_pending,
            rebuild_in=snap.rebuild_in,
        )


class SessionUpdate(BaseModel):
    state: SessionState
    events: list[EventModel] = Field(default_factory=list)
    # Set for color presses only.
    outcome: AttemptOutcome | None = None


class SessionListResponse(BaseModel):
    sessions: list[SessionState]


class GameOverSummary(BaseModel):
    session_id: UUID
    run_id: int
    final_score: int
    best_score: int
    retry_hint: str = "Press Space to retry!"


class HighScoreResponse(BaseModel):
    best_score: int
    last_final_score: int
