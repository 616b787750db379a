from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "STACK_REBUILT",
    "STACK_CLEARED",
    "BLOCK_COMMITTED",
    "PENALTY_APPLIED",
    "SCORE_CHANGED",
    "HIGH_SCORE_CHANGED",
    "RUN_ENDED",
]


@dataclass(frozen=True, slots=True)
class SessionEvent:
    type: EventType
    run_id: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, run_id: int, payload: dict[str, Any]) -> "SessionEvent":
        return SessionEvent(type=type, run_id=run_id, payload=payload, ts=datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "run_id": self.run_id, "payload": self.payload, "ts": self.ts.isoformat()}
