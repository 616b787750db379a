from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import cast

import redis

from stackdrop.core.events import SessionEvent


@dataclass(frozen=True, slots=True)
class SessionStream:
    session_id: str

    @property
    def key(self) -> str:
        return f"session:{self.session_id}:events"


def event_fields(event: SessionEvent) -> dict[str, str]:
    # Stream values are flat strings; the payload travels as JSON.
    return {
        "type": event.type,
        "run_id": str(event.run_id),
        "payload": json.dumps(event.payload),
        "ts": event.ts.isoformat(),
    }


def publish_events(*, r: redis.Redis, stream: SessionStream, events: Sequence[SessionEvent]) -> list[str]:
    """Append events to a session's stream, in order."""

    ids: list[str] = []
    for event in events:
        stream_id = r.xadd(stream.key, event_fields(event))
        ids.append(cast(str, stream_id))
    return ids


def read_events(*, r: redis.Redis, stream: SessionStream, start: str = "-", end: str = "+", count: int = 20) -> list[dict[str, object]]:
    entries = r.xrange(stream.key, min=start, max=end, count=count)
    messages: list[dict[str, object]] = []
    for entry_id, fields in entries:
        decoded: dict[str, object] = dict(fields)
        if "payload" in fields:
            decoded["payload"] = json.loads(fields["payload"])
        messages.append({"id": entry_id, "fields": decoded})
    return messages
