from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import Any

from fastapi import WebSocket

from stackdrop.core.events import SessionEvent

logger = logging.getLogger(__name__)


def event_message(*, session_id: str, event: SessionEvent) -> dict[str, Any]:
    return {"session_id": session_id, **event.to_dict()}


class SessionWebSocketHub:
    """In-process fan-out of session events to WebSocket subscribers.

    Each emitted batch is delivered to every subscriber in emission order. A
    subscriber whose send fails is dropped before the rest of the batch, so one
    dead socket never stalls the others.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def subscribe(self, session_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._subscribers[session_id].add(websocket)

    async def unsubscribe(self, session_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            subs = self._subscribers.get(session_id)
            if subs is None:
                return
            subs.discard(websocket)
            if not subs:
                del self._subscribers[session_id]

    async def subscriber_count(self, session_id: str) -> int:
        async with self._lock:
            return len(self._subscribers.get(session_id, ()))

    async def publish(self, session_id: str, events: Sequence[SessionEvent]) -> int:
        """Send `events` in order; returns how many subscribers received the whole batch."""

        if not events:
            return 0
        async with self._lock:
            subs = list(self._subscribers.get(session_id, ()))

        messages = [event_message(session_id=session_id, event=e) for e in events]
        delivered = 0
        for ws in subs:
            try:
                for message in messages:
                    await ws.send_json(message)
            except Exception as e:
                logger.debug("dropping subscriber of session %s: %s", session_id, e)
                await self.unsubscribe(session_id, ws)
                continue
            delivered += 1
        return delivered

    async def close_session(self, session_id: str) -> None:
        """Close and forget every subscriber of a session that no longer exists."""

        async with self._lock:
            subs = self._subscribers.pop(session_id, set())
        for ws in subs:
            try:
                await ws.close()
            except Exception as e:
                logger.debug("closing subscriber of session %s failed: %s", session_id, e)


hub = SessionWebSocketHub()
