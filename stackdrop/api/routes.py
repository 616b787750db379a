from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

import redis
from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status

from stackdrop.api.deps import get_redis, get_registry
from stackdrop.api.models import (
    EventModel,
    GameOverSummary,
    HighScoreResponse,
    SessionCreateRequest,
    SessionListResponse,
    SessionState,
    SessionUpdate,
    TickRequest,
)
from stackdrop.config import settings_from_env
from stackdrop.core.events import SessionEvent
from stackdrop.core.session import AttemptOutcome
from stackdrop.high_scores import RedisHighScoreStore, read_record
from stackdrop.input import InputEvent, dispatch_input, event_for_key
from stackdrop.session_store import SessionHandle, SessionRegistry
from stackdrop.streams import SessionStream, publish_events, read_events
from stackdrop.websocket_hub import hub

router = APIRouter()


def _require_session(registry: SessionRegistry, session_id: UUID) -> SessionHandle:
    handle = registry.get(session_id)
    if handle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return handle


def _state(handle: SessionHandle) -> SessionState:
    return SessionState.from_snapshot(
        session_id=handle.session_id,
        created_at=handle.created_at,
        seed=handle.seed,
        snap=handle.engine.snapshot(),
    )


async def _publish(*, r: redis.Redis, handle: SessionHandle, events: Sequence[SessionEvent]) -> None:
    if not events:
        return
    sid = str(handle.session_id)
    publish_events(r=r, stream=SessionStream(session_id=sid), events=events)
    await hub.publish(sid, events)


async def _finish(
    *,
    r: redis.Redis,
    handle: SessionHandle,
    events: Sequence[SessionEvent],
    outcome: AttemptOutcome | None = None,
) -> SessionUpdate:
    await _publish(r=r, handle=handle, events=events)
    return SessionUpdate(
        state=_state(handle),
        events=[EventModel.from_event(e) for e in events],
        outcome=outcome,
    )


@router.websocket("/ws/session/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: UUID) -> None:
    sid = str(session_id)
    await hub.subscribe(sid, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await hub.unsubscribe(sid, websocket)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/session", response_model=SessionState, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest | None = None,
    r: redis.Redis = Depends(get_redis),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionState:
    payload = payload or SessionCreateRequest()
    try:
        settings = settings_from_env().with_overrides(**payload.overrides())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    handle = registry.create(r=r, settings=settings, seed=payload.seed)
    return _state(handle)


@router.get("/session", response_model=SessionListResponse)
async def list_sessions_route(registry: SessionRegistry = Depends(get_registry)) -> SessionListResponse:
    return SessionListResponse(sessions=[_state(h) for h in registry.list_sessions()])


@router.get("/session/{session_id}", response_model=SessionState)
async def get_session_route(session_id: UUID, registry: SessionRegistry = Depends(get_registry)) -> SessionState:
    return _state(_require_session(registry, session_id))


@router.delete("/session/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_route(session_id: UUID, registry: SessionRegistry = Depends(get_registry)) -> Response:
    if not registry.discard(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

    await hub.close_session(str(session_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/session/{session_id}/input", response_model=SessionUpdate)
async def input_route(
    session_id: UUID,
    event: InputEvent,
    r: redis.Redis = Depends(get_redis),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionUpdate:
    handle = _require_session(registry, session_id)
    result = dispatch_input(engine=handle.engine, event=event)
    return await _finish(r=r, handle=handle, events=result.events, outcome=result.outcome)


@router.post("/session/{session_id}/keys/{key}", response_model=SessionUpdate)
async def key_route(
    session_id: UUID,
    key: str,
    r: redis.Redis = Depends(get_redis),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionUpdate:
    handle = _require_session(registry, session_id)
    try:
        event = event_for_key(key)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    result = dispatch_input(engine=handle.engine, event=event)
    return await _finish(r=r, handle=handle, events=result.events, outcome=result.outcome)


@router.post("/session/{session_id}/tick", response_model=SessionUpdate)
async def tick_route(
    session_id: UUID,
    payload: TickRequest,
    r: redis.Redis = Depends(get_redis),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionUpdate:
    handle = _require_session(registry, session_id)
    try:
        events = handle.engine.tick(payload.delta_seconds)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return await _finish(r=r, handle=handle, events=events)


@router.post("/session/{session_id}/retry", response_model=SessionUpdate)
async def retry_route(
    session_id: UUID,
    r: redis.Redis = Depends(get_redis),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionUpdate:
    handle = _require_session(registry, session_id)
    events = handle.engine.retry()
    return await _finish(r=r, handle=handle, events=events)


@router.get("/session/{session_id}/summary", response_model=GameOverSummary)
async def summary_route(session_id: UUID, registry: SessionRegistry = Depends(get_registry)) -> GameOverSummary:
    handle = _require_session(registry, session_id)
    engine = handle.engine
    if engine.accepting_input:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Run is still in progress")

    return GameOverSummary(
        session_id=handle.session_id,
        run_id=engine.run_id,
        final_score=engine.clock.score,
        best_score=engine.best_score,
    )


@router.get("/session/{session_id}/events")
async def session_events_route(
    session_id: UUID,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
    registry: SessionRegistry = Depends(get_registry),
) -> dict[str, object]:
    """Debug endpoint: read a session's event stream from Redis."""

    _require_session(registry, session_id)
    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")

    stream = SessionStream(session_id=str(session_id))
    try:
        messages = read_events(r=r, stream=stream, start=start, end=end, count=count)
    except redis.RedisError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return {"session_id": str(session_id), "stream": stream.key, "messages": messages}


@router.get("/high-scores", response_model=HighScoreResponse)
async def high_scores_route(r: redis.Redis = Depends(get_redis)) -> HighScoreResponse:
    record = read_record(RedisHighScoreStore(r=r))
    return HighScoreResponse(best_score=record.best_score, last_final_score=record.last_final_score)
