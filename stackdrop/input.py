"""Input events and the default keyboard mapping.

Hosts translate whatever they receive (keys, buttons, HTTP bodies) into one of the
two input events and hand it to `dispatch_input`; the engine itself never sees keys.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field

from stackdrop.core.events import SessionEvent
from stackdrop.core.palette import Color
from stackdrop.core.session import AttemptOutcome, SessionEngine

logger = logging.getLogger(__name__)


class ColorPressed(BaseModel):
    type: Literal["color"] = "color"
    color: int = Field(..., ge=0)


class RetryPressed(BaseModel):
    type: Literal["retry"] = "retry"


InputEvent = ColorPressed | RetryPressed


DEFAULT_KEYMAP: dict[str, InputEvent] = {
    "d": ColorPressed(color=Color.cyan.value),
    "f": ColorPressed(color=Color.green.value),
    "j": ColorPressed(color=Color.red.value),
    "k": ColorPressed(color=Color.yellow.value),
    "space": RetryPressed(),
}


def event_for_key(key: str, *, keymap: dict[str, InputEvent] | None = None) -> InputEvent:
    mapping = keymap if keymap is not None else DEFAULT_KEYMAP
    event = mapping.get(key.strip().casefold())
    if event is None:
        raise ValueError(f"Unbound key: {key!r}")
    return event


@dataclass(frozen=True, slots=True)
class DispatchResult:
    kind: Literal["color", "retry"]
    # None for retry, which has no match outcome.
    outcome: AttemptOutcome | None
    events: list[SessionEvent] = field(default_factory=list)


def dispatch_input(*, engine: SessionEngine, event: InputEvent) -> DispatchResult:
    if isinstance(event, RetryPressed):
        return DispatchResult(kind="retry", outcome=None, events=engine.retry())

    result = engine.attempt_color(event.color)
    if result.outcome == AttemptOutcome.rejected:
        logger.debug("ignored color %s: run %s has ended", event.color, engine.run_id)
    return DispatchResult(kind="color", outcome=result.outcome, events=result.events)
