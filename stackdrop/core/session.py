from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol

from stackdrop.config import GameSettings
from stackdrop.core.clock import RunClock
from stackdrop.core.events import EventType, SessionEvent
from stackdrop.core.scheduler import DeferredAction
from stackdrop.core.stack import MatchResult, MatchStack, Stack, build_stack
from stackdrop.fsm import RunStatus
from stackdrop.high_scores import HighScoreStore, read_record

logger = logging.getLogger(__name__)

EventSink = Callable[[SessionEvent], None]


class StackBuilder(Protocol):
    def __call__(self, *, n: int, palette_size: int, rng: random.Random) -> Stack: ...


class AttemptOutcome(StrEnum):
    hit = "hit"
    miss = "miss"
    exhausted = "exhausted"
    rejected = "rejected"


@dataclass(frozen=True, slots=True)
class AttemptResult:
    outcome: AttemptOutcome
    events: list[SessionEvent] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    run_id: int
    colors: list[int | None]
    yaws: list[float]
    cursor: int
    current_color: int | None
    score: int
    time_remaining: float
    status: RunStatus
    best_score: int
    rebuild_pending: bool
    rebuild_in: float | None


def stack_payload(stack: Stack) -> dict[str, Any]:
    return {"colors": stack.colors, "yaws": [b.yaw for b in stack.blocks]}


class SessionEngine:
    """One player's session: the block stack, the run clock and the rebuild timer.

    Every public operation returns the events it emitted, in order, and also
    forwards each one to the optional sink as it happens.

    Input gate: once the run has ended, `attempt_color` is rejected without
    touching the stack or the clock until `retry` is called.
    """

    def __init__(
        self,
        *,
        store: HighScoreStore,
        settings: GameSettings | None = None,
        rng: random.Random | None = None,
        sink: EventSink | None = None,
        builder: StackBuilder = build_stack,
    ) -> None:
        self.settings = settings or GameSettings()
        self._store = store
        self._rng = rng or random.Random()
        self._sink = sink
        self._builder = builder

        self._clock = RunClock(store=store, initial_time=self.settings.initial_time)
        self._rebuild = DeferredAction()
        self._run_id = 0
        self._best_score = read_record(store).best_score
        self._outbox: list[SessionEvent] = []

        self._match = MatchStack(self._build())
        self._emit("STACK_REBUILT", stack_payload(self._match.stack))
        self._outbox = []

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def clock(self) -> RunClock:
        return self._clock

    @property
    def match(self) -> MatchStack:
        return self._match

    @property
    def best_score(self) -> int:
        return self._best_score

    @property
    def accepting_input(self) -> bool:
        return not self._clock.is_ended

    @property
    def rebuild_pending(self) -> bool:
        return self._rebuild.pending

    def attempt_color(self, color: int) -> AttemptResult:
        if not self.accepting_input:
            return AttemptResult(outcome=AttemptOutcome.rejected)

        self._outbox = []
        index = self._match.cursor
        result = self._match.attempt(color)

        if result == MatchResult.hit:
            new_best = self._clock.add_score(self.settings.hit_reward)
            self._emit("BLOCK_COMMITTED", {"index": index, "color": color})
            self._emit("SCORE_CHANGED", {"score": self._clock.score})
            if new_best:
                self._best_score = self._clock.score
                self._emit("HIGH_SCORE_CHANGED", {"best_score": self._best_score})
            if self._match.is_exhausted():
                self._schedule_rebuild()
            outcome = AttemptOutcome.hit
        elif result == MatchResult.miss:
            ended = self._clock.apply_penalty(self.settings.miss_penalty)
            self._emit(
                "PENALTY_APPLIED",
                {"seconds": self.settings.miss_penalty, "time_remaining": self._clock.time_remaining},
            )
            if ended:
                self._on_run_ended()
            outcome = AttemptOutcome.miss
        else:
            if not self._rebuild.pending:
                self._schedule_rebuild()
            outcome = AttemptOutcome.exhausted

        return AttemptResult(outcome=outcome, events=self._drain())

    def tick(self, delta_seconds: float) -> list[SessionEvent]:
        self._outbox = []
        if self._clock.tick(delta_seconds):
            self._on_run_ended()
        elif not self._clock.is_ended:
            self._rebuild.advance(delta_seconds)
        return self._drain()

    def retry(self) -> list[SessionEvent]:
        self._outbox = []
        self._rebuild.cancel()
        self._clock.retry()
        self._run_id += 1
        self._best_score = read_record(self._store).best_score
        logger.info("retry: starting run %s", self._run_id)

        self._replace_stack()
        self._emit("SCORE_CHANGED", {"score": self._clock.score})
        return self._drain()

    def snapshot(self) -> SessionSnapshot:
        stack = self._match.stack
        return SessionSnapshot(
            run_id=self._run_id,
            colors=stack.colors,
            yaws=[b.yaw for b in stack.blocks],
            cursor=self._match.cursor,
            current_color=self._match.current(),
            score=self._clock.score,
            time_remaining=self._clock.time_remaining,
            status=self._clock.status,
            best_score=self._best_score,
            rebuild_pending=self._rebuild.pending,
            rebuild_in=self._rebuild.remaining,
        )

    def _build(self) -> Stack:
        return self._builder(n=self.settings.stack_size, palette_size=self.settings.palette_size, rng=self._rng)

    def _replace_stack(self) -> None:
        self._match = MatchStack(self._build())
        self._emit("STACK_REBUILT", stack_payload(self._match.stack))

    def _schedule_rebuild(self) -> None:
        delay = self.settings.rebuild_delay
        self._rebuild.schedule(delay=delay, callback=self._on_rebuild_due)
        self._emit("STACK_CLEARED", {"rebuild_in": delay})

    def _on_rebuild_due(self) -> None:
        logger.debug("rebuilding stack for run %s", self._run_id)
        self._replace_stack()

    def _on_run_ended(self) -> None:
        if self._rebuild.cancel():
            logger.debug("run %s ended with a rebuild pending; cancelled", self._run_id)
        self._best_score = max(self._best_score, read_record(self._store).best_score)
        self._emit("RUN_ENDED", {"final_score": self._clock.score, "best_score": self._best_score})

    def _emit(self, type: EventType, payload: dict[str, Any]) -> None:
        event = SessionEvent.now(type=type, run_id=self._run_id, payload=payload)
        self._outbox.append(event)
        if self._sink is not None:
            self._sink(event)

    def _drain(self) -> list[SessionEvent]:
        events, self._outbox = self._outbox, []
        return events
