from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from statemachine import State, StateMachine


class RunStatus(StrEnum):
    playing = "playing"
    ended = "ended"


@dataclass(slots=True)
class RunState:
    score: int
    time_remaining: float
    status: RunStatus = RunStatus.playing


class RunFSM(StateMachine):
    """FSM wrapper around RunState.status.

    - playing -> ended happens once per run (time ran out).
    - retry is accepted from either state and always lands in playing.
    - score/time bookkeeping lives in RunClock; the FSM only guards transitions.
    """

    playing = State(RunStatus.playing.value, value=RunStatus.playing.value, initial=True)
    ended = State(RunStatus.ended.value, value=RunStatus.ended.value)

    end = playing.to(ended)
    retry = ended.to(playing) | playing.to(playing)

    def __init__(self, run: RunState):
        self.run_state = run
        super().__init__(start_value=run.status.value)

    def sync_status_to_model(self) -> None:
        self.run_state.status = RunStatus(str(self.current_state.value))
