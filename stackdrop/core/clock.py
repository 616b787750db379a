from __future__ import annotations

import logging

from stackdrop.fsm import RunFSM, RunState, RunStatus
from stackdrop.high_scores import BEST_SCORE_KEY, FINAL_SCORE_KEY, HighScoreStore

logger = logging.getLogger(__name__)


class RunClock:
    """Score, countdown and run status for one run at a time.

    Once the run has ended every mutator except `retry` is a no-op, so the final
    score and the zeroed clock stay frozen until the player retries.
    """

    def __init__(self, *, store: HighScoreStore, initial_time: float = 30.0) -> None:
        if initial_time <= 0:
            raise ValueError("initial_time must be positive")
        self._store = store
        self._initial_time = initial_time
        self._run = RunState(score=0, time_remaining=initial_time)
        self._fsm = RunFSM(self._run)

    @property
    def initial_time(self) -> float:
        return self._initial_time

    @property
    def score(self) -> int:
        return self._run.score

    @property
    def time_remaining(self) -> float:
        return self._run.time_remaining

    @property
    def status(self) -> RunStatus:
        return self._run.status

    @property
    def is_ended(self) -> bool:
        return self._run.status == RunStatus.ended

    def state(self) -> RunState:
        """Copy of the current run state."""

        return RunState(score=self._run.score, time_remaining=self._run.time_remaining, status=self._run.status)

    def add_score(self, amount: int) -> bool:
        """Add to the score; returns True if this set a new best score."""

        if self.is_ended:
            return False

        self._run.score += amount
        best = self._store.get_int(BEST_SCORE_KEY, 0)
        if self._run.score <= best:
            return False

        self._store.set_int(BEST_SCORE_KEY, self._run.score)
        self._store.save()
        return True

    def apply_penalty(self, seconds: float) -> bool:
        """Deduct time; returns True if this call ended the run."""

        if self.is_ended:
            return False
        return self._drain(seconds)

    def tick(self, delta_seconds: float) -> bool:
        """Advance the countdown; returns True if this call ended the run."""

        if delta_seconds < 0:
            raise ValueError("delta_seconds must not be negative")
        if self.is_ended:
            return False
        return self._drain(delta_seconds)

    def retry(self) -> None:
        self._run.score = 0
        self._run.time_remaining = self._initial_time
        self._fsm.retry()
        self._fsm.sync_status_to_model()

    def _drain(self, seconds: float) -> bool:
        self._run.time_remaining = max(0.0, self._run.time_remaining - seconds)
        if self._run.time_remaining > 0:
            return False
        return self._end_run()

    def _end_run(self) -> bool:
        if self.is_ended:
            return False

        self._fsm.end()
        self._fsm.sync_status_to_model()

        self._store.set_int(FINAL_SCORE_KEY, self._run.score)
        self._store.save()
        logger.info("run ended with score %s", self._run.score)
        return True
