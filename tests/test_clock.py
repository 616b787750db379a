from __future__ import annotations

import pytest

from stackdrop.core.clock import RunClock
from stackdrop.fsm import RunStatus
from stackdrop.high_scores import BEST_SCORE_KEY, FINAL_SCORE_KEY, InMemoryHighScoreStore


def test_fresh_clock_is_playing(store: InMemoryHighScoreStore) -> None:
    clock = RunClock(store=store)
    assert clock.status == RunStatus.playing
    assert clock.score == 0
    assert clock.time_remaining == 30.0


def test_tick_counts_down_and_ends_exactly_once(store: InMemoryHighScoreStore) -> None:
    clock = RunClock(store=store, initial_time=1.0)

    assert clock.tick(0.25) is False
    assert clock.time_remaining == pytest.approx(0.75)

    assert clock.tick(5.0) is True
    assert clock.time_remaining == 0.0
    assert clock.status == RunStatus.ended

    # Further zero-hits are no-ops.
    assert clock.tick(1.0) is False
    assert clock.apply_penalty(5.0) is False
    assert clock.time_remaining == 0.0
    assert store.save_count == 1


def test_penalty_clamps_to_zero_and_persists_final_score() -> None:
    store = InMemoryHighScoreStore({BEST_SCORE_KEY: 50})
    clock = RunClock(store=store, initial_time=4.0)
    clock.add_score(3)

    assert clock.apply_penalty(5.0) is True
    assert clock.time_remaining == 0.0
    assert clock.status == RunStatus.ended
    assert store.get_int(FINAL_SCORE_KEY) == 3
    assert store.get_int(BEST_SCORE_KEY) == 50


def test_penalty_that_leaves_time_does_not_end(store: InMemoryHighScoreStore) -> None:
    clock = RunClock(store=store, initial_time=30.0)
    assert clock.apply_penalty(5.0) is False
    assert clock.time_remaining == 25.0
    assert clock.status == RunStatus.playing


def test_score_is_frozen_after_end(store: InMemoryHighScoreStore) -> None:
    clock = RunClock(store=store, initial_time=1.0)
    clock.add_score(2)
    clock.tick(1.0)

    assert clock.add_score(10) is False
    assert clock.score == 2


def test_best_score_updates_live_not_only_at_end() -> None:
    store = InMemoryHighScoreStore({BEST_SCORE_KEY: 7})
    clock = RunClock(store=store)
    clock.add_score(10)
    assert store.get_int(BEST_SCORE_KEY) == 10

    assert clock.add_score(1) is True
    assert clock.score == 11
    assert store.get_int(BEST_SCORE_KEY) == 11
    assert clock.status == RunStatus.playing


def test_score_below_best_does_not_write() -> None:
    store = InMemoryHighScoreStore({BEST_SCORE_KEY: 7})
    clock = RunClock(store=store)

    assert clock.add_score(1) is False
    assert store.get_int(BEST_SCORE_KEY) == 7
    assert store.save_count == 0


@pytest.mark.parametrize("end_first", [True, False])
def test_retry_always_starts_a_fresh_run(store: InMemoryHighScoreStore, end_first: bool) -> None:
    clock = RunClock(store=store, initial_time=12.0)
    clock.add_score(4)
    clock.tick(3.0)
    if end_first:
        clock.apply_penalty(100.0)

    clock.retry()

    assert clock.status == RunStatus.playing
    assert clock.score == 0
    assert clock.time_remaining == 12.0
    # Retry never lowers the stored best.
    assert store.get_int(BEST_SCORE_KEY) == 4


def test_negative_tick_is_rejected(store: InMemoryHighScoreStore) -> None:
    clock = RunClock(store=store)
    with pytest.raises(ValueError):
        clock.tick(-0.1)


def test_state_is_a_copy(store: InMemoryHighScoreStore) -> None:
    clock = RunClock(store=store)
    snap = clock.state()
    clock.add_score(1)
    assert snap.score == 0
