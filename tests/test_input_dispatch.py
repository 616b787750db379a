from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from stackdrop.config import GameSettings
from stackdrop.core.palette import Color
from stackdrop.core.session import AttemptOutcome, SessionEngine
from stackdrop.high_scores import InMemoryHighScoreStore
from stackdrop.input import ColorPressed, InputEvent, RetryPressed, dispatch_input, event_for_key


@pytest.mark.parametrize(
    "key,expected",
    [
        ("d", ColorPressed(color=Color.cyan)),
        ("F", ColorPressed(color=Color.green)),
        ("j", ColorPressed(color=Color.red)),
        (" k ", ColorPressed(color=Color.yellow)),
        ("space", RetryPressed()),
    ],
)
def test_default_keymap(key: str, expected: ColorPressed | RetryPressed) -> None:
    assert event_for_key(key) == expected


def test_unbound_key() -> None:
    with pytest.raises(ValueError, match="Unbound key"):
        event_for_key("q")


def test_input_event_parsing() -> None:
    adapter = TypeAdapter(InputEvent)
    assert adapter.validate_python({"type": "color", "color": 2}) == ColorPressed(color=2)
    assert adapter.validate_python({"type": "retry"}) == RetryPressed()
    with pytest.raises(ValidationError):
        adapter.validate_python({"type": "color", "color": -1})


def test_dispatch_routes_color_and_retry(store: InMemoryHighScoreStore, scripted_builder) -> None:  # type: ignore[no-untyped-def]
    engine = SessionEngine(
        store=store,
        settings=GameSettings(initial_time=5.0),
        builder=scripted_builder([Color.yellow] * 9),
    )

    hit = dispatch_input(engine=engine, event=event_for_key("k"))
    assert hit.kind == "color"
    assert hit.outcome == AttemptOutcome.hit

    dispatch_input(engine=engine, event=event_for_key("d"))
    assert not engine.accepting_input
    assert dispatch_input(engine=engine, event=event_for_key("k")).outcome == AttemptOutcome.rejected

    retried = dispatch_input(engine=engine, event=event_for_key("space"))
    assert retried.kind == "retry"
    assert retried.outcome is None
    assert [e.type for e in retried.events] == ["STACK_REBUILT", "SCORE_CHANGED"]
    assert engine.accepting_input
