from __future__ import annotations

from collections.abc import Callable


class DeferredAction:
    """A cancellable one-shot action that fires after a fixed amount of game time.

    Time only moves through `advance`, so the action runs inside the same frame
    tick that drives the rest of the session. Scheduling while armed replaces the
    pending callback and restarts the delay.
    """

    def __init__(self) -> None:
        self._remaining: float | None = None
        self._callback: Callable[[], None] | None = None

    @property
    def pending(self) -> bool:
        return self._callback is not None

    @property
    def remaining(self) -> float | None:
        return self._remaining

    def schedule(self, *, delay: float, callback: Callable[[], None]) -> None:
        if delay < 0:
            raise ValueError("delay must not be negative")
        self._remaining = delay
        self._callback = callback

    def cancel(self) -> bool:
        was_pending = self.pending
        self._remaining = None
        self._callback = None
        return was_pending

    def advance(self, delta_seconds: float) -> bool:
        """Consume elapsed time; returns True if the action fired."""

        if self._callback is None or self._remaining is None:
            return False

        self._remaining = max(0.0, self._remaining - delta_seconds)
        if self._remaining > 0:
            return False

        callback = self._callback
        # Disarm before running so the callback may schedule a follow-up.
        self._remaining = None
        self._callback = None
        callback()
        return True
