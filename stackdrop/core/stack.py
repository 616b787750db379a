from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from stackdrop.core.palette import random_color_index, random_yaw


@dataclass(frozen=True, slots=True)
class BlockSpec:
    # None only for the foundation block.
    required_color: int | None
    yaw: float = 0.0

    @property
    def is_foundation(self) -> bool:
        return self.required_color is None


@dataclass(frozen=True, slots=True)
class Stack:
    """Immutable block sequence: index 0 is the topmost playable block, the last is the foundation."""

    blocks: tuple[BlockSpec, ...]

    def __post_init__(self) -> None:
        if not self.blocks:
            raise ValueError("a stack needs at least the foundation block")
        if not self.blocks[-1].is_foundation:
            raise ValueError("the last block must be the foundation (no required color)")
        if any(b.is_foundation for b in self.blocks[:-1]):
            raise ValueError("only the last block may be the foundation")

    @classmethod
    def from_colors(cls, colors: Sequence[int]) -> "Stack":
        """Build a stack from explicit target colors, top first; the foundation is appended."""

        return cls(blocks=tuple(BlockSpec(required_color=c) for c in colors) + (BlockSpec(required_color=None),))

    def __len__(self) -> int:
        return len(self.blocks)

    def __getitem__(self, index: int) -> BlockSpec:
        return self.blocks[index]

    @property
    def colors(self) -> list[int | None]:
        return [b.required_color for b in self.blocks]


def build_stack(*, n: int, palette_size: int, rng: random.Random) -> Stack:
    """Build a fresh stack of `n` blocks.

    Generation runs bottom-up: the foundation is produced first, then each target
    block above it gets a yaw and an independently sampled color. Adjacent blocks
    may repeat a color.
    """

    if n < 1:
        raise ValueError("stack size must be at least 1")
    if palette_size < 1:
        raise ValueError("palette_size must be at least 1")

    bottom_up: list[BlockSpec] = [BlockSpec(required_color=None, yaw=random_yaw(rng=rng))]
    for _ in range(n - 1):
        yaw = random_yaw(rng=rng)
        color = random_color_index(rng=rng, palette_size=palette_size)
        bottom_up.append(BlockSpec(required_color=color, yaw=yaw))

    bottom_up.reverse()
    return Stack(blocks=tuple(bottom_up))


class MatchResult(StrEnum):
    hit = "hit"
    miss = "miss"
    exhausted = "exhausted"


class MatchStack:
    """A stack plus the cursor pointing at the current target block."""

    def __init__(self, stack: Stack) -> None:
        self._stack = stack
        self._cursor = 0

    @property
    def stack(self) -> Stack:
        return self._stack

    @property
    def cursor(self) -> int:
        return self._cursor

    def current(self) -> int | None:
        if self._cursor >= len(self._stack) - 1:
            return None
        return self._stack[self._cursor].required_color

    def is_exhausted(self) -> bool:
        return self._cursor >= len(self._stack) - 1

    def attempt(self, color: int) -> MatchResult:
        required = self.current()
        if required is None:
            return MatchResult.exhausted
        if required != color:
            return MatchResult.miss
        self._cursor += 1
        return MatchResult.hit
