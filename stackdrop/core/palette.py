from __future__ import annotations

import random
from enum import IntEnum


class Color(IntEnum):
    """Named colors of the default four-color palette.

    Larger palettes are allowed; colors past `yellow` are plain integer indices.
    """

    cyan = 0
    green = 1
    red = 2
    yellow = 3


DEFAULT_PALETTE_SIZE = len(Color)


def color_name(color: int) -> str:
    try:
        return Color(color).name
    except ValueError:
        return f"color_{color}"


def random_color_index(*, rng: random.Random, palette_size: int) -> int:
    if palette_size < 1:
        raise ValueError("palette_size must be at least 1")
    return rng.randrange(palette_size)


def random_yaw(*, rng: random.Random) -> float:
    # Degrees; only used for visual variety by the presentation layer.
    return rng.uniform(0.0, 360.0)
