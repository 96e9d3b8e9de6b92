"""Colour palette for newly created categories and tags."""

import random
from typing import Iterable

COLOR_PALETTE = (
    "#3B82F6",
    "#EF4444",
    "#10B981",
    "#F59E0B",
    "#8B5CF6",
    "#EC4899",
    "#14B8A6",
    "#F97316",
    "#84CC16",
    "#06B6D4",
    "#6366F1",
    "#F43F5E",
    "#0EA5E9",
    "#EAB308",
    "#22C55E",
    "#A855F7",
)


def random_color(rng: random.Random | None = None) -> str:
    """Pick a random colour from the palette."""
    return (rng or random).choice(COLOR_PALETTE)


def unique_random_color(used_colors: Iterable[str] = (), rng: random.Random | None = None) -> str:
    """Pick a palette colour not in ``used_colors``, or any colour once all are used."""
    used = {c.upper() for c in used_colors}
    available = [c for c in COLOR_PALETTE if c not in used]
    if not available:
        return random_color(rng)
    return (rng or random).choice(available)
