# utils/helpers.py
"""Small geometry helpers shared by the simulation systems."""
from __future__ import annotations

import math
from typing import Tuple


def rects_overlap(
    ax: float, ay: float, aw: float, ah: float,
    bx: float, by: float, bw: float, bh: float,
) -> bool:
    """Axis-aligned bounding box test on top-left anchored rectangles."""
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(bx - ax, by - ay)


def normalize(dx: float, dy: float) -> Tuple[float, float]:
    """Return the unit vector of ``(dx, dy)``; the zero vector stays zero."""
    length = math.hypot(dx, dy)
    if length == 0:
        return 0.0, 0.0
    return dx / length, dy / length


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
