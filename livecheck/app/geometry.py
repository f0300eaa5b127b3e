"""Frame-space geometry used by the liveness engine and its renderers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Sequence


class Point(NamedTuple):
    x: float
    y: float

    @classmethod
    def coerce(cls, value: Sequence[float]) -> "Point":
        return cls(float(value[0]), float(value[1]))


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle in frame pixels, top-left to bottom-right."""

    top_left: Point
    bottom_right: Point

    @property
    def width(self) -> float:
        return self.bottom_right.x - self.top_left.x

    @property
    def height(self) -> float:
        return self.bottom_right.y - self.top_left.y

    @property
    def center(self) -> Point:
        return Point(
            (self.top_left.x + self.bottom_right.x) / 2.0,
            (self.top_left.y + self.bottom_right.y) / 2.0,
        )

    def as_int_tuple(self) -> tuple[int, int, int, int]:
        return (
            int(round(self.top_left.x)),
            int(round(self.top_left.y)),
            int(round(self.bottom_right.x)),
            int(round(self.bottom_right.y)),
        )


def expand_box(box: Box, scale: float, y_offset: float) -> Box:
    """Scale ``box`` about its centre, then shift both corners down by ``y_offset``.

    The offset is applied after scaling so the horizontal centre is preserved
    and only the vertical placement moves.
    """

    cx, cy = box.center
    half_w = box.width * scale / 2.0
    half_h = box.height * scale / 2.0
    return Box(
        top_left=Point(cx - half_w, cy - half_h + y_offset),
        bottom_right=Point(cx + half_w, cy + half_h + y_offset),
    )


__all__ = ["Box", "Point", "distance", "expand_box"]
