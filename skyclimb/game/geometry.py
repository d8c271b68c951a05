# skyclimb/game/geometry.py
from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Box:
    """
    Float axis-aligned box, centre-anchored, y pointing up.
    Same edge vocabulary as pygame.Rect (left/right/top/bottom) plus depth (front/back),
    which pygame's int rects can't give us at world-unit scale.
    """
    x: float
    y: float
    z: float
    width: float
    height: float
    depth: float

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def top(self) -> float:
        return self.y + self.height / 2

    @property
    def bottom(self) -> float:
        return self.y - self.height / 2

    @property
    def front(self) -> float:
        return self.z - self.depth / 2

    @property
    def back(self) -> float:
        return self.z + self.depth / 2

    def overlaps_x(self, other: "Box") -> bool:
        return self.right > other.left and self.left < other.right

    def overlaps_z(self, other: "Box") -> bool:
        return self.back > other.front and self.front < other.back
