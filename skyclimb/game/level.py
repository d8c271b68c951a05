# skyclimb/game/level.py
from __future__ import annotations
import random
from dataclasses import dataclass
from typing import List
from .config import (
    PLATFORM_W, PLATFORM_H, PLATFORM_D, START_PLATFORM_SCALE,
    PLATFORM_SPACING_MIN, PLATFORM_SPACING_MAX, HORIZONTAL_RANGE,
    INITIAL_PLATFORMS, LOOKAHEAD_MARGIN, REMOVAL_MARGIN,
)
from .geometry import Box


@dataclass(frozen=True)
class Platform:
    x: float
    y: float
    z: float = 0.0
    width: float = PLATFORM_W
    height: float = PLATFORM_H
    depth: float = PLATFORM_D
    is_start: bool = False

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.z, self.width, self.height, self.depth)

    @property
    def top(self) -> float:
        return self.y + self.height / 2


class PlatformField:
    """
    Endless vertical track of platforms, materialised only around the camera:
    [camera_y - REMOVAL_MARGIN, camera_y + LOOKAHEAD_MARGIN].
    The list keeps creation order, which is also the collision scan order.
    """
    def __init__(self, seed: int | None = None):
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self.rng = random.Random(seed)
        self.platforms: List[Platform] = []
        self._init_start()

    def _init_start(self):
        self.platforms.append(Platform(0.0, 0.0, 0.0, width=PLATFORM_W * START_PLATFORM_SCALE, is_start=True))
        y = PLATFORM_SPACING_MIN
        for _ in range(INITIAL_PLATFORMS):
            self.platforms.append(self._create_platform(y))
            y += self._rand_spacing()

    def _create_platform(self, y: float) -> Platform:
        return Platform(self._rand_x(), y, 0.0)

    def _rand_x(self) -> float:
        return self.rng.uniform(-HORIZONTAL_RANGE, HORIZONTAL_RANGE)

    def _rand_spacing(self) -> float:
        return self.rng.uniform(PLATFORM_SPACING_MIN, PLATFORM_SPACING_MAX)

    @property
    def highest_y(self) -> float:
        return max((p.y for p in self.platforms), default=0.0)

    def update_and_generate(self, camera_y: float):
        """Extend the track above the camera, then retire what fell below the window."""
        highest = self.highest_y
        target = camera_y + LOOKAHEAD_MARGIN
        while highest < target:
            highest += self._rand_spacing()
            self.platforms.append(self._create_platform(highest))

        threshold = camera_y - REMOVAL_MARGIN
        self.platforms = [p for p in self.platforms if p.y >= threshold]
