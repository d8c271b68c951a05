# skyclimb/game/camera.py
from __future__ import annotations
import math
from dataclasses import dataclass
from .config import (
    CAMERA_START_Y, CAMERA_LOOK_OFFSET,
    CAMERA_SCROLL_SPEED_INITIAL, CAMERA_SCROLL_SPEED_INCREMENT, CAMERA_SCROLL_SPEED_MAX,
    SCORE_SCALE,
)


def scroll_speed(elapsed_s: float) -> float:
    """Camera climb per frame. A pure function of run time, so it never drifts."""
    return min(CAMERA_SCROLL_SPEED_INITIAL + elapsed_s * CAMERA_SCROLL_SPEED_INCREMENT,
               CAMERA_SCROLL_SPEED_MAX)


def score_for_height(camera_y: float) -> int:
    return int(math.floor(camera_y * SCORE_SCALE))


@dataclass
class CameraController:
    y: float = CAMERA_START_Y
    speed: float = CAMERA_SCROLL_SPEED_INITIAL

    @property
    def look_y(self) -> float:
        return self.y + CAMERA_LOOK_OFFSET

    def advance(self, elapsed_s: float) -> float:
        self.speed = scroll_speed(elapsed_s)
        self.y += self.speed
        return self.y
