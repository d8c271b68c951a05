# skyclimb/env/observations.py
from __future__ import annotations
from typing import List, Optional, Tuple
import numpy as np

from skyclimb.game.config import (
    PLAYER_X_LIMIT, MAX_MOVE_SPEED, TERMINAL_VELOCITY, JUMP_FORCE,
    CAMERA_SCROLL_SPEED_MAX, DEATH_MARGIN, PLATFORM_SPACING_MAX,
)
from skyclimb.game.level import Platform
from skyclimb.game.state import GameState

OBS_SIZE = 12
# Vertical distance that maps to |dy| = 1
PROBE_RANGE_Y: float = 2.0 * PLATFORM_SPACING_MAX
# Sentinels for "no platform": below -> (0, -1), above -> (0, +1)
NO_BELOW = (0.0, -1.0)
NO_ABOVE = (0.0, 1.0)


def _clip1(v: float) -> float:
    return -1.0 if v < -1.0 else (1.0 if v > 1.0 else v)


def _rel(plat: Platform, x: float, feet: float) -> Tuple[float, float]:
    dx = (plat.x - x) / (2.0 * PLAYER_X_LIMIT)
    dy = (plat.top - feet) / PROBE_RANGE_Y
    return _clip1(dx), _clip1(dy)


def nearest_platforms(platforms: List[Platform], feet: float, above: int = 2) -> Tuple[Optional[Platform], List[Platform]]:
    """
    Returns (nearest platform whose top is at/below the feet, next `above` platforms above them).
    Ordered by top height, not by collection order.
    """
    below = [p for p in platforms if p.top <= feet + 1e-6]
    up = sorted((p for p in platforms if p.top > feet + 1e-6), key=lambda p: p.top)
    best_below = max(below, key=lambda p: p.top) if below else None
    return best_below, up[:above]


def build_observation(state: GameState) -> np.ndarray:
    """
    Returns a fixed (12,) float32 vector, every entry in [-1, 1]:
      [ x_norm, y_rel_cam, vx_norm, vy_norm, grounded, speed_norm,
        below_dx, below_dy, above1_dx, above1_dy, above2_dx, above2_dy ]
    - y_rel_cam: (y - camera) / DEATH_MARGIN, so -1 is the death line
    - platform dx/dy are relative to the player's feet; sentinels when absent
    """
    p = state.player
    feet = p.bottom
    v_max = max(TERMINAL_VELOCITY, JUMP_FORCE)

    feats: List[float] = [
        _clip1(p.x / PLAYER_X_LIMIT),
        _clip1((p.y - state.camera.y) / DEATH_MARGIN),
        _clip1(p.vx / MAX_MOVE_SPEED),
        _clip1(p.vy / v_max),
        1.0 if p.grounded else 0.0,
        _clip1(state.camera.speed / CAMERA_SCROLL_SPEED_MAX),
    ]

    below, above = nearest_platforms(state.level.platforms, feet)
    feats.extend(_rel(below, p.x, feet) if below is not None else NO_BELOW)
    for i in range(2):
        feats.extend(_rel(above[i], p.x, feet) if i < len(above) else NO_ABOVE)

    return np.asarray(feats, dtype=np.float32)
