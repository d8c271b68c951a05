# skyclimb/game/player.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional
from .config import (
    PLAYER_W, PLAYER_H, PLAYER_SPAWN, PLAYER_X_LIMIT,
    GRAVITY, JUMP_FORCE, MAX_MOVE_SPEED, FRICTION, AIR_FRICTION, STOP_THRESHOLD,
    TERMINAL_VELOCITY, TILT_SMOOTHING, TILT_Z_PER_VX, TILT_X_PER_VY,
    LANDING_TOLERANCE,
)
from .geometry import Box
from .level import Platform


@dataclass(frozen=True)
class InputState:
    """Keys held during a frame."""
    left: bool = False
    right: bool = False
    jump: bool = False


NO_INPUT = InputState()


@dataclass
class Player:
    """
    Climber body. Centre-anchored, y up, z pinned to 0.
    Velocities are per frame (the sim runs one integration step per rendered frame).
    """
    x: float
    y: float
    z: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    grounded: bool = False
    rotation_x: float = 0.0     # cosmetic tilt only
    rotation_z: float = 0.0
    width: float = PLAYER_W
    height: float = PLAYER_H

    @classmethod
    def spawn(cls) -> "Player":
        x, y, z = PLAYER_SPAWN
        return cls(x=x, y=y, z=z)

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.z, self.width, self.height, self.width)

    @property
    def bottom(self) -> float:
        return self.y - self.height / 2

    def update_physics(self, inputs: InputState):
        """One integration step: horizontal target velocity, jump, gravity, position."""
        if inputs.left:
            self.vx = -MAX_MOVE_SPEED
        elif inputs.right:
            self.vx = MAX_MOVE_SPEED
        else:
            self.vx *= FRICTION if self.grounded else AIR_FRICTION
            if abs(self.vx) < STOP_THRESHOLD:
                self.vx = 0.0

        # grounded flips false here, so a held key fires once per landing
        if inputs.jump and self.grounded:
            self.vy = JUMP_FORCE
            self.grounded = False

        self.vy += GRAVITY
        if self.vy < -TERMINAL_VELOCITY:
            self.vy = -TERMINAL_VELOCITY

        self.x += self.vx
        self.y += self.vy
        self.x = max(-PLAYER_X_LIMIT, min(PLAYER_X_LIMIT, self.x))

        self.rotation_z += (TILT_Z_PER_VX * self.vx - self.rotation_z) * TILT_SMOOTHING
        self.rotation_x += (TILT_X_PER_VY * self.vy - self.rotation_x) * TILT_SMOOTHING

    def resolve_collisions(self, platforms: Iterable[Platform]) -> Optional[Platform]:
        """
        Land on the first platform (collection order, not nearest) whose top face the
        player's bottom reached this frame. Skipped while ascending: grounded is left as is.
        Returns the platform landed on, if any.
        """
        if self.vy > 0.0:
            return None

        me = self.box
        bottom = me.bottom
        self.grounded = False
        for plat in platforms:
            pb = plat.box
            if not (me.overlaps_x(pb) and me.overlaps_z(pb)):
                continue
            if pb.bottom - LANDING_TOLERANCE <= bottom <= pb.top:
                self.y = pb.top + self.height / 2
                self.vy = 0.0
                self.grounded = True
                return plat
        return None
