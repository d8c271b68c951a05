# skyclimb/game/state.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from .camera import CameraController
from .level import PlatformField
from .player import Player


class RunPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


@dataclass
class GameState:
    """Everything a single run mutates. Built fresh on (re)start, never reset in place."""
    level: PlatformField
    player: Player = field(default_factory=Player.spawn)
    camera: CameraController = field(default_factory=CameraController)
    elapsed_s: float = 0.0
    score: int = 0
    frame: int = 0
    game_over_triggered: bool = False

    @classmethod
    def new_run(cls, seed: int | None = None) -> "GameState":
        return cls(level=PlatformField(seed))

    @property
    def seed(self) -> int:
        return self.level.seed
