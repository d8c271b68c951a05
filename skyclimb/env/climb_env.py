# skyclimb/env/climb_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from skyclimb.game.config import WIDTH, HEIGHT, COLOR_BG
from skyclimb.game.game import draw_world
from skyclimb.game.loop import GameLoop
from skyclimb.game.player import InputState
from skyclimb.game.state import RunPhase
from skyclimb.env.observations import build_observation, OBS_SIZE

# Discrete action -> held keys
ACTIONS = (
    InputState(),                              # 0 NOOP
    InputState(left=True),                     # 1 LEFT
    InputState(right=True),                    # 2 RIGHT
    InputState(jump=True),                     # 3 JUMP
    InputState(left=True, jump=True),          # 4 LEFT+JUMP
    InputState(right=True, jump=True),         # 5 RIGHT+JUMP
)


class ClimbEnv(gym.Env):
    """
    SkyClimb Gymnasium environment (vector observations), headless GameLoop without a leaderboard.
    - Simulation at 60 Hz (internal), one physics step per frame.
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Reward: score gained during the decision step, -1 on death.
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 60.0):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)

        self.sim_fps = 60
        self.dt = 1.0 / self.sim_fps

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(self.sim_fps * time_limit_seconds / self.frame_skip)

        self.action_space = gym.spaces.Discrete(len(ACTIONS))
        self.observation_space = gym.spaces.Box(low=-1.0, high=1.0, shape=(OBS_SIZE,), dtype=np.float32)

        self.loop = GameLoop(leaderboard=None)
        self.timestep: int = 0
        self.current_seed: Optional[int] = None

        self.screen = None
        self.clock = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)

        # A given seed goes straight to the platform generator; otherwise it randomises itself.
        level_seed = int(seed) if seed is not None else None
        state = self.loop.start(level_seed)

        self.timestep = 0
        self.current_seed = state.seed

        obs = self._get_obs()
        info = {"seed": self.current_seed, "score": state.score}
        return obs, info

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.loop.state is not None

        inputs = ACTIONS[int(action)]
        start_score = self.loop.state.score
        died = False

        for _ in range(self.frame_skip):
            if self.loop.step(inputs, self.dt):
                died = True
                break

        state = self.loop.state
        reward = -1.0 if died else float(state.score - start_score)

        self.timestep += 1
        terminated = self.loop.phase is RunPhase.ENDED
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = self._get_obs()
        info = {
            "score": state.score,
            "timestep": self.timestep,
            "seed": self.current_seed,
            "grounded": state.player.grounded,
            "camera_y": state.camera.y,
        }

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _get_obs(self) -> np.ndarray:
        assert self.loop.state is not None
        return build_observation(self.loop.state)

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.loop.state is None:
            return

        if self.screen is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
                pygame.display.set_caption("SkyClimb - Gym Env")
            else:
                self.screen = pygame.Surface((WIDTH, HEIGHT))
            self.clock = pygame.time.Clock()

        if self.render_mode == "human":
            # keep the OS from flagging the window as hung
            pygame.event.pump()

        # same projection as the playable game
        self.screen.fill(COLOR_BG)
        draw_world(self.screen, self.loop)

        if self.render_mode == "human":
            pygame.display.flip()
            self.clock.tick(self.metadata.get("render_fps", 60))
            return None

        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
