# /experiments/sanity_rollout.py
"""
Batch rollouts of ClimbEnv on fixed seeds.

Each (policy, seed) pair is one episode; a summary row lands in <out-dir>/episodes.csv
and, with --save-traces, the action sequence goes to traces/<policy>/<seed>_actions.npy
so the run can be reproduced exactly (the env is deterministic for a given seed).

Usage (from repo root):
  python -m experiments.sanity_rollout --policies both --save-traces
  python -m experiments.sanity_rollout --policies climber --seeds 111,222,333
  python -m experiments.sanity_rollout --policies random --steps 300 --out-dir /tmp/sanity
"""

from __future__ import annotations
import argparse
import csv
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Callable, Dict, List

import numpy as np

from skyclimb.env.climb_env import ClimbEnv
from skyclimb.env.observations import PROBE_RANGE_Y
from skyclimb.game.config import JUMP_FORCE, GRAVITY, CAMERA_START_Y
from skyclimb.leaderboard.config import Config

logger = logging.getLogger(__name__)

Policy = Callable[[np.ndarray], int]

# Height gained by a jump from rest, in observation dy units
JUMP_REACH = (JUMP_FORCE ** 2 / (2 * -GRAVITY)) / PROBE_RANGE_Y
STEER_DEADZONE = 0.02


def make_random(seed: int, n_actions: int) -> Policy:
    rng = np.random.default_rng(10_000 + seed)
    return lambda _obs: int(rng.integers(0, n_actions))


def make_climber(_seed: int, _n_actions: int) -> Policy:
    """Steer under the next platform up; jump from the ground once it is within reach."""
    def act(obs: np.ndarray) -> int:
        dx, dy = float(obs[8]), float(obs[9])
        steer = 2 if dx > STEER_DEADZONE else (1 if dx < -STEER_DEADZONE else 0)
        if obs[4] > 0.5 and 0.0 < dy < 0.9 * JUMP_REACH:
            return steer + 3   # 3 JUMP, 4 LEFT+JUMP, 5 RIGHT+JUMP
        return steer
    return act


POLICIES: Dict[str, Callable[[int, int], Policy]] = {
    "random": make_random,
    "climber": make_climber,
}


@dataclass
class EpisodeResult:
    policy: str
    seed: int
    frame_skip: int
    decisions: int
    return_sum: float
    score: int
    peak_height: float
    terminated: bool
    truncated: bool
    grounded_ratio: float


def rollout(policy_name: str, seed: int, frame_skip: int, max_steps: int,
            trace_dir: Path | None = None) -> EpisodeResult:
    env = ClimbEnv(frame_skip=frame_skip)
    policy = POLICIES[policy_name](seed, int(env.action_space.n))

    actions: List[int] = []
    ret, grounded, peak = 0.0, 0, CAMERA_START_Y
    term = trunc = False
    info: dict = {}
    try:
        obs, info = env.reset(seed=seed)
        while len(actions) < max_steps and not (term or trunc):
            a = policy(obs)
            actions.append(a)
            obs, r, term, trunc, info = env.step(a)
            ret += r
            grounded += int(info["grounded"])
            peak = max(peak, env.loop.state.player.y)
    finally:
        env.close()

    if trace_dir is not None:
        trace_dir.mkdir(parents=True, exist_ok=True)
        np.save(trace_dir / f"{seed}_actions.npy", np.asarray(actions, dtype=np.int8))
        (trace_dir / f"{seed}_meta.txt").write_text(
            f"seed={seed}\nframe_skip={frame_skip}\npolicy={policy_name}\nmax_steps={max_steps}\n",
            encoding="utf-8")

    n = len(actions)
    return EpisodeResult(
        policy=policy_name, seed=seed, frame_skip=frame_skip, decisions=n,
        return_sum=round(ret, 1), score=int(info.get("score", 0)), peak_height=round(peak, 2),
        terminated=bool(term), truncated=bool(trunc), grounded_ratio=round(grounded / max(1, n), 3),
    )


def append_row(csv_path: Path, result: EpisodeResult):
    header = [f.name for f in fields(EpisodeResult)]
    new_file = not csv_path.exists()
    with csv_path.open("a", newline="") as f:
        w = csv.DictWriter(f, fieldnames=header)
        if new_file:
            w.writeheader()
        w.writerow(asdict(result))


def parse_seeds(text: str) -> List[int]:
    seeds = [int(s) for s in text.split(",") if s.strip()]
    return seeds or list(range(101, 121))


def main():
    ap = argparse.ArgumentParser(description="Run ClimbEnv rollouts and log episode summaries.")
    ap.add_argument("--policies", default="both", choices=[*POLICIES, "both"])
    ap.add_argument("--seeds", default="", help="Comma-separated seeds (default 101..120)")
    ap.add_argument("--frame-skip", type=int, default=4, help="Sim frames per decision")
    ap.add_argument("--steps", type=int, default=10_000, help="Cap on decisions per episode")
    ap.add_argument("--out-dir", default="experiments/runs")
    ap.add_argument("--save-traces", action="store_true", help="Save action sequences for replay")
    args = ap.parse_args()

    logging.basicConfig(level=Config.LOG_LEVEL)

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    episodes_csv = out_dir / "episodes.csv"
    seeds = parse_seeds(args.seeds)
    names = list(POLICIES) if args.policies == "both" else [args.policies]

    print(f"Running {names} on {len(seeds)} seeds (frame_skip={args.frame_skip}) -> {episodes_csv}")
    for name in names:
        scores = []
        for seed in seeds:
            trace_dir = out_dir / "traces" / name if args.save_traces else None
            res = rollout(name, seed, args.frame_skip, args.steps, trace_dir)
            append_row(episodes_csv, res)
            scores.append(res.score)
            print(f"[{name}] seed={seed}  len={res.decisions}  score={res.score}  "
                  f"peak={res.peak_height:.1f}  term={res.terminated} trunc={res.truncated}")
        logger.info("%s: mean score %.1f over %d seeds", name, float(np.mean(scores)), len(scores))

    print("✓ Sanity rollouts complete")


if __name__ == "__main__":
    main()
