"""
Integrator + collision resolver tests.

Usage (from repo root):
  python -m pytest skyclimb/tests/test_physics.py
"""
from __future__ import annotations

import random

from skyclimb.game.config import (
    GRAVITY, JUMP_FORCE, MAX_MOVE_SPEED, FRICTION, AIR_FRICTION,
    TERMINAL_VELOCITY, PLAYER_X_LIMIT, LANDING_TOLERANCE,
)
from skyclimb.game.level import Platform
from skyclimb.game.player import InputState, NO_INPUT, Player

LEFT = InputState(left=True)
RIGHT = InputState(right=True)
JUMP = InputState(jump=True)


def resting_on(plat: Platform) -> Player:
    p = Player(x=plat.x, y=plat.top + Player.spawn().height / 2)
    p.grounded = True
    return p


# ---------------- horizontal ----------------

def test_directional_keys_snap_to_max_speed():
    p = Player.spawn()
    p.update_physics(RIGHT)
    assert p.vx == MAX_MOVE_SPEED
    p.update_physics(LEFT)
    assert p.vx == -MAX_MOVE_SPEED
    # left wins when both are held
    p.update_physics(InputState(left=True, right=True))
    assert p.vx == -MAX_MOVE_SPEED


def test_friction_differs_on_ground_and_in_air():
    ground = Player.spawn()
    ground.vx, ground.grounded = MAX_MOVE_SPEED, True
    ground.update_physics(NO_INPUT)
    assert abs(ground.vx - MAX_MOVE_SPEED * FRICTION) < 1e-12

    air = Player.spawn()
    air.vx, air.grounded = MAX_MOVE_SPEED, False
    air.update_physics(NO_INPUT)
    assert abs(air.vx - MAX_MOVE_SPEED * AIR_FRICTION) < 1e-12


def test_drift_snaps_to_exact_zero():
    p = Player.spawn()
    p.vx = MAX_MOVE_SPEED
    for _ in range(30):
        p.update_physics(NO_INPUT)
    assert p.vx == 0.0


def test_horizontal_position_is_clamped():
    p = Player.spawn()
    for _ in range(200):
        p.update_physics(RIGHT)
    assert p.x == PLAYER_X_LIMIT
    for _ in range(400):
        p.update_physics(LEFT)
    assert p.x == -PLAYER_X_LIMIT


def test_tilt_leans_against_motion_and_has_no_physical_effect():
    p = Player.spawn()
    for _ in range(60):
        p.update_physics(RIGHT)
    assert p.rotation_z < 0.0
    assert p.vx == MAX_MOVE_SPEED


# ---------------- vertical ----------------

def test_gravity_never_exceeds_terminal_velocity():
    p = Player(x=0.0, y=1000.0)
    for _ in range(300):
        p.update_physics(NO_INPUT)
        assert p.vy >= -TERMINAL_VELOCITY
    assert p.vy == -TERMINAL_VELOCITY


def test_jump_requires_ground():
    p = Player(x=0.0, y=50.0)
    p.update_physics(JUMP)
    assert p.vy == GRAVITY
    assert not p.grounded


def test_jump_clears_grounded_in_the_same_frame():
    plat = Platform(0.0, 0.0)
    p = resting_on(plat)
    p.update_physics(JUMP)
    assert p.vy == JUMP_FORCE + GRAVITY
    assert not p.grounded
    # still rising: resolver is skipped and does not re-ground the player
    assert p.resolve_collisions([plat]) is None
    assert not p.grounded
    vy_before = p.vy
    p.update_physics(JUMP)
    assert p.vy == vy_before + GRAVITY


def test_held_jump_fires_once_per_landing():
    plat = Platform(0.0, 0.0)
    p = resting_on(plat)
    jumps = landings = 0
    was_grounded = True
    for _ in range(400):
        vy_before = p.vy
        p.update_physics(JUMP)
        if p.vy > vy_before + GRAVITY + 1e-12:
            assert was_grounded, "jump fired while airborne"
            jumps += 1
        if p.resolve_collisions([plat]) is not None and not was_grounded:
            landings += 1
        was_grounded = p.grounded
    assert jumps >= 3
    # every landing is followed by exactly one jump on the next frame
    assert jumps in (landings, landings + 1)


# ---------------- collision ----------------

def test_landing_snaps_exactly_onto_platform_top():
    rng = random.Random(7)
    for _ in range(500):
        plat = Platform(rng.uniform(-4, 4), rng.uniform(0, 100))
        p = Player(x=plat.x + rng.uniform(-1.5, 1.5), y=0.0, vy=-rng.uniform(0.0, TERMINAL_VELOCITY))
        bottom = rng.uniform(plat.box.bottom - LANDING_TOLERANCE, plat.box.top)
        p.y = bottom + p.height / 2

        assert p.resolve_collisions([plat]) is plat
        assert p.grounded
        assert p.vy == 0.0
        assert p.y == plat.box.top + p.height / 2


def test_ascending_player_never_lands():
    plat = Platform(0.0, 0.0)
    p = Player(x=0.0, y=plat.top + 0.5, vy=0.1)
    assert p.resolve_collisions([plat]) is None
    assert p.y == plat.top + 0.5


def test_no_horizontal_overlap_means_airborne():
    plat = Platform(0.0, 0.0)
    p = Player(x=plat.box.right + p_half_width() + 0.01, y=plat.top + 0.7, vy=-0.1, grounded=True)
    assert p.resolve_collisions([plat]) is None
    assert not p.grounded


def test_below_tolerance_band_falls_through():
    plat = Platform(0.0, 10.0)
    p = Player(x=0.0, y=0.0, vy=-0.1)
    p.y = plat.box.bottom - LANDING_TOLERANCE - 0.01 + p.height / 2
    assert p.resolve_collisions([plat]) is None


def test_first_platform_in_collection_order_wins():
    low = Platform(0.0, 0.0)
    high = Platform(0.0, 0.1)     # overlapping band, higher top
    p = Player(x=0.0, y=0.0, vy=-0.05)
    p.y = low.top - 0.01 + p.height / 2
    assert p.resolve_collisions([low, high]) is low
    assert p.y == low.box.top + p.height / 2


def p_half_width() -> float:
    return Player.spawn().width / 2
