# skyclimb/game/loop.py
from __future__ import annotations
import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING
from .camera import score_for_height
from .config import DEATH_MARGIN, MAX_FRAME_DT
from .player import InputState, NO_INPUT
from .state import GameState, RunPhase
from ..leaderboard.client import qualifies
from ..leaderboard.errors import LeaderboardError
from ..leaderboard.models import LeaderboardEntry

if TYPE_CHECKING:
    from ..leaderboard.client import LeaderboardClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameOverSummary:
    score: int
    leaderboard: List[LeaderboardEntry] = field(default_factory=list)
    qualifies: bool = False


class GameLoop:
    """
    Owns the run lifecycle (IDLE -> RUNNING -> ENDED -> RUNNING ...) and the fixed-order
    frame pipeline. The leaderboard is optional; without it the game simply runs offline.
    Leaderboard callbacks run on worker threads and only swap in immutable results.
    """
    def __init__(self, leaderboard: Optional["LeaderboardClient"] = None, seed: int | None = None):
        self.leaderboard = leaderboard
        self.seed = seed
        self.phase = RunPhase.IDLE
        self.state: Optional[GameState] = None

        self.game_over: Optional[GameOverSummary] = None
        self.pending_leaderboard: Optional[Future] = None
        self.pending_submission: Optional[Future] = None
        self._submit_in_flight = False
        self.submission_error: Optional[str] = None
        self.submitted: Optional[LeaderboardEntry] = None

    # -------------------- Lifecycle --------------------

    def start(self, seed: int | None = None) -> GameState:
        """Start (or restart) a run with a brand-new state."""
        if seed is None:
            seed = self.seed
        self.state = GameState.new_run(seed)
        self.phase = RunPhase.RUNNING
        self.game_over = None
        self.pending_leaderboard = None
        self.pending_submission = None
        self._submit_in_flight = False
        self.submission_error = None
        self.submitted = None
        logger.debug("Run started (seed=%s)", self.state.seed)
        return self.state

    restart = start

    @property
    def running(self) -> bool:
        return self.phase is RunPhase.RUNNING

    # -------------------- Frame pipeline --------------------

    def step(self, inputs: InputState = NO_INPUT, dt: float = 1.0 / 60.0) -> bool:
        """
        Advance one frame. Returns True on the frame the run ends.
        No-op unless RUNNING.
        """
        if self.phase is not RunPhase.RUNNING or self.state is None:
            return False
        s = self.state

        s.elapsed_s += max(0.0, min(dt, MAX_FRAME_DT))
        s.frame += 1

        s.player.update_physics(inputs)
        s.player.resolve_collisions(s.level.platforms)
        s.camera.advance(s.elapsed_s)
        s.level.update_and_generate(s.camera.y)
        s.score = score_for_height(s.camera.y)

        if s.player.y < s.camera.y - DEATH_MARGIN and not s.game_over_triggered:
            s.game_over_triggered = True
            self._end_run()
            return True
        return False

    def _end_run(self):
        assert self.state is not None
        self.phase = RunPhase.ENDED
        score = self.state.score
        logger.info("Game over: score %d (seed=%s)", score, self.state.seed)

        if self.leaderboard is None:
            self.game_over = GameOverSummary(score=score, qualifies=qualifies(score, []))
            return

        self.game_over = GameOverSummary(score=score)
        self.pending_leaderboard = self.leaderboard.fetch_top_async()
        self.pending_leaderboard.add_done_callback(
            lambda fut, state=self.state: self._on_leaderboard(state, fut))

    def _on_leaderboard(self, state: GameState, fut: Future):
        if state is not self.state:
            return  # restarted while the fetch was in flight
        board = fut.result()    # fetch_top never raises
        self.game_over = GameOverSummary(
            score=state.score,
            leaderboard=board,
            qualifies=qualifies(state.score, board, self.leaderboard.top_n),
        )

    # -------------------- Score submission --------------------

    @property
    def submitting(self) -> bool:
        # cleared by _on_submitted, not by the future finishing
        return self._submit_in_flight

    def can_submit(self) -> bool:
        return (self.phase is RunPhase.ENDED and self.leaderboard is not None
                and self.game_over is not None and self.game_over.qualifies
                and self.submitted is None and not self.submitting)

    def submit_score(self, name: Optional[str]) -> Optional[Future]:
        """Kick off a submission. Returns None while one is in flight or if not allowed."""
        if not self.can_submit():
            return None
        assert self.state is not None and self.leaderboard is not None
        self.submission_error = None
        self._submit_in_flight = True
        fut = self.leaderboard.submit_async(name, self.state.score)
        self.pending_submission = fut
        fut.add_done_callback(lambda f, state=self.state: self._on_submitted(state, f))
        return fut

    def _on_submitted(self, state: GameState, fut: Future):
        # may run on the frame thread when the future is already done, so nothing here blocks
        if state is not self.state:
            return
        try:
            entry = fut.result()
        except LeaderboardError as exc:
            self.submission_error = exc.user_message
            self._submit_in_flight = False
            return
        self.submitted = entry
        self._submit_in_flight = False
        assert self.leaderboard is not None
        self.leaderboard.fetch_top_async().add_done_callback(
            lambda f: self._on_board_refreshed(state, f))

    def _on_board_refreshed(self, state: GameState, fut: Future):
        if state is not self.state:
            return
        self.game_over = GameOverSummary(score=state.score, leaderboard=fut.result(), qualifies=True)
