"""
Game-side leaderboard client.

Reads never fail the caller: an unreachable or broken leaderboard is just an empty one,
so the game stays playable offline. Submissions raise SubmissionError so the UI can offer
a retry. The *_async variants run on a worker thread and hand back a Future, which keeps
HTTP off the frame loop.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, List, Optional

import requests

from ..game.config import DEFAULT_PLAYER_NAME, MAX_LEADERBOARD_ENTRIES, MAX_NAME_LENGTH
from .config import Config
from .errors import DecodeError, LeaderboardError, SubmissionError, TransportError, ValidationError
from .models import LeaderboardEntry, rank_entries

logger = logging.getLogger(__name__)


def clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    return name[:MAX_NAME_LENGTH] if name else DEFAULT_PLAYER_NAME


def qualifies(score: int, board: List[LeaderboardEntry], top_n: int = MAX_LEADERBOARD_ENTRIES) -> bool:
    """Positive, and either the board has room or the score beats its last entry."""
    if score <= 0:
        return False
    return len(board) < top_n or score > board[-1].score


class LeaderboardClient:
    def __init__(self, base_url: str,
                 session: Any = None,
                 timeout: float = Config.HTTP_TIMEOUT,
                 top_n: int = MAX_LEADERBOARD_ENTRIES,
                 max_workers: int = 2):
        """
        Args:
            base_url: API root; requests go to ``{base_url}/scores``.
            session: anything with requests-style ``get``/``post`` (a requests.Session by default).
        """
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.top_n = top_n
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="leaderboard")
        self._cached: List[LeaderboardEntry] = []

    @property
    def scores_url(self) -> str:
        return f"{self.base_url}/scores"

    @property
    def cached(self) -> List[LeaderboardEntry]:
        return list(self._cached)

    @property
    def best_score(self) -> Optional[int]:
        return self._cached[0].score if self._cached else None

    def qualifies(self, score: int) -> bool:
        return qualifies(score, self._cached, self.top_n)

    # -------------------- Reads --------------------

    def _get_scores(self) -> List[Any]:
        try:
            resp = self.session.get(self.scores_url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError("fetch", str(exc)) from exc
        if resp.status_code != 200:
            raise TransportError("fetch", "leaderboard API error", status=resp.status_code)
        try:
            body = resp.json()
        except ValueError as exc:
            raise DecodeError("leaderboard response", str(exc)) from exc
        if not isinstance(body, dict) or not isinstance(body.get("scores", []), list):
            raise DecodeError("leaderboard response", "expected {'scores': [...]}")
        return body.get("scores") or []

    def fetch_top(self, n: Optional[int] = None) -> List[LeaderboardEntry]:
        """Top n entries, best first. Empty on any failure. Replaces the cache."""
        n = self.top_n if n is None else n
        try:
            raw = self._get_scores()
        except LeaderboardError as exc:
            logger.warning("Error loading leaderboard: %s", exc)
            self._cached = []
            return []

        entries: List[LeaderboardEntry] = []
        for i, item in enumerate(raw):
            try:
                entries.append(LeaderboardEntry.from_dict(item, source=f"scores[{i}]"))
            except DecodeError as exc:
                logger.warning("Skipping leaderboard entry: %s", exc)

        self._cached = rank_entries(entries, n)
        return list(self._cached)

    # -------------------- Writes --------------------

    def submit(self, name: Optional[str], score: int) -> LeaderboardEntry:
        """Save a score. Raises SubmissionError (cause chained) on any failure."""
        try:
            return self._submit(clean_name(name), score)
        except LeaderboardError as exc:
            logger.error("Error saving score: %s", exc)
            raise SubmissionError(exc) from exc

    def _submit(self, name: str, score: int) -> LeaderboardEntry:
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            raise ValidationError(f"score must be a non-negative integer, got {score!r}")
        try:
            resp = self.session.post(self.scores_url, json={"name": name, "score": score},
                                     timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError("submit", str(exc)) from exc

        if resp.status_code == 400:
            raise ValidationError("rejected by server")
        if resp.status_code != 200:
            raise TransportError("submit", "leaderboard API error", status=resp.status_code)
        try:
            body = resp.json()
        except ValueError as exc:
            raise DecodeError("submit response", str(exc)) from exc
        if not isinstance(body, dict) or not body.get("success"):
            raise DecodeError("submit response", f"unexpected body {body!r}")
        return LeaderboardEntry.from_dict(body.get("score"), source="submit response")

    # -------------------- Async --------------------

    def fetch_top_async(self, n: Optional[int] = None) -> "Future[List[LeaderboardEntry]]":
        return self._executor.submit(self.fetch_top, n)

    def submit_async(self, name: Optional[str], score: int) -> "Future[LeaderboardEntry]":
        return self._executor.submit(self.submit, name, score)

    def close(self):
        self._executor.shutdown(wait=False)
        close = getattr(self.session, "close", None)
        if close is not None:
            close()
