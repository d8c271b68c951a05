# skyclimb/leaderboard/service.py
from __future__ import annotations

import logging
import math
import random
import string
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..game.config import MAX_LEADERBOARD_ENTRIES, MAX_NAME_LENGTH
from .errors import DecodeError, StoreNotFoundError, TransportError, ValidationError
from .models import LeaderboardEntry, iso_timestamp, rank_entries
from .store import ScoreStore

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def validate_submission(name: object, score: object) -> tuple[str, int]:
    """Server-side checks. Returns (truncated name, integer score)."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is missing")
    # bool is an int subclass; JSON true/false is not a score
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValidationError("score is not a number")
    # ints of any size are exact; only floats can be nan, inf or fractional
    if isinstance(score, float) and (not math.isfinite(score) or score != int(score)):
        raise ValidationError("score must be a non-negative integer")
    if score < 0:
        raise ValidationError("score must be a non-negative integer")
    return name[:MAX_NAME_LENGTH], int(score)


class ScoreService:
    """
    Append-only leaderboard over a ScoreStore.
    Reads tolerate missing directories and corrupt files; writes always create a new resource.
    """

    def __init__(self, store: ScoreStore,
                 limit: int = MAX_LEADERBOARD_ENTRIES,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
                 rng: Optional[random.Random] = None):
        self.store = store
        self.limit = limit
        self.clock = clock
        self.rng = rng or random.Random()

    def top_scores(self, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        try:
            names = self.store.list_names()
        except StoreNotFoundError:
            return []

        entries: List[LeaderboardEntry] = []
        for name in names:
            if not isinstance(name, str) or not name.endswith(".json"):
                continue
            try:
                entries.append(LeaderboardEntry.from_json(self.store.read(name), source=name))
            except (DecodeError, TransportError) as exc:
                logger.warning("Skipping score file %s: %s", name, exc)
        return rank_entries(entries, self.limit if limit is None else limit)

    def _resource_name(self, timestamp_ms: int) -> str:
        suffix = "".join(self.rng.choice(_SUFFIX_ALPHABET) for _ in range(9))
        return f"score_{timestamp_ms}_{suffix}.json"

    def save_score(self, name: object, score: object) -> LeaderboardEntry:
        clean_name, clean_score = validate_submission(name, score)
        now = self.clock()
        timestamp_ms = int(now.timestamp() * 1000)
        entry = LeaderboardEntry(name=clean_name, score=clean_score,
                                 date=iso_timestamp(now), id=timestamp_ms)
        resource = self._resource_name(timestamp_ms)
        self.store.create(resource, entry.to_json(), f"Add score: {clean_name} - {clean_score}")
        logger.info("Saved score %s for %r as %s", clean_score, clean_name, resource)
        return entry
