# skyclimb/leaderboard/models.py
from __future__ import annotations
import json
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError


class LeaderboardEntry(BaseModel):
    """One persisted score. Written once, never updated."""
    model_config = ConfigDict(frozen=True)

    name: str
    score: int = Field(ge=0)
    date: str
    id: int

    def to_json(self) -> str:
        return json.dumps(self.model_dump(), indent=2)

    @classmethod
    def from_json(cls, text: str, source: str = "record") -> "LeaderboardEntry":
        try:
            return cls.model_validate_json(text)
        except PydanticValidationError as exc:
            raise DecodeError(source, str(exc)) from exc

    @classmethod
    def from_dict(cls, data: object, source: str = "record") -> "LeaderboardEntry":
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise DecodeError(source, str(exc)) from exc


def iso_timestamp(now: datetime) -> str:
    """2025-01-31T12:00:00.000Z"""
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def rank_entries(entries: List[LeaderboardEntry], limit: int) -> List[LeaderboardEntry]:
    """Descending by score; ties keep their incoming order (sorted() is stable)."""
    return sorted(entries, key=lambda e: e.score, reverse=True)[:limit]
