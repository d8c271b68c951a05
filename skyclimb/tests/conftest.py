"""Shared fixtures: an in-memory leaderboard stack wired end to end over FastAPI's TestClient."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from skyclimb.leaderboard.api import create_app
from skyclimb.leaderboard.client import LeaderboardClient
from skyclimb.leaderboard.service import ScoreService
from skyclimb.leaderboard.store import MemoryScoreStore


@pytest.fixture
def store() -> MemoryScoreStore:
    return MemoryScoreStore()


@pytest.fixture
def service(store) -> ScoreService:
    return ScoreService(store)


@pytest.fixture
def api(service) -> TestClient:
    return TestClient(create_app(service))


@pytest.fixture
def client(api):
    c = LeaderboardClient("http://testserver", session=api)
    yield c
    c.close()
