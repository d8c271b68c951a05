"""Test doubles shared by the leaderboard and game-loop tests."""
from __future__ import annotations

import json
import time
from typing import Any, Callable


class FakeResponse:
    """Just enough of requests.Response for the client and the GitHub store."""
    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class ScriptedSession:
    """requests-style session that replays canned responses (or raises canned errors)."""
    def __init__(self, get=None, post=None, put=None):
        self.headers = {}
        self.calls = []
        self._get, self._post, self._put = get, post, put

    def _answer(self, handler, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        result = handler(url, **kwargs) if callable(handler) else handler
        if isinstance(result, Exception):
            raise result
        return result

    def get(self, url, **kwargs):
        return self._answer(self._get, "GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._answer(self._post, "POST", url, kwargs)

    def put(self, url, **kwargs):
        return self._answer(self._put, "PUT", url, kwargs)

    def close(self):
        pass


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll until a worker-thread callback has landed."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
