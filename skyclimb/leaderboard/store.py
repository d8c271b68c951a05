"""
Score stores: a flat directory of small JSON files, one per leaderboard entry.

The production store is a directory inside a GitHub repository, reached through the
REST contents API. Every write creates a new file, so there is nothing to lock; readers
may see a stale or partial listing while other players are writing.
"""
from __future__ import annotations

import base64
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol

import requests

from .config import Config
from .errors import StoreNotFoundError, TransportError

logger = logging.getLogger(__name__)


class ScoreStore(Protocol):
    def list_names(self) -> List[str]:
        """Resource names in the scores directory. Raises StoreNotFoundError if absent."""
        ...

    def read(self, name: str) -> str:
        ...

    def create(self, name: str, text: str, message: str) -> None:
        """Create a new resource. Never overwrites."""
        ...


class MemoryScoreStore:
    """In-process store for tests and offline play."""

    def __init__(self, files: Optional[Dict[str, str]] = None, exists: bool = True):
        self.files: Dict[str, str] = dict(files or {})
        self.exists = exists
        self._lock = threading.Lock()

    def list_names(self) -> List[str]:
        if not self.exists:
            raise StoreNotFoundError("memory")
        with self._lock:
            return list(self.files)

    def read(self, name: str) -> str:
        with self._lock:
            try:
                return self.files[name]
            except KeyError:
                raise TransportError("read", f"no resource named {name!r}", status=404) from None

    def create(self, name: str, text: str, message: str) -> None:
        with self._lock:
            if name in self.files:
                raise TransportError("create", f"{name!r} already exists", status=422)
            self.files[name] = text
            self.exists = True


class DirectoryScoreStore:
    """Local directory of JSON files (a checked-out scores/ folder, for instance)."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def list_names(self) -> List[str]:
        if not self.root.is_dir():
            raise StoreNotFoundError(str(self.root))
        return sorted(p.name for p in self.root.iterdir() if p.is_file())

    def read(self, name: str) -> str:
        try:
            return (self.root / name).read_text(encoding="utf-8")
        except OSError as exc:
            raise TransportError("read", str(exc)) from exc

    def create(self, name: str, text: str, message: str) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            # "x" refuses to clobber an existing file
            with (self.root / name).open("x", encoding="utf-8") as f:
                f.write(text)
        except OSError as exc:
            raise TransportError("create", str(exc)) from exc
        logger.debug("Stored %s (%s)", name, message)


class GitHubContentStore:
    """GitHub REST contents API: one file per score under `path` on `branch`."""

    def __init__(self, token: str, owner: str, repo: str,
                 path: str = "scores", branch: str = "main",
                 api_url: str = "https://api.github.com",
                 timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.owner = owner
        self.repo = repo
        self.path = path.strip("/")
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
        })
        # name -> download_url, refreshed by list_names()
        self._download_urls: Dict[str, str] = {}

    @classmethod
    def from_config(cls) -> "GitHubContentStore":
        return cls(
            token=Config.GITHUB_TOKEN or "",
            owner=Config.REPO_OWNER,
            repo=Config.REPO_NAME,
            path=Config.SCORES_PATH,
            branch=Config.BRANCH,
            api_url=Config.GITHUB_API_URL,
            timeout=Config.HTTP_TIMEOUT,
        )

    def _contents_url(self, name: str = "") -> str:
        base = f"{self.api_url}/repos/{self.owner}/{self.repo}/contents/{self.path}"
        return f"{base}/{name}" if name else base

    def list_names(self) -> List[str]:
        try:
            resp = self.session.get(self._contents_url(), params={"ref": self.branch},
                                    timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError("list", str(exc)) from exc

        if resp.status_code == 404:
            raise StoreNotFoundError(self.path)
        if not resp.ok:
            raise TransportError("list", resp.text[:200], status=resp.status_code)

        try:
            listing = resp.json()
        except ValueError as exc:
            raise TransportError("list", f"non-JSON listing: {exc}") from exc
        if not isinstance(listing, list):
            # contents API returns an object when `path` is a file, not a directory
            return []

        self._download_urls = {
            item["name"]: item.get("download_url") or ""
            for item in listing
            if isinstance(item, dict) and item.get("type", "file") == "file" and isinstance(item.get("name"), str)
        }
        return list(self._download_urls)

    def read(self, name: str) -> str:
        url = self._download_urls.get(name)
        try:
            if url:
                resp = self.session.get(url, timeout=self.timeout)
            else:
                resp = self.session.get(self._contents_url(name), params={"ref": self.branch},
                                        headers={"Accept": "application/vnd.github.v3.raw"},
                                        timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError("read", str(exc)) from exc
        if not resp.ok:
            raise TransportError("read", name, status=resp.status_code)
        return resp.text

    def create(self, name: str, text: str, message: str) -> None:
        body = {
            "message": message,
            "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
            "branch": self.branch,
        }
        try:
            # no "sha" in the body: GitHub rejects the PUT if the file already exists
            resp = self.session.put(self._contents_url(name), json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError("create", str(exc)) from exc
        if not resp.ok:
            logger.error("GitHub API error %s on %s: %s", resp.status_code, name, resp.text[:500])
            raise TransportError("create", name, status=resp.status_code)


def store_from_config() -> ScoreStore:
    Config.validate()
    if Config.SCORE_STORE == "github":
        return GitHubContentStore.from_config()
    if Config.SCORE_STORE == "memory":
        return MemoryScoreStore()
    return DirectoryScoreStore(Config.SCORES_DIR)
