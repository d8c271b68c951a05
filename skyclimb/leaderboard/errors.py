"""
Leaderboard error taxonomy. Every error carries a developer message and a short
user-facing message that the UI can show as-is.
"""
from typing import Optional


class LeaderboardError(Exception):
    """Base exception for leaderboard errors."""
    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message


class TransportError(LeaderboardError):
    """Store or API unreachable, or it answered with a non-success status."""
    def __init__(self, operation: str, details: str = "", status: Optional[int] = None):
        suffix = f" (HTTP {status})" if status is not None else ""
        super().__init__(
            f"Transport error during {operation}{suffix}: {details}",
            "Leaderboard is unreachable. Please try again."
        )
        self.operation = operation
        self.status = status


class StoreNotFoundError(TransportError):
    """The scores directory does not exist (yet)."""
    def __init__(self, path: str):
        super().__init__("list", f"'{path}' not found", status=404)
        self.path = path


class ValidationError(LeaderboardError):
    """Malformed submission payload."""
    def __init__(self, reason: str):
        super().__init__(f"Invalid submission: {reason}", "Invalid data")
        self.reason = reason


class DecodeError(LeaderboardError):
    """A stored record or response body is not well-formed JSON or not a score record."""
    def __init__(self, source: str, details: str = ""):
        super().__init__(
            f"Could not decode {source}: {details}",
            "Leaderboard data is corrupted."
        )
        self.source = source


class SubmissionError(LeaderboardError):
    """Raised by the client when a score could not be saved. The cause is chained."""
    def __init__(self, cause: LeaderboardError):
        super().__init__(f"Score submission failed: {cause.message}", cause.user_message)
        self.cause = cause
