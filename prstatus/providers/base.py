"""Abstract base class for code-hosting backends.

Implementations return raw payloads and raise on failure; StatusQueryService
turns both into models or None.
"""

from abc import ABC, abstractmethod


class BackendError(RuntimeError):
    """A backend call ran but did not produce usable data."""


class PullRequestBackend(ABC):
    @abstractmethod
    def current_branch(self, cwd: str) -> str: ...

    @abstractmethod
    def repo_coordinates(self, cwd: str) -> dict:
        """Return {"owner": {"login": ...}, "name": ...}."""

    @abstractmethod
    def pr_for_branch(self, cwd: str) -> dict | None:
        """Return {number, title, url, state, statusCheckRollup}, or None if the branch has no PR."""

    @abstractmethod
    def pr_for_number(self, repo: str, number: int) -> dict | None: ...

    @abstractmethod
    def review_threads(self, owner: str, name: str, number: int) -> list[dict]:
        """Return up to the configured limit of {"isResolved": bool} nodes."""
