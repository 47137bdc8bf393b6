"""Shared test fixtures."""

import pytest

from prstatus.models import CheckTally, PullRequest
from prstatus.providers.base import BackendError, PullRequestBackend
from prstatus.query import StatusQueryService


def pr_payload(number: int, state: str = "OPEN", repo: str = "owner/repo", checks: list | None = None) -> dict:
    return {
        "number": number,
        "title": f"PR {number}",
        "url": f"https://github.com/{repo}/pull/{number}",
        "state": state,
        "statusCheckRollup": checks or [],
    }


class FakeBackend(PullRequestBackend):
    """In-memory backend. Set an attribute to an exception to make that call fail."""

    def __init__(self) -> None:
        self.branch: str | Exception = "feature"
        self.repo: dict | Exception = {"owner": {"login": "owner"}, "name": "repo"}
        self.branch_pr: dict | None | Exception = None
        self.prs: dict[tuple[str, int], dict] = {}
        self.threads: list[dict] | Exception = []
        self.calls: list[tuple] = []

    @staticmethod
    def _result(value):
        if isinstance(value, Exception):
            raise value
        return value

    def current_branch(self, cwd: str) -> str:
        self.calls.append(("current_branch", cwd))
        return self._result(self.branch)

    def repo_coordinates(self, cwd: str) -> dict:
        self.calls.append(("repo_coordinates", cwd))
        return self._result(self.repo)

    def pr_for_branch(self, cwd: str) -> dict | None:
        self.calls.append(("pr_for_branch", cwd))
        return self._result(self.branch_pr)

    def pr_for_number(self, repo: str, number: int) -> dict | None:
        self.calls.append(("pr_for_number", repo, number))
        if (repo, number) not in self.prs:
            raise BackendError("no pull requests found")
        return self.prs[(repo, number)]

    def review_threads(self, owner: str, name: str, number: int) -> list[dict]:
        self.calls.append(("review_threads", owner, name, number))
        return self._result(self.threads)

    def count(self, call: str) -> int:
        return sum(1 for c in self.calls if c[0] == call)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def service(backend: FakeBackend) -> StatusQueryService:
    return StatusQueryService(backend)


@pytest.fixture
def open_pr() -> PullRequest:
    return PullRequest(
        number=42,
        title="Test PR",
        url="https://github.com/owner/repo/pull/42",
        state="OPEN",
        checks=CheckTally(),
        unresolved_threads=0,
    )
