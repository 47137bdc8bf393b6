"""Shared pydantic models: the contract between the backend, the selector and the renderer."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PrState = Literal["OPEN", "MERGED", "CLOSED"]


class CheckTally(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = Field(0, ge=0)
    passed: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    pending: int = Field(0, ge=0)


class PullRequest(BaseModel):
    """Snapshot of a pull request at query time."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(gt=0)
    title: str = ""
    url: str
    state: PrState
    checks: CheckTally = CheckTally()
    unresolved_threads: int = Field(0, ge=0)

    @property
    def is_open(self) -> bool:
        return self.state == "OPEN"


class RepoCoordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


class PrReference(BaseModel):
    """A pull request named by URL: repo is "owner/name"."""

    model_config = ConfigDict(frozen=True)

    repo: str
    number: int = Field(gt=0)
    url: str = ""

    def matches(self, other: "PrReference | None") -> bool:
        if other is None:
            return False
        return self.repo.lower() == other.repo.lower() and self.number == other.number


class SelectionState(BaseModel):
    """Everything the selector remembers between polls of one session.

    SelectionState() is the unselected state; transitions return new copies.
    """

    model_config = ConfigDict(frozen=True)

    repo: RepoCoordinates | None = None  # cached once per session
    last_branch: str | None = None
    last_pull_request: PullRequest | None = None
    pinned: PrReference | None = None

    @property
    def mode(self) -> Literal["unselected", "branch", "pinned"]:
        if self.pinned is not None:
            return "pinned"
        if self.last_pull_request is not None:
            return "branch"
        return "unselected"
