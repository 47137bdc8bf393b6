"""Status query service: backend payloads in, models or None out.

Every backend failure (no auth, no network, timeout, malformed JSON, missing
fields) is logged at DEBUG and reported as None. Nothing raises past this
module; the next poll is the retry.
"""

import json
import logging
import subprocess
from collections.abc import Callable
from typing import TypeVar

import httpx
from pydantic import ValidationError

from prstatus.checks import aggregate_checks, count_unresolved_threads
from prstatus.models import CheckTally, PullRequest, RepoCoordinates
from prstatus.providers.base import BackendError, PullRequestBackend

logger = logging.getLogger(__name__)

DETACHED_HEAD = "HEAD"

_BACKEND_FAILURES = (
    BackendError,
    OSError,
    subprocess.SubprocessError,
    json.JSONDecodeError,
    httpx.HTTPError,
    ValidationError,
    KeyError,
    TypeError,
    AttributeError,
    ValueError,
)

T = TypeVar("T")


def _attempt(what: str, call: Callable[[], T]) -> T | None:
    try:
        return call()
    except _BACKEND_FAILURES as exc:
        logger.debug("%s unavailable: %s", what, exc)
        return None


class StatusQueryService:
    def __init__(self, backend: PullRequestBackend) -> None:
        self._backend = backend

    def resolve_branch(self, cwd: str) -> str | None:
        """Return the checked-out branch, or None when detached, not a repo, or unknown."""
        branch = _attempt("branch", lambda: self._backend.current_branch(cwd))
        if not branch or branch == DETACHED_HEAD:
            return None
        return branch

    def resolve_repo_coordinates(self, cwd: str) -> RepoCoordinates | None:
        def lookup() -> RepoCoordinates | None:
            raw = self._backend.repo_coordinates(cwd)
            owner = (raw.get("owner") or {}).get("login")
            name = raw.get("name")
            if not owner or not name:
                return None
            return RepoCoordinates(owner=owner, name=name)

        return _attempt("repo coordinates", lookup)

    def query_by_branch(self, cwd: str, repo: RepoCoordinates | None = None) -> PullRequest | None:
        raw = _attempt("pull request for branch", lambda: self._backend.pr_for_branch(cwd))
        return self._build(raw, repo)

    def query_by_number(self, repo_ref: str, number: int) -> PullRequest | None:
        raw = _attempt(f"pull request {repo_ref}#{number}", lambda: self._backend.pr_for_number(repo_ref, number))
        owner, _, name = repo_ref.partition("/")
        repo = RepoCoordinates(owner=owner, name=name) if owner and name else None
        return self._build(raw, repo)

    def _build(self, raw: dict | None, repo: RepoCoordinates | None) -> PullRequest | None:
        if not raw or not isinstance(raw, dict):
            return None
        if not raw.get("number") or not raw.get("url"):
            return None

        def parse() -> PullRequest:
            rollup = raw.get("statusCheckRollup")
            checks = aggregate_checks(rollup) if isinstance(rollup, list) else CheckTally()
            return PullRequest(
                number=raw["number"],
                title=raw.get("title") or "",
                url=raw["url"],
                state=str(raw.get("state", "")).upper(),
                checks=checks,
            )

        pr = _attempt("pull request payload", parse)
        if pr is None or repo is None:
            return pr

        unresolved = _attempt(
            f"review threads for {repo.slug}#{pr.number}",
            lambda: count_unresolved_threads(self._backend.review_threads(repo.owner, repo.name, pr.number)),
        )
        if unresolved is None:
            return pr
        return pr.model_copy(update={"unresolved_threads": unresolved})
