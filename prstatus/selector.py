"""Decide which pull request is active for a session.

A session tracks either the checked-out branch's own pull request or one
pinned by a URL mention in user input. The transitions below are pure: they
take a SelectionState and return a Selection (new state, PR to display).
PrSelector owns the state for one session.
"""

import logging
import threading
from typing import NamedTuple

from prstatus.models import PrReference, PullRequest, SelectionState
from prstatus.query import StatusQueryService
from prstatus.render import parse_pr_url

logger = logging.getLogger(__name__)


class Selection(NamedTuple):
    state: SelectionState
    pull_request: PullRequest | None  # None clears the display


def reset() -> SelectionState:
    return SelectionState()


def _with_repo(state: SelectionState, cwd: str, service: StatusQueryService) -> SelectionState:
    if state.repo is not None:
        return state
    return state.model_copy(update={"repo": service.resolve_repo_coordinates(cwd)})


def poll(state: SelectionState, cwd: str, service: StatusQueryService) -> Selection:
    """One poll tick."""
    branch = service.resolve_branch(cwd)
    if branch != state.last_branch:
        logger.debug("branch changed: %s -> %s", state.last_branch, branch)
        state = state.model_copy(update={"last_branch": branch, "last_pull_request": None})

    if state.pinned is not None:
        return _poll_pinned(state, state.pinned, cwd, branch, service)

    if branch is None:
        return Selection(state.model_copy(update={"last_pull_request": None}), None)

    state = _with_repo(state, cwd, service)
    pr = service.query_by_branch(cwd, state.repo)
    return Selection(state.model_copy(update={"last_pull_request": pr}), pr)


def _poll_pinned(
    state: SelectionState, pin: PrReference, cwd: str, branch: str | None, service: StatusQueryService
) -> Selection:
    pinned_pr = service.query_by_number(pin.repo, pin.number)
    if pinned_pr is None:
        # Transient failure: keep the pin and the last value shown for it.
        return Selection(state, state.last_pull_request)

    if branch is not None:
        state = _with_repo(state, cwd, service)
        branch_pr = service.query_by_branch(cwd, state.repo)
        if branch_pr is not None and branch_pr.is_open:
            logger.debug("branch %s has open PR #%d, dropping pin %s#%d", branch, branch_pr.number, pin.repo, pin.number)
            return Selection(state.model_copy(update={"pinned": None, "last_pull_request": branch_pr}), branch_pr)

    return Selection(state.model_copy(update={"last_pull_request": pinned_pr}), pinned_pr)


def mention(state: SelectionState, text: str, service: StatusQueryService) -> Selection | None:
    """Handle user text that may reference a pull request URL.

    Returns None when the text is ignored and the display should not change.
    """
    ref = parse_pr_url(text)
    if ref is None:
        return None
    if ref.matches(state.pinned):
        return None
    current = state.last_pull_request
    if state.pinned is None and current is not None and current.is_open:
        logger.debug("ignoring %s#%d: branch PR #%d is open", ref.repo, ref.number, current.number)
        return None

    logger.debug("pinning %s#%d", ref.repo, ref.number)
    pr = service.query_by_number(ref.repo, ref.number)
    return Selection(state.model_copy(update={"pinned": ref, "last_pull_request": pr}), pr)


class PrSelector:
    """Selection state for one session, safe to drive from a timer thread and an input thread."""

    def __init__(self, service: StatusQueryService) -> None:
        self._service = service
        self._state = reset()
        self._lock = threading.Lock()

    @property
    def state(self) -> SelectionState:
        return self._state

    def poll(self, cwd: str) -> PullRequest | None:
        with self._lock:
            self._state, pr = poll(self._state, cwd, self._service)
        return pr

    def mention(self, text: str) -> Selection | None:
        with self._lock:
            selection = mention(self._state, text, self._service)
            if selection is not None:
                self._state = selection.state
        return selection

    def switch(self, cwd: str) -> PullRequest | None:
        with self._lock:
            self._state = reset()
            self._state, pr = poll(self._state, cwd, self._service)
        return pr
