"""GitHub backend: git and gh CLI for branch/PR lookups, GraphQL API for review threads."""

import json
import subprocess

import httpx

from prstatus.providers.base import BackendError, PullRequestBackend
from prstatus.settings import PrStatusSettings

PR_FIELDS = "number,title,url,state,statusCheckRollup"

_REVIEW_THREADS = """
query ReviewThreads($owner: String!, $name: String!, $number: Int!, $limit: Int!) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {
      reviewThreads(first: $limit) {
        nodes { isResolved }
      }
    }
  }
}
"""

# gh exits non-zero with this on stderr when the branch simply has no PR.
_NO_PR_MARKER = "no pull requests found"


class GitHubBackend(PullRequestBackend):
    def __init__(self, settings: PrStatusSettings) -> None:
        self._settings = settings
        self._token: str | None = settings.github_token.get_secret_value() if settings.github_token else None

    def _run(self, args: list[str], timeout: float, cwd: str | None = None) -> str:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        if result.returncode != 0:
            raise BackendError(f"{' '.join(args[:3])} failed: {result.stderr.strip()}")
        return result.stdout.strip()

    def _gh_json(self, args: list[str], cwd: str | None = None) -> dict | None:
        try:
            out = self._run([self._settings.gh_path, *args], self._settings.query_timeout, cwd=cwd)
        except BackendError as exc:
            if _NO_PR_MARKER in str(exc).lower():
                return None
            raise
        if not out:
            return None
        return json.loads(out)

    def _resolve_token(self) -> str:
        if self._token:
            return self._token
        token = self._run([self._settings.gh_path, "auth", "token"], self._settings.repo_timeout)
        if not token:
            raise BackendError("gh auth token returned nothing. Run: gh auth login")
        self._token = token
        return token

    def current_branch(self, cwd: str) -> str:
        return self._run(
            [self._settings.git_path, "rev-parse", "--abbrev-ref", "HEAD"],
            self._settings.branch_timeout,
            cwd=cwd,
        )

    def repo_coordinates(self, cwd: str) -> dict:
        out = self._run(
            [self._settings.gh_path, "repo", "view", "--json", "owner,name"],
            self._settings.repo_timeout,
            cwd=cwd,
        )
        return json.loads(out)

    def pr_for_branch(self, cwd: str) -> dict | None:
        return self._gh_json(["pr", "view", "--json", PR_FIELDS], cwd=cwd)

    def pr_for_number(self, repo: str, number: int) -> dict | None:
        return self._gh_json(["pr", "view", str(number), "--repo", repo, "--json", PR_FIELDS])

    def review_threads(self, owner: str, name: str, number: int) -> list[dict]:
        response = httpx.post(
            self._settings.graphql_url,
            json={
                "query": _REVIEW_THREADS,
                "variables": {
                    "owner": owner,
                    "name": name,
                    "number": number,
                    "limit": self._settings.review_thread_limit,
                },
            },
            headers={
                "Authorization": f"Bearer {self._resolve_token()}",
                "Content-Type": "application/json",
            },
            timeout=self._settings.query_timeout,
        )
        response.raise_for_status()
        data = response.json()
        if data.get("errors"):
            raise BackendError(f"GitHub GraphQL error: {data['errors']}")
        pull = ((data.get("data") or {}).get("repository") or {}).get("pullRequest") or {}
        nodes = (pull.get("reviewThreads") or {}).get("nodes")
        if not isinstance(nodes, list):
            raise BackendError("GitHub GraphQL response has no reviewThreads.nodes")
        return nodes
