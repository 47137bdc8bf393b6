"""Status-line rendering and PR URL recognition."""

import re

from prstatus.models import PrReference, PullRequest

STATUS_KEY = "pr-status"
SEPARATOR = " · "

STATE_GLYPH = {"OPEN": "🟢", "MERGED": "🟣", "CLOSED": "🔴"}

# https://<host>/<owner>/<repo>/pull/<digits>, anywhere in the text
_PR_URL_RE = re.compile(r"https://[^/\s]+/([^/\s]+/[^/\s]+)/pull/(\d+)")


def format_status(pr: PullRequest) -> str:
    """Render a single status line.

    🟢 PR #7 · ❌ 2/10 checks failed · 💬 5 unresolved · https://github.com/o/r/pull/7
    """
    parts = [f"{STATE_GLYPH[pr.state]} PR #{pr.number}"]

    checks = pr.checks
    if checks.total > 0:
        if checks.failed > 0:
            parts.append(f"❌ {checks.failed}/{checks.total} checks failed")
        elif checks.pending > 0:
            parts.append(f"⏳ {checks.pending}/{checks.total} checks pending")
        else:
            parts.append(f"✅ {checks.total} checks passed")

    if pr.unresolved_threads > 0:
        parts.append(f"💬 {pr.unresolved_threads} unresolved")

    parts.append(pr.url)
    return SEPARATOR.join(parts)


def parse_pr_url(text: str) -> PrReference | None:
    """Return the first pull request URL found in text, or None.

    >>> parse_pr_url("see https://github.com/owner/repo/pull/42 please").repo
    'owner/repo'
    """
    match = _PR_URL_RE.search(text)
    if match is None:
        return None
    number = int(match.group(2))
    if number == 0:
        return None
    return PrReference(repo=match.group(1), number=number, url=match.group(0))
