"""Tally raw check-rollup records and review threads."""

from collections.abc import Iterable, Mapping

from prstatus.models import CheckTally

PASSING_CONCLUSIONS = frozenset({"SUCCESS", "NEUTRAL", "SKIPPED"})
FAILING_CONCLUSIONS = frozenset({"FAILURE", "TIMED_OUT", "CANCELLED", "ACTION_REQUIRED"})
PENDING_STATUSES = frozenset({"IN_PROGRESS", "QUEUED", "PENDING", "WAITING"})


def _field(record: Mapping, key: str) -> str:
    value = record.get(key)
    return str(value) if value else ""


def aggregate_checks(raw_checks: Iterable[Mapping]) -> CheckTally:
    """Sort each check into exactly one of passed/failed/pending.

    Conclusion wins over status. A check with neither a recognised conclusion
    nor a recognised status counts as pending, except COMPLETED with no
    conclusion, which counts as passed. Records with no name, conclusion or
    status at all (e.g. deployment status contexts) are not counted.
    """
    total = passed = failed = pending = 0
    for record in raw_checks:
        name = _field(record, "name")
        conclusion = _field(record, "conclusion").upper()
        status = _field(record, "status").upper()

        if not name and not conclusion and not status:
            continue

        total += 1
        if conclusion in PASSING_CONCLUSIONS:
            passed += 1
        elif conclusion in FAILING_CONCLUSIONS:
            failed += 1
        elif status in PENDING_STATUSES:
            pending += 1
        elif status == "COMPLETED":
            passed += 1
        else:
            pending += 1

    return CheckTally(total=total, passed=passed, failed=failed, pending=pending)


def count_unresolved_threads(threads: Iterable[Mapping | None]) -> int:
    """Count threads whose isResolved is false. Nodes that are not objects are skipped."""
    return sum(1 for thread in threads if isinstance(thread, Mapping) and not thread.get("isResolved"))
