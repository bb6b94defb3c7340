"""Duplicate event detection.

The engine must report each structural event exactly once per pass, so
no two records in a log may be equal (same kind, same four slots).
"""

from ..events import EventLog, EventRecord
from .core import CheckResult, Severity, Violation, register_check


def check_duplicates(log: EventLog, first_only: bool = True) -> list[CheckResult]:
    """Find records equal to an earlier record in the log.

    Stops at the first collision unless first_only is False, in which
    case every repeat is reported (each against its first occurrence).
    """
    NAME = "no_duplicates"
    results = []
    first_seen: dict[EventRecord, int] = {}

    for i, record in enumerate(log):
        earlier = first_seen.get(record)
        if earlier is None:
            first_seen[record] = i
            continue
        results.append(CheckResult(NAME, Severity.ERROR,
            f"Duplicate call: {record} at index {i} (first seen at index {earlier})",
            Violation.DUPLICATE_EVENT,
            tuple(ref for ref in record.slots if ref is not None)))
        if first_only:
            break

    return results


@register_check("no_duplicates")
def validate_no_duplicates(log: EventLog) -> list[CheckResult]:
    """Verify no callback was reported twice for the same event."""
    return check_duplicates(log)
