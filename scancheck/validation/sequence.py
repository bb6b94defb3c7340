"""Comparison against an expected call sequence.

Not registered: it needs the expected records, which only the test that
drove the traversal knows. Typical use pins the exact output of a scan
over a known flow graph:

    expected = [EventRecord.of(EventKind.PARALLEL_END, 5, 9), ...]
    assert not check_sequence(log, expected)
"""

from typing import Sequence

from ..events import EventLog, EventRecord
from .core import CheckResult, Severity, Violation


def check_sequence(log: EventLog, expected: Sequence[EventRecord]) -> list[CheckResult]:
    """Compare a log to the expected records, position by position.

    Reports the first differing position and, separately, a length
    mismatch. An empty list means the log is exactly the expected one.
    """
    NAME = "sequence"
    results = []

    for i, (actual, wanted) in enumerate(zip(log, expected)):
        if actual != wanted:
            results.append(CheckResult(NAME, Severity.ERROR,
                f"Event {i} differs: expected {wanted}, got {actual}",
                Violation.SEQUENCE_MISMATCH,
                tuple(ref for ref in actual.slots if ref is not None)))
            break

    if len(log) != len(expected):
        results.append(CheckResult(NAME, Severity.ERROR,
            f"Expected {len(expected)} event(s), got {len(log)}",
            Violation.SEQUENCE_MISMATCH))

    return results
