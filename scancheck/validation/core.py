"""Core check types, registry, and runner.

Check submodules register through register_check when the package
__init__ imports them; run_checks then runs whatever is registered.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable

from ..events import EventLog, NodeRef, format_node_ref

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Result severity level.

    ERROR: The traversal misbehaved; the log violates an invariant.
    INFO:  Legal but worth noting (e.g. a parallel still in progress).
    """
    ERROR = auto()
    INFO  = auto()


class Violation(Enum):
    """What kind of invariant an ERROR result breaks."""
    DUPLICATE_EVENT       = auto()   # same (kind, slots) logged twice
    REGION_MISMATCH       = auto()   # parallel start/end point at different regions
    UNMATCHED_REGION_END  = auto()   # backward scan: parallel end(s) never closed by a start
    UNOPENED_REGION_END   = auto()   # forward scan: parallel end with no start before it
    BRANCH_COUNT_MISMATCH = auto()   # unequal branch start/end counts for a region
    BRANCH_KEY_MISMATCH   = auto()   # region has branch starts or ends but not both
    SEQUENCE_MISMATCH     = auto()   # log differs from an expected call sequence


@dataclass(frozen=True)
class CheckResult:
    """A single diagnostic from a check.

    node_ids carries the ids needed to find the offending node(s) in
    the flow graph; for region checks these are parallel start ids.
    """
    check: str
    severity: Severity
    message: str
    violation: Violation | None = None
    node_ids: tuple[NodeRef, ...] = ()

    def __str__(self) -> str:
        tag = f" ({self.violation.name})" if self.violation is not None else ""
        return f"[{self.severity.name}] {self.check}{tag}: {self.message}"


class CheckFailedError(AssertionError):
    """Raised when checks produce results at or above the fail level.

    Subclasses AssertionError so test runners report it as a failed
    assertion rather than an error in the harness.
    """

    def __init__(self, results: list[CheckResult],
                 fail_on: Severity = Severity.ERROR) -> None:
        self.results = results
        self.fail_on = fail_on
        fatal = [r for r in results if r.severity.value <= fail_on.value]
        msg = (f"Traversal checks failed ({len(fatal)} result(s) "
               f"at {fail_on.name} or above):\n")
        msg += "\n".join(f"  {r}" for r in fatal)
        super().__init__(msg)

    @property
    def violations(self) -> list[Violation]:
        return [r.violation for r in self.results if r.violation is not None]


def format_ids(ids: Iterable[NodeRef]) -> str:
    return ", ".join(format_node_ref(i) for i in ids)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass
class Check:
    """A named check over a finished EventLog.

    Attributes:
        name: Identifier used in results and for selecting checks.
        check: Callable that inspects a log and returns diagnostics.
            An empty list, or one with no ERROR results, means it passed.
    """
    name: str
    check: Callable[[EventLog], list[CheckResult]]


CHECKS: list[Check] = []


def register_check(name: str):
    """Decorator to register a check function.

    Usage:
        @register_check("my_check")
        def check_something(log: EventLog) -> list[CheckResult]:
            ...
    """
    def decorator(fn: Callable[[EventLog], list[CheckResult]]):
        if any(c.name == name for c in CHECKS):
            raise ValueError(f"Duplicate check name: {name}")
        CHECKS.append(Check(name=name, check=fn))
        return fn
    return decorator


def run_checks(
    log: EventLog,
    *,
    names: Iterable[str] | None = None,
    fail_on: Severity | None = Severity.ERROR,
) -> list[CheckResult]:
    """Run registered checks against a finished traversal log.

    Args:
        log: A frozen EventLog (call RecordingVisitor.finish() first).
        names: Run only these checks, in registry order. None runs all.
        fail_on: Raise CheckFailedError if any result meets or exceeds
            this severity. Set to None to collect without raising.

    Returns:
        All results from the selected checks (errors and info).

    Raises:
        RuntimeError: If the log is still open.
        KeyError: If a requested check name is not registered.
        CheckFailedError: If any result's severity >= fail_on.
    """
    if not log.frozen:
        raise RuntimeError("EventLog is still open: finish the pass before checking it")

    selected = CHECKS
    if names is not None:
        wanted = set(names)
        unknown = wanted - {c.name for c in CHECKS}
        if unknown:
            raise KeyError(f"Unknown check(s): {sorted(unknown)}")
        selected = [c for c in CHECKS if c.name in wanted]

    results: list[CheckResult] = []
    for c in selected:
        found = c.check(log)
        logger.debug("check %s: %d result(s)", c.name, len(found))
        results.extend(found)

    if fail_on is not None:
        fatal = [r for r in results if r.severity.value <= fail_on.value]
        if fatal:
            logger.info("%d of %d check result(s) at or above %s",
                        len(fatal), len(results), fail_on.name)
            raise CheckFailedError(results, fail_on)

    return results
