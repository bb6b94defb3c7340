"""Parallel structure checks.

A parallel region is named by the id of its parallel start node. Two
invariants hold for a correct pass:

    parallel_balance:  parallel start/end events nest like brackets
    branch_symmetry:   every region reports as many branch ends as
                       branch starts

The engine walks backward from the flow heads, so a region's end is
logged before its start. Balance matching honours the log's direction.
"""

from collections import defaultdict

from ..events import Direction, EventKind, EventLog, NodeRef
from .core import CheckResult, Severity, Violation, format_ids, register_check


# ---------------------------------------------------------------------------
# Region balance
# ---------------------------------------------------------------------------

# direction -> (event that opens a bracket, event that closes it)
_BRACKETS: dict[Direction, tuple[EventKind, EventKind]] = {
    Direction.BACKWARD: (EventKind.PARALLEL_END, EventKind.PARALLEL_START),
    Direction.FORWARD:  (EventKind.PARALLEL_START, EventKind.PARALLEL_END),
}


def _in_progress(name: str, region: NodeRef, seen: EventKind,
                 missing: EventKind) -> CheckResult:
    return CheckResult(name, Severity.INFO,
        f"Parallel {format_ids([region])} has a {seen.name} with no "
        f"{missing.name} (in progress at scan boundary)",
        node_ids=(region,))


@register_check("parallel_balance")
def validate_parallel_balance(log: EventLog) -> list[CheckResult]:
    """Verify parallel start/end events form a well-nested bracket structure.

    Opening events push their region id; closing events must match the
    top of the stack (LIFO, regions nest by construction).

    A region still running has a PARALLEL_START but no PARALLEL_END yet.
    That is legal and only noted. A PARALLEL_END whose start never shows
    up is a failure. Backward, the running region is a closing event on
    an empty stack and the failure is a leftover opener; forward, it is
    the other way round.
    """
    NAME = "parallel_balance"
    results = []
    opener, closer = _BRACKETS[log.direction]
    backward = log.direction == Direction.BACKWARD
    open_regions: list[NodeRef] = []

    for i, record in enumerate(log):
        if record.kind == opener:
            open_regions.append(record.region)
        elif record.kind == closer:
            if not open_regions:
                if backward:
                    results.append(_in_progress(NAME, record.region, closer, opener))
                    continue
                results.append(CheckResult(NAME, Severity.ERROR,
                    f"Parallel end with no matching start: {record} at index {i} "
                    f"closes parallel {format_ids([record.region])}, which was "
                    f"never started",
                    Violation.UNOPENED_REGION_END, (record.region,)))
                return results
            top = open_regions[-1]
            if top != record.region:
                results.append(CheckResult(NAME, Severity.ERROR,
                    f"Parallel start and end events must point to the same parallel "
                    f"start node ID: {record} at index {i} closes parallel "
                    f"{format_ids([record.region])} but parallel "
                    f"{format_ids([top])} is open",
                    Violation.REGION_MISMATCH, (top, record.region)))
                return results
            open_regions.pop()

    if open_regions and not backward:
        for region in reversed(open_regions):
            results.append(_in_progress(NAME, region, opener, closer))
    elif open_regions:
        remaining = tuple(reversed(open_regions))
        results.append(CheckResult(NAME, Severity.ERROR,
            f"{opener.name} events with no matching {closer.name}, for parallel(s) "
            f"with start node IDs: {format_ids(remaining)}",
            Violation.UNMATCHED_REGION_END, remaining))

    return results


# ---------------------------------------------------------------------------
# Branch symmetry
# ---------------------------------------------------------------------------

def _branches_by_region(log: EventLog, kind: EventKind) -> dict[NodeRef, list[NodeRef]]:
    """Map region id -> branch node ids for one branch event kind, in log order."""
    branches: dict[NodeRef, list[NodeRef]] = defaultdict(list)
    for record in log.of_kind(kind):
        branches[record.region].append(record.node)
    return dict(branches)


@register_check("branch_symmetry")
def validate_branch_symmetry(log: EventLog) -> list[CheckResult]:
    """Verify each region has matching branch start and branch end events.

    Every region with branch starts needs the same number of branch
    ends, and every region with branch ends needs branch starts.
    """
    NAME = "branch_symmetry"
    results = []
    starts = _branches_by_region(log, EventKind.PARALLEL_BRANCH_START)
    ends = _branches_by_region(log, EventKind.PARALLEL_BRANCH_END)

    for region, start_nodes in starts.items():
        end_nodes = ends.get(region)
        if end_nodes is None:
            results.append(CheckResult(NAME, Severity.ERROR,
                f"Parallel with branch start event(s) but no branch end event(s), "
                f"parallel start node id: {format_ids([region])} "
                f"(branch starts: {format_ids(start_nodes)})",
                Violation.BRANCH_KEY_MISMATCH, (region,)))
        elif len(start_nodes) != len(end_nodes):
            results.append(CheckResult(NAME, Severity.ERROR,
                f"Parallel must have matching numbers of branch start and end events, "
                f"but parallel {format_ids([region])} has {len(start_nodes)} "
                f"start(s) [{format_ids(start_nodes)}] and {len(end_nodes)} "
                f"end(s) [{format_ids(end_nodes)}]",
                Violation.BRANCH_COUNT_MISMATCH, (region,)))

    # Counts were compared above; this only catches end-only regions
    for region, end_nodes in ends.items():
        if region not in starts:
            results.append(CheckResult(NAME, Severity.ERROR,
                f"Parallel with branch end event(s) but no matching branch start "
                f"event(s), parallel start node id: {format_ids([region])} "
                f"(branch ends: {format_ids(end_nodes)})",
                Violation.BRANCH_KEY_MISMATCH, (region,)))

    return results
