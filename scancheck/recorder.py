"""Recording visitor: turns traversal callbacks into an EventLog.

The engine drives a visitor through seven callbacks, one per EventKind.
This visitor only translates: every call appends exactly one record and
nothing is checked until the pass is over. The trailing ``scanner``
argument on each callback is the engine instance; it is accepted to
satisfy the callback contract and otherwise ignored.

    visitor = RecordingVisitor()
    scanner.visit_simple_chunks(heads, visitor)
    log = visitor.finish()
    run_checks(log)
"""

from typing import Any

from .events import (
    Direction, EventKind, EventLog, EventRecord, NodeRef, SLOT_COUNT,
    parse_node_ref,
)


# EventKind -> visitor method that reports it
CALLBACKS: dict[EventKind, str] = {
    EventKind.ATOM_NODE:             "atom_node",
    EventKind.CHUNK_START:           "chunk_start",
    EventKind.CHUNK_END:             "chunk_end",
    EventKind.PARALLEL_START:        "parallel_start",
    EventKind.PARALLEL_END:          "parallel_end",
    EventKind.PARALLEL_BRANCH_START: "parallel_branch_start",
    EventKind.PARALLEL_BRANCH_END:   "parallel_branch_end",
}


class RecordingVisitor:
    """Records every callback of one traversal pass, in call order.

    One instance per pass. Not safe to share between concurrent passes.
    """

    def __init__(self, direction: Direction = Direction.BACKWARD) -> None:
        self.log = EventLog(direction=direction)

    @property
    def calls(self) -> list[EventRecord]:
        """Recorded events so far, in call order."""
        return list(self.log)

    def finish(self) -> EventLog:
        """End the pass: freeze and return the log for checking."""
        return self.log.freeze()

    def _record(self, kind: EventKind, *nodes: Any) -> None:
        # Parse everything before appending so a bad id leaves no partial record
        refs: list[NodeRef] = [parse_node_ref(n) for n in nodes]
        refs += [None] * (SLOT_COUNT - len(refs))
        self.log.append(EventRecord(kind, tuple(refs)))

    # --- Callback contract ---

    def chunk_start(self, start_node: Any, before_block: Any, scanner: Any) -> None:
        self._record(EventKind.CHUNK_START, start_node, before_block)

    def chunk_end(self, end_node: Any, after_chunk: Any, scanner: Any) -> None:
        self._record(EventKind.CHUNK_END, end_node, after_chunk)

    def parallel_start(self, parallel_start_node: Any, branch_node: Any,
                       scanner: Any) -> None:
        self._record(EventKind.PARALLEL_START, parallel_start_node, branch_node)

    def parallel_end(self, parallel_start_node: Any, parallel_end_node: Any,
                     scanner: Any) -> None:
        self._record(EventKind.PARALLEL_END, parallel_start_node, parallel_end_node)

    def parallel_branch_start(self, parallel_start_node: Any, branch_start_node: Any,
                              scanner: Any) -> None:
        self._record(EventKind.PARALLEL_BRANCH_START,
                     parallel_start_node, branch_start_node)

    def parallel_branch_end(self, parallel_start_node: Any, branch_end_node: Any,
                            scanner: Any) -> None:
        self._record(EventKind.PARALLEL_BRANCH_END,
                     parallel_start_node, branch_end_node)

    def atom_node(self, before: Any, atom_node: Any, after: Any, scanner: Any) -> None:
        self._record(EventKind.ATOM_NODE, before, atom_node, after)
