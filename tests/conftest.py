"""Shared fixtures and helpers for the test suite.

pytest discovers conftest.py automatically; fixtures defined here are
available to all test files in this directory without explicit imports.
Helpers (FlowNode, ScriptedScanner, flow scripts) are imported directly.

The traversal engine is external, so tests stand in for it with a
ScriptedScanner: it replays a fixed list of callbacks onto a visitor,
exactly as a backward scan of a known flow graph would issue them.
"""

from dataclasses import dataclass

import pytest

from scancheck import CALLBACKS, EventKind, RecordingVisitor

K = EventKind


# ---------------------------------------------------------------------------
# Engine stand-ins
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FlowNode:
    """Minimal flow node: the engine assigns decimal string ids."""
    id: str


def n(node_id: int | None) -> FlowNode | None:
    return None if node_id is None else FlowNode(str(node_id))


class ScriptedScanner:
    """Replays a script of (EventKind, node ids...) onto a visitor.

    Passes itself as the trailing scanner argument, like a real engine.
    """

    def __init__(self, script: list[tuple]) -> None:
        self.script = script

    def visit(self, visitor) -> None:
        for kind, *ids in self.script:
            callback = getattr(visitor, CALLBACKS[kind])
            callback(*(n(i) for i in ids), self)


def scan(script: list[tuple]) -> RecordingVisitor:
    """Drive a fresh visitor through a script and return it (not finished)."""
    visitor = RecordingVisitor()
    ScriptedScanner(script).visit(visitor)
    return visitor


# ---------------------------------------------------------------------------
# Flows
# ---------------------------------------------------------------------------

# Backward scan of a finished flow with one two-branch parallel:
#
#   2 start -> 3 echo -> 4 parallel -+-> 6 branch A -> 8 echo -> 10 A end -+-> 12 join -> 13 echo
#                                    +-> 7 branch B -> 9 echo -> 11 B end -+
SIMPLE_PARALLEL = [
    (K.ATOM_NODE, 12, 13, None),
    (K.PARALLEL_END, 4, 12),
    (K.PARALLEL_BRANCH_END, 4, 11),
    (K.ATOM_NODE, 7, 9, 11),
    (K.PARALLEL_BRANCH_START, 4, 7),
    (K.PARALLEL_BRANCH_END, 4, 10),
    (K.ATOM_NODE, 6, 8, 10),
    (K.PARALLEL_BRANCH_START, 4, 6),
    (K.PARALLEL_START, 4, 6),
    (K.ATOM_NODE, 2, 3, 4),
]

# Parallel 20 nested inside branch A of parallel 4
NESTED_PARALLEL = [
    (K.ATOM_NODE, 12, 13, None),
    (K.PARALLEL_END, 4, 12),
    (K.PARALLEL_BRANCH_END, 4, 10),
    (K.PARALLEL_END, 20, 25),
    (K.PARALLEL_BRANCH_END, 20, 24),
    (K.PARALLEL_BRANCH_START, 20, 22),
    (K.PARALLEL_BRANCH_END, 20, 23),
    (K.PARALLEL_BRANCH_START, 20, 21),
    (K.PARALLEL_START, 20, 21),
    (K.PARALLEL_BRANCH_START, 4, 6),
    (K.PARALLEL_BRANCH_END, 4, 11),
    (K.ATOM_NODE, 7, 9, 11),
    (K.PARALLEL_BRANCH_START, 4, 7),
    (K.PARALLEL_START, 4, 6),
    (K.ATOM_NODE, 2, 3, 4),
]

# Flow still running inside parallel 4: heads are 8 and 9, no join yet
IN_PROGRESS_PARALLEL = [
    (K.PARALLEL_BRANCH_END, 4, 8),
    (K.ATOM_NODE, 6, 8, None),
    (K.PARALLEL_BRANCH_START, 4, 6),
    (K.PARALLEL_BRANCH_END, 4, 9),
    (K.ATOM_NODE, 7, 9, None),
    (K.PARALLEL_BRANCH_START, 4, 7),
    (K.PARALLEL_START, 4, 6),
    (K.ATOM_NODE, 2, 3, 4),
]

# Block-scoped steps only: a stage chunk wrapping one echo
CHUNKED = [
    (K.CHUNK_END, 6, None),
    (K.ATOM_NODE, 4, 5, 6),
    (K.CHUNK_START, 3, 2),
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def visitor():
    return RecordingVisitor()


@pytest.fixture
def scanner():
    return ScriptedScanner([])
