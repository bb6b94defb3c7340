"""Structural checks for the callback stream of a flow graph traversal.

A RecordingVisitor is handed to the traversal engine in place of a real
visitor. After the pass, its frozen EventLog is run through the checks.
"""

from .events import (  # noqa: F401
    Direction,
    EventKind,
    EventLog,
    EventRecord,
    MalformedNodeIdError,
    NodeRef,
    parse_node_ref,
)
from .recorder import CALLBACKS, RecordingVisitor  # noqa: F401
from .validation import (  # noqa: F401
    CheckFailedError,
    CheckResult,
    Severity,
    Violation,
    check_duplicates,
    check_sequence,
    run_checks,
)
