"""Checks over the event log of a finished traversal pass.

Each check inspects an EventLog and returns structured diagnostics;
it never asserts or prints. The registry collects checks via decorator
and run_checks runs them, raising only if asked to:

    from scancheck.validation import run_checks
    results = run_checks(visitor.finish())

Checks are defined in submodules:
    uniqueness.py: no event reported twice
    structure.py:  parallel bracket balance, branch start/end symmetry
    sequence.py:   exact comparison against expected records (unregistered)

Result types and the registry itself are in core.py.
"""

from .core import (  # noqa: F401
    Severity,
    Violation,
    CheckResult,
    CheckFailedError,
    Check,
    CHECKS,
    register_check,
    run_checks,
)
from .sequence import check_sequence  # noqa: F401
from .structure import validate_branch_symmetry, validate_parallel_balance  # noqa: F401
from .uniqueness import check_duplicates, validate_no_duplicates  # noqa: F401
