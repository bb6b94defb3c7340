"""Event records for one traversal pass.

A traversal engine walks a pipeline's flow graph and reports structural
events through seven callbacks. Each callback becomes one EventRecord:
the event kind plus up to four node ids. Records are appended, in call
order, to an EventLog owned by the recording visitor for that pass.

Node ids are opaque decimal strings assigned by the graph. Here they are
parsed to non-negative ints; a missing node is None, never a magic value.
"""

import json
import logging
import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Any, Iterable, Iterator

logger = logging.getLogger(__name__)

NodeRef = int | None

SLOT_COUNT = 4

_NODE_ID = re.compile(r"[0-9]+")


class MalformedNodeIdError(ValueError):
    """A node id could not be parsed as a non-negative decimal integer.

    The engine guarantees numeric ids, so this aborts the whole pass.
    """

    def __init__(self, raw_id: Any) -> None:
        self.raw_id = raw_id
        super().__init__(f"Malformed node id: {raw_id!r} (expected decimal digits)")


def parse_node_ref(node: Any) -> NodeRef:
    """Convert a flow node (anything with an ``id``) to a NodeRef.

    None maps to None. The id may be a decimal string or a plain int.
    """
    if node is None:
        return None
    raw = node.id
    if isinstance(raw, bool):
        raise MalformedNodeIdError(raw)
    if isinstance(raw, int):
        if raw < 0:
            raise MalformedNodeIdError(raw)
        return raw
    if isinstance(raw, str) and _NODE_ID.fullmatch(raw):
        return int(raw)
    raise MalformedNodeIdError(raw)


def check_node_ref(ref: Any) -> NodeRef:
    """Accept an already-parsed NodeRef: None or a non-negative int."""
    if ref is None:
        return None
    if isinstance(ref, bool) or not isinstance(ref, int) or ref < 0:
        raise MalformedNodeIdError(ref)
    return ref


def format_node_ref(ref: NodeRef) -> str:
    return "-" if ref is None else str(ref)


class Direction(Enum):
    """Order in which the engine walks the graph relative to execution time.

    BACKWARD: the scanner starts at the heads of the flow and walks toward
              its start, so a parallel's end is reported before its start.
    FORWARD:  execution order; starts are reported before ends.
    """
    BACKWARD = auto()
    FORWARD  = auto()


class EventKind(Enum):
    """The seven structural events a traversal reports."""
    ATOM_NODE             = auto()
    CHUNK_START           = auto()
    CHUNK_END             = auto()
    PARALLEL_START        = auto()
    PARALLEL_END          = auto()
    PARALLEL_BRANCH_START = auto()
    PARALLEL_BRANCH_END   = auto()

    @property
    def labels(self) -> tuple[str, ...]:
        """Names of the meaningful slots, in slot order."""
        return _SLOT_LABELS[self]

    @property
    def arity(self) -> int:
        return len(_SLOT_LABELS[self])


_SLOT_LABELS: dict[EventKind, tuple[str, ...]] = {
    EventKind.ATOM_NODE:             ("Before", "Current", "After"),
    EventKind.CHUNK_START:           ("StartNode", "BeforeNode"),
    EventKind.CHUNK_END:             ("EndNode", "AfterNode"),
    EventKind.PARALLEL_START:        ("ParallelStartNode", "OneBranchStartNode"),
    EventKind.PARALLEL_END:          ("ParallelStartNode", "ParallelEndNode"),
    EventKind.PARALLEL_BRANCH_START: ("ParallelStart", "BranchStart"),
    EventKind.PARALLEL_BRANCH_END:   ("ParallelStart", "BranchEnd"),
}

# Kinds whose slot 0 is the owning parallel region (its start node id)
PARALLEL_KINDS: frozenset[EventKind] = frozenset({
    EventKind.PARALLEL_START, EventKind.PARALLEL_END,
    EventKind.PARALLEL_BRANCH_START, EventKind.PARALLEL_BRANCH_END,
})


@dataclass(frozen=True)
class EventRecord:
    """One callback invocation: its kind and four node slots.

    Slot meaning depends on the kind (see EventKind.labels); unused
    slots are None. Equality and hashing cover kind and all slots.
    """
    kind: EventKind
    slots: tuple[NodeRef, NodeRef, NodeRef, NodeRef] = (None, None, None, None)

    def __post_init__(self) -> None:
        if len(self.slots) != SLOT_COUNT:
            raise ValueError(
                f"EventRecord needs {SLOT_COUNT} slots, got {len(self.slots)}")

    @classmethod
    def of(cls, kind: EventKind, *ids: NodeRef) -> "EventRecord":
        """Build a record from raw ids; missing trailing slots are absent.

        EventRecord.of(EventKind.PARALLEL_END, 5, 9)
        """
        if len(ids) > SLOT_COUNT:
            raise ValueError(f"At most {SLOT_COUNT} node ids, got {len(ids)}")
        padded = tuple(ids) + (None,) * (SLOT_COUNT - len(ids))
        return cls(kind, padded)

    @property
    def region(self) -> NodeRef:
        """Owning parallel region id (the parallel start node)."""
        if self.kind not in PARALLEL_KINDS:
            raise AttributeError(f"{self.kind.name} records have no parallel region")
        return self.slots[0]

    @property
    def node(self) -> NodeRef:
        """Second slot: branch/end node for parallel kinds, current node for atoms."""
        return self.slots[1]

    def same_nodes(self, other: "EventRecord") -> bool:
        """Compare node slots only, ignoring the kind."""
        return self.slots == other.slots

    def __str__(self) -> str:
        used = self.slots[:self.kind.arity]
        labels = "/".join(self.kind.labels)
        ids = "/".join(format_node_ref(ref) for ref in used)
        return f"{self.kind.name}-{labels}:{ids}"


class EventLog:
    """Ordered, append-only record of one traversal pass.

    Written by exactly one visitor while the pass runs, then frozen and
    handed to the checks read-only. Insertion order is call order.
    """

    def __init__(self, records: Iterable[EventRecord] = (),
                 direction: Direction = Direction.BACKWARD) -> None:
        self.direction = direction
        self._records: list[EventRecord] = list(records)
        self._frozen = False

    # --- Writer side ---

    def append(self, record: EventRecord) -> None:
        if self._frozen:
            raise RuntimeError("EventLog is frozen: the pass has already finished")
        self._records.append(record)
        logger.debug("recorded #%d %s", len(self._records) - 1, record)

    def freeze(self) -> "EventLog":
        """Mark the pass complete. Further appends raise RuntimeError."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # --- Read side ---

    @property
    def records(self) -> tuple[EventRecord, ...]:
        return tuple(self._records)

    def of_kind(self, *kinds: EventKind) -> list[EventRecord]:
        """Records of the given kinds, in log order."""
        wanted = set(kinds)
        return [r for r in self._records if r.kind in wanted]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[EventRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> EventRecord:
        return self._records[index]

    # --- Summary ---

    def summary(self) -> str:
        """Human-readable event counts."""
        counts = Counter(r.kind.name for r in self._records)
        state = "frozen" if self._frozen else "open"
        header = (f"EventLog: {len(self._records)} events "
                  f"({self.direction.name.lower()}, {state})")
        if not counts:
            return header
        kinds_str = ", ".join(f"{name}: {cnt}" for name, cnt in counts.most_common())
        return f"{header}\n  Kinds:   {kinds_str}"

    def dump(self) -> str:
        """Full event-by-event listing in log order."""
        lines = [self.summary(), ""]
        for i, record in enumerate(self._records):
            lines.append(f"  [{i:>3}] {record}")
        return "\n".join(lines)

    # --- Serialization ---

    def to_dict(self) -> dict:
        """Serialize to a plain dict. Absent slots become null."""
        return {
            "direction": self.direction.name,
            "frozen": self._frozen,
            "events": [
                {"kind": r.kind.name, "slots": list(r.slots)}
                for r in self._records
            ],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "EventLog":
        """Rebuild a log from to_dict() output.

        Slots must already be NodeRefs (null or non-negative int); anything
        else raises MalformedNodeIdError.
        """
        records = [
            EventRecord(EventKind[e["kind"]],
                        tuple(check_node_ref(ref) for ref in e["slots"]))
            for e in d["events"]
        ]
        log = cls(records, direction=Direction[d.get("direction", "BACKWARD")])
        if d.get("frozen", False):
            log.freeze()
        return log

    def save(self, path: str | Path) -> None:
        """Write the log to {path}.json for later inspection."""
        path = Path(path)
        with open(path.with_suffix(".json"), "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str | Path) -> "EventLog":
        path = Path(path)
        with open(path.with_suffix(".json")) as f:
            return cls.from_dict(json.load(f))
