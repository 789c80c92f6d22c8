"""The NFA form of an Aho-Corasick automaton: a trie with failure links."""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Iterator

from multimatch.matches import Match, MatchKind

FAIL_ID = 0
"""Sentinel state: a transition to it means "follow the failure link"."""

DEAD_ID = 1
"""Sink state used by leftmost semantics to stop a search."""

START_ID = 2
"""The conventional start (root) state."""

_ID_SIZE = 8
_SPARSE_ENTRY_SIZE = 16
_MATCH_ENTRY_SIZE = 16


def _check_byte(byte):
    if not 0 <= byte <= 255:
        raise ValueError(f"byte out of range: {byte}")


class Transitions:
    """Outgoing transitions of one state, stored densely or sparsely.

    A dense table holds one entry per byte value. A sparse table holds only
    the bytes that were set, sorted by byte; a missing byte means FAIL_ID.
    """

    def __init__(self, dense):
        self.dense = dense
        self._table = [FAIL_ID] * 256 if dense else None
        self._sparse: list[tuple[int, int]] = []

    def __repr__(self):
        kind = "dense" if self.dense else "sparse"
        return f"Transitions({kind}, {list(self.items())!r})"

    def next_state(self, byte):
        """The target for ``byte``, or FAIL_ID if none is set."""
        _check_byte(byte)
        if self.dense:
            return self._table[byte]
        i = bisect_left(self._sparse, byte, key=lambda pair: pair[0])
        if i < len(self._sparse) and self._sparse[i][0] == byte:
            return self._sparse[i][1]
        return FAIL_ID

    def set_next_state(self, byte, next_id):
        """Point the ``byte`` transition at ``next_id``."""
        _check_byte(byte)
        if self.dense:
            self._table[byte] = next_id
            return
        i = bisect_left(self._sparse, byte, key=lambda pair: pair[0])
        if i < len(self._sparse) and self._sparse[i][0] == byte:
            self._sparse[i] = (byte, next_id)
        else:
            self._sparse.insert(i, (byte, next_id))

    def items(self) -> Iterator[tuple[int, int]]:
        """Yield ``(byte, target)`` pairs, skipping transitions to FAIL_ID."""
        if self.dense:
            for byte, target in enumerate(list(self._table)):
                if target != FAIL_ID:
                    yield byte, target
        else:
            yield from list(self._sparse)

    def all_items(self) -> Iterator[tuple[int, int]]:
        """Yield a ``(byte, target)`` pair for all 256 bytes, FAIL_ID included."""
        if self.dense:
            yield from enumerate(list(self._table))
            return
        byte = 0
        for b, target in list(self._sparse):
            while byte < b:
                yield byte, FAIL_ID
                byte += 1
            yield b, target
            byte += 1
        while byte < 256:
            yield byte, FAIL_ID
            byte += 1

    def heap_bytes(self):
        """Approximate memory held by the transition table."""
        if self.dense:
            return len(self._table) * _ID_SIZE
        return len(self._sparse) * _SPARSE_ENTRY_SIZE


@dataclass
class State:
    """One NFA state: transitions, failure link, depth and matches."""

    trans: Transitions
    fail: int
    depth: int
    matches: list[tuple[int, int]] = field(default_factory=list)

    def is_match(self):
        """True when visiting this state reports at least one match."""
        return bool(self.matches)

    def add_match(self, pattern, length):
        """Record that ``pattern`` of ``length`` bytes ends here."""
        self.matches.append((pattern, length))

    def longest_match_len(self):
        """Length of the longest match here, or None.

        The first match is the one added during trie construction; the rest
        come through failure links and are proper suffixes, so shorter.
        """
        return self.matches[0][1] if self.matches else None

    def heap_bytes(self):
        """Approximate memory held by this state."""
        return self.trans.heap_bytes() + len(self.matches) * _MATCH_ENTRY_SIZE


def _escape(byte):
    special = {0x09: "\\t", 0x0A: "\\n", 0x0D: "\\r", 0x27: "\\'", 0x22: '\\"', 0x5C: "\\\\"}
    if byte in special:
        return special[byte]
    if 0x20 <= byte <= 0x7E:
        return chr(byte)
    return f"\\x{byte:02x}"


@dataclass
class NFA:
    """An Aho-Corasick automaton as a trie plus failure transitions.

    State 0 is the fail sentinel, state 1 the dead state and state 2 the
    usual start state.
    """

    match_kind: MatchKind = MatchKind.STANDARD
    anchored: bool = False
    start_id: int = START_ID
    max_pattern_len: int = 0
    pattern_count: int = 0
    states: list[State] = field(default_factory=list)

    def state_len(self):
        """The number of states."""
        return len(self.states)

    def matches(self, state_id):
        """The ``(pattern, length)`` matches of a state."""
        return tuple(self.states[state_id].matches)

    def failure_transition(self, state_id):
        """The failure link of a state."""
        return self.states[state_id].fail

    def transition(self, state_id, byte):
        """The raw transition on ``byte``; may be FAIL_ID."""
        return self.states[state_id].trans.next_state(byte)

    def all_transitions(self, state_id):
        """Every ``(byte, target)`` pair of a state, FAIL_ID included."""
        return self.states[state_id].trans.all_items()

    def next_state(self, state_id, byte):
        """The next state on ``byte``, following failure links as needed."""
        current = state_id
        while True:
            state = self.states[current]
            target = state.trans.next_state(byte)
            if target != FAIL_ID:
                return target
            current = state.fail

    def is_valid(self, state_id):
        """True when ``state_id`` names a state of this automaton."""
        return 0 <= state_id < len(self.states)

    def is_match_state(self, state_id):
        """True when the state reports a match."""
        return self.states[state_id].is_match()

    def get_match(self, state_id, match_index, end):
        """The ``match_index``-th match of a state ending at ``end``, or None."""
        if not self.is_valid(state_id):
            return None
        matches = self.states[state_id].matches
        if not 0 <= match_index < len(matches):
            return None
        pattern, length = matches[match_index]
        return Match(pattern, length, end)

    def match_count(self, state_id):
        """The number of matches a state reports."""
        return len(self.states[state_id].matches)

    def heap_bytes(self):
        """Approximate memory held by all states."""
        return sum(state.heap_bytes() for state in self.states)

    def __str__(self):
        rule = "-" * 79
        lines = ["NFA(", f"match_kind: {self.match_kind.name}", rule]
        for sid, state in enumerate(self.states):
            trans = []
            if sid != DEAD_ID:
                for byte, target in state.trans.items():
                    if sid == self.start_id and target == self.start_id:
                        continue
                    trans.append(f"{_escape(byte)} => {target}")
            lines.append(f"{sid:04}: {', '.join(trans)}")
            patterns = ", ".join(str(pattern) for pattern, _ in state.matches)
            lines.append(f"  matches: {patterns}")
            lines.append(f"     fail: {state.fail}")
            lines.append(f"    depth: {state.depth}")
        lines.extend([rule, ")"])
        return "\n".join(lines) + "\n"