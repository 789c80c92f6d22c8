"""The DFA form of an Aho-Corasick automaton.

Every failure transition of the NFA is followed ahead of time, so each state
has exactly one target per input byte. Match states are moved to the front
of the table, right after the fail and dead states. A state is then a match
or dead state exactly when its ID is at most ``max_match``. IDs may also be
premultiplied by the alphabet length, so that a transition is looked up by
adding the byte to the state ID.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

from multimatch.errors import PremultiplyOverflowError
from multimatch.matches import Match, MatchKind
from multimatch.nfa import DEAD_ID, FAIL_ID, NFA

ALPHABET_LEN = 256

_ID_SIZE = 8
_MATCH_LIST_SIZE = 24
_MATCH_ENTRY_SIZE = 16


@dataclass
class DFA:
    """A fully determinized Aho-Corasick automaton over the 256 byte values."""

    match_kind: MatchKind
    anchored: bool
    start_id: int
    max_pattern_len: int
    pattern_count: int
    state_count: int
    max_match: int = FAIL_ID
    premultiplied: bool = False
    heap_bytes: int = 0
    alphabet_len: int = ALPHABET_LEN
    trans: list[int] = field(default_factory=list, repr=False)
    matches: list[list[tuple[int, int]]] = field(default_factory=list, repr=False)

    def _index(self, state_id):
        """The row index of a state, undoing premultiplication."""
        return state_id // self.alphabet_len if self.premultiplied else state_id

    def is_valid(self, state_id):
        """True when ``state_id`` names a state of this automaton."""
        return state_id >= 0 and self._index(state_id) < self.state_count

    def is_match_state(self, state_id):
        """True only for match states."""
        return DEAD_ID < state_id <= self.max_match

    def is_match_or_dead_state(self, state_id):
        """True for match states and for the dead (or fail) state."""
        return state_id <= self.max_match

    def get_match(self, state_id, match_index, end):
        """The ``match_index``-th match of a state ending at ``end``, or None."""
        if state_id > self.max_match:
            return None
        index = self._index(state_id)
        if not 0 <= index < len(self.matches):
            return None
        state_matches = self.matches[index]
        if not 0 <= match_index < len(state_matches):
            return None
        pattern, length = state_matches[match_index]
        return Match(pattern, length, end)

    def match_count(self, state_id):
        """The number of matches a state reports."""
        return len(self.matches[self._index(state_id)])

    def next_state(self, state_id, byte):
        """The state reached from ``state_id`` on ``byte``."""
        if not 0 <= byte <= 255:
            raise ValueError(f"byte out of range: {byte}")
        if self.premultiplied:
            return self.trans[state_id + byte]
        return self.trans[state_id * self.alphabet_len + byte]

    def _raw_next(self, state_id, byte):
        return self.trans[state_id * self.alphabet_len + byte]

    def _set_raw_next(self, state_id, byte, target):
        self.trans[state_id * self.alphabet_len + byte] = target


class DFABuilder:
    """Configuration for turning an NFA into a DFA.

    ``max_state_id`` bounds the largest state ID, which matters when
    ``premultiply`` is on, since it multiplies IDs by the alphabet length.
    """

    def __init__(self, premultiply=True, max_state_id=sys.maxsize):
        self.premultiply = premultiply
        self.max_state_id = max_state_id

    def __repr__(self):
        return (
            f"DFABuilder(premultiply={self.premultiply}, "
            f"max_state_id={self.max_state_id})"
        )

    def build(self, nfa: NFA) -> DFA:
        """Determinize ``nfa``.

        Raises PremultiplyOverflowError when premultiplied IDs would exceed
        ``max_state_id``.
        """
        count = nfa.state_len()
        dfa = DFA(
            match_kind=nfa.match_kind,
            anchored=nfa.anchored,
            start_id=nfa.start_id,
            max_pattern_len=nfa.max_pattern_len,
            pattern_count=nfa.pattern_count,
            state_count=count,
            trans=[FAIL_ID] * (ALPHABET_LEN * count),
            matches=[[] for _ in range(count)],
        )
        for state_id in range(count):
            dfa.matches[state_id].extend(nfa.matches(state_id))
            fail = nfa.failure_transition(state_id)
            for byte, target in list(nfa.all_transitions(state_id)):
                if target == FAIL_ID:
                    target = _next_state_memoized(nfa, dfa, state_id, fail, byte)
                dfa._set_raw_next(state_id, byte, target)
        _shuffle_match_states(dfa)
        _calculate_size(dfa)
        if self.premultiply:
            _premultiply(dfa, self.max_state_id)
        return dfa


def _next_state_memoized(nfa: NFA, dfa: DFA, populating, current, byte):
    """Resolve a failure transition, reusing rows of the DFA already filled."""
    while True:
        if current < populating:
            return dfa._raw_next(current, byte)
        target = nfa.transition(current, byte)
        if target != FAIL_ID:
            return target
        current = nfa.failure_transition(current)


def _swap_states(dfa: DFA, id1, id2):
    alpha = dfa.alphabet_len
    o1, o2 = id1 * alpha, id2 * alpha
    dfa.trans[o1:o1 + alpha], dfa.trans[o2:o2 + alpha] = (
        dfa.trans[o2:o2 + alpha],
        dfa.trans[o1:o1 + alpha],
    )
    dfa.matches[id1], dfa.matches[id2] = dfa.matches[id2], dfa.matches[id1]


def _shuffle_match_states(dfa: DFA):
    """Move every match state in front of every other state after the start."""
    if dfa.premultiplied:
        raise ValueError("cannot shuffle match states of premultiplied DFA")
    count = dfa.state_count
    if count <= 1:
        return

    first_non_match = dfa.start_id
    while first_non_match < count and dfa.matches[first_non_match]:
        first_non_match += 1

    swaps = [FAIL_ID] * count
    cur = count - 1
    while cur > first_non_match:
        if dfa.matches[cur]:
            _swap_states(dfa, cur, first_non_match)
            swaps[cur] = first_non_match
            swaps[first_non_match] = cur
            first_non_match += 1
            while first_non_match < cur and dfa.matches[first_non_match]:
                first_non_match += 1
        cur -= 1

    dfa.trans = [
        swaps[target] if swaps[target] != FAIL_ID else target
        for target in dfa.trans
    ]
    if swaps[dfa.start_id] != FAIL_ID:
        dfa.start_id = swaps[dfa.start_id]
    dfa.max_match = first_non_match - 1


def _premultiply(dfa: DFA, max_state_id):
    """Multiply every state ID (except the dead state) by the alphabet length."""
    if dfa.premultiplied or dfa.state_count <= 1:
        return
    alpha = dfa.alphabet_len
    requested = (dfa.state_count - 1) * alpha
    if requested > sys.maxsize:
        raise PremultiplyOverflowError(sys.maxsize, sys.maxsize)
    if requested > max_state_id:
        raise PremultiplyOverflowError(max_state_id, requested)

    start = 2 * alpha
    dfa.trans[start:] = [
        target if target == DEAD_ID else target * alpha
        for target in dfa.trans[start:]
    ]
    dfa.premultiplied = True
    dfa.start_id *= alpha
    dfa.max_match *= alpha


def _calculate_size(dfa: DFA):
    size = len(dfa.trans) * _ID_SIZE + len(dfa.matches) * _MATCH_LIST_SIZE
    size += sum(len(state_matches) for state_matches in dfa.matches) * _MATCH_ENTRY_SIZE
    dfa.heap_bytes = size