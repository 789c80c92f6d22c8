"""Wiring failure transitions into an NFA trie.

Both routines run a breadth first search from the start state. The standard
one follows the textbook construction. The leftmost one drops failure
transitions that would lose a match already seen, sending those states to
the dead state instead, so searches stop at the right place.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from multimatch.nfa import DEAD_ID, FAIL_ID, NFA


class _QueuedSet:
    """States already queued; inert (never remembers) unless tracking is on.

    Tracking is only needed with ASCII case insensitivity, the one way to
    reach a state through two different transitions of the same parent.
    """

    def __init__(self, active):
        self._seen: set[int] | None = set() if active else None

    def __contains__(self, state_id):
        return self._seen is not None and state_id in self._seen

    def add(self, state_id):
        if self._seen is not None:
            self._seen.add(state_id)


def _copy_matches(nfa: NFA, src, dst):
    nfa.states[dst].matches.extend(list(nfa.states[src].matches))


def _suffix_state(nfa: NFA, parent, byte):
    """Follow failure links from ``parent`` until a transition on ``byte`` exists."""
    fail = nfa.states[parent].fail
    while nfa.states[fail].trans.next_state(byte) == FAIL_ID:
        fail = nfa.states[fail].fail
    return nfa.states[fail].trans.next_state(byte)


def fill_failure_transitions_standard(nfa: NFA, track_seen):
    """Set every state's failure link by the standard construction.

    The start state must already loop back to itself on every byte it has no
    trie transition for. Matches reachable through failure links are copied
    into each state, and matches of the start state (the empty pattern) are
    copied into every state visited.
    """
    start_id = nfa.start_id
    queue: deque[int] = deque()
    seen = _QueuedSet(track_seen)
    for _, target in nfa.states[start_id].trans.all_items():
        if target != start_id and target not in seen:
            queue.append(target)
            seen.add(target)

    while queue:
        state_id = queue.popleft()
        for byte, target in nfa.states[state_id].trans.items():
            if target in seen:
                # Only reachable twice under case insensitivity; revisiting
                # would duplicate matches.
                continue
            queue.append(target)
            seen.add(target)

            fail = _suffix_state(nfa, state_id, byte)
            nfa.states[target].fail = fail
            _copy_matches(nfa, fail, target)
        # An empty pattern matches at every position, so every state
        # reports the start state's matches as well.
        _copy_matches(nfa, start_id, state_id)


@dataclass(frozen=True)
class _Queued:
    """A state to visit and the depth at which its earliest match began."""

    state_id: int
    match_at_depth: int | None

    @classmethod
    def start(cls, nfa: NFA):
        depth = 0 if nfa.states[nfa.start_id].is_match() else None
        return cls(nfa.start_id, depth)

    def child(self, nfa: NFA, state_id):
        return _Queued(state_id, self._child_match_depth(nfa, state_id))

    def _child_match_depth(self, nfa: NFA, state_id):
        if self.match_at_depth is not None:
            return self.match_at_depth
        state = nfa.states[state_id]
        if not state.is_match():
            return None
        return state.depth - state.longest_match_len() + 1


def fill_failure_transitions_leftmost(nfa: NFA, track_seen):
    """Set failure links so that leftmost match semantics are preserved.

    After a match has been seen on the path to a state, that state only gets
    a failure link that keeps the match; otherwise it fails to the dead
    state. Match states without outgoing transitions also fail to the dead
    state.
    """
    queue: deque[_Queued] = deque()
    seen = _QueuedSet(track_seen)
    start = _Queued.start(nfa)
    for _, target in nfa.states[start.state_id].trans.all_items():
        if target == start.state_id:
            continue
        queued = start.child(nfa, target)
        if queued.state_id not in seen:
            queue.append(queued)
            seen.add(queued.state_id)
        # A failure link here could only lead back to the start state,
        # which must never happen after a match under leftmost semantics.
        if nfa.states[target].is_match():
            nfa.states[target].fail = DEAD_ID

    while queue:
        item = queue.popleft()
        any_trans = False
        for byte, target in nfa.states[item.state_id].trans.items():
            any_trans = True
            queued = item.child(nfa, target)
            if queued.state_id in seen:
                continue
            queue.append(queued)
            seen.add(queued.state_id)

            fail = _suffix_state(nfa, item.state_id, byte)

            if queued.match_at_depth is not None:
                fail_depth = nfa.states[fail].depth
                next_depth = nfa.states[target].depth
                if next_depth - queued.match_at_depth + 1 > fail_depth:
                    nfa.states[target].fail = DEAD_ID
                    continue
                if nfa.states[target].fail == start.state_id:
                    raise AssertionError(
                        "states that are match states or follow match states "
                        "should never have a failure transition back to the "
                        "start state in leftmost searching"
                    )
            nfa.states[target].fail = fail
            _copy_matches(nfa, fail, target)

        if not any_trans and nfa.states[item.state_id].is_match():
            nfa.states[item.state_id].fail = DEAD_ID