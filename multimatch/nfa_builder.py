"""Compiling a set of patterns into an Aho-Corasick NFA."""

from __future__ import annotations

import sys
from typing import Iterable

from multimatch.errors import StateIDOverflowError
from multimatch.failure import (
    fill_failure_transitions_leftmost,
    fill_failure_transitions_standard,
)
from multimatch.matches import MatchKind
from multimatch.nfa import DEAD_ID, FAIL_ID, NFA, START_ID, State, Transitions


def opposite_ascii_case(byte):
    """The byte with its ASCII letter case flipped; other bytes are unchanged."""
    if ord("A") <= byte <= ord("Z"):
        return byte | 0x20
    if ord("a") <= byte <= ord("z"):
        return byte & ~0x20
    return byte


def _as_bytes(pattern) -> bytes:
    if isinstance(pattern, str):
        return pattern.encode("utf-8")
    return bytes(pattern)


class NFABuilder:
    """Configuration for compiling patterns into an NFA.

    States closer to the start than ``dense_depth`` get dense transition
    tables; deeper states get sparse ones. ``max_state_id`` bounds the
    state identifiers that may be handed out.
    """

    def __init__(
        self,
        match_kind=MatchKind.STANDARD,
        dense_depth=2,
        anchored=False,
        ascii_case_insensitive=False,
        max_state_id=sys.maxsize,
    ):
        if dense_depth < 0:
            raise ValueError(f"dense depth must not be negative: {dense_depth}")
        self.match_kind = MatchKind(match_kind)
        self.dense_depth = dense_depth
        self.anchored = anchored
        self.ascii_case_insensitive = ascii_case_insensitive
        self.max_state_id = max_state_id

    def __repr__(self):
        return (
            f"NFABuilder(match_kind={self.match_kind}, "
            f"dense_depth={self.dense_depth}, anchored={self.anchored}, "
            f"ascii_case_insensitive={self.ascii_case_insensitive}, "
            f"max_state_id={self.max_state_id})"
        )

    def build(self, patterns: Iterable) -> NFA:
        """Compile ``patterns`` (bytes-like or str) into an NFA.

        Raises StateIDOverflowError when more states are needed than
        ``max_state_id`` permits.
        """
        self._check_id(START_ID)
        nfa = NFA(match_kind=self.match_kind, anchored=self.anchored, start_id=START_ID)
        for _ in range(3):  # fail sentinel, dead state, start state
            self._add_state(nfa, 0)
        self._build_trie(nfa, patterns)
        self._add_start_state_loop(nfa)
        self._add_dead_state_loop(nfa)
        if not self.anchored:
            if self.match_kind.is_leftmost():
                fill_failure_transitions_leftmost(nfa, self.ascii_case_insensitive)
            else:
                fill_failure_transitions_standard(nfa, self.ascii_case_insensitive)
        self._close_start_state_loop(nfa)
        return nfa

    def _check_id(self, value):
        if value > self.max_state_id:
            raise StateIDOverflowError(self.max_state_id)

    def _add_state(self, nfa: NFA, depth):
        state_id = len(nfa.states)
        self._check_id(state_id)
        # Anchored automata have no failure transitions.
        fail = DEAD_ID if self.anchored else nfa.start_id
        trans = Transitions(dense=depth < self.dense_depth)
        nfa.states.append(State(trans=trans, fail=fail, depth=depth))
        return state_id

    def _build_trie(self, nfa: NFA, patterns):
        leftmost_first = self.match_kind.is_leftmost_first()
        for index, raw in enumerate(patterns):
            pattern = _as_bytes(raw)
            nfa.max_pattern_len = max(nfa.max_pattern_len, len(pattern))
            nfa.pattern_count += 1

            prev = nfa.start_id
            saw_match = False
            for depth, byte in enumerate(pattern):
                # Under leftmost-first, a pattern with an earlier pattern as a
                # prefix can never match, and adding it would be incorrect.
                saw_match = saw_match or nfa.states[prev].is_match()
                if leftmost_first and saw_match:
                    break
                target = nfa.states[prev].trans.next_state(byte)
                if target != FAIL_ID:
                    prev = target
                    continue
                target = self._add_state(nfa, depth + 1)
                nfa.states[prev].trans.set_next_state(byte, target)
                if self.ascii_case_insensitive:
                    nfa.states[prev].trans.set_next_state(
                        opposite_ascii_case(byte), target
                    )
                prev = target
            else:
                nfa.states[prev].add_match(index, len(pattern))

    @staticmethod
    def _add_start_state_loop(nfa: NFA):
        trans = nfa.states[nfa.start_id].trans
        for byte, target in list(trans.all_items()):
            if target == FAIL_ID:
                trans.set_next_state(byte, nfa.start_id)

    @staticmethod
    def _add_dead_state_loop(nfa: NFA):
        trans = nfa.states[DEAD_ID].trans
        for byte in range(256):
            trans.set_next_state(byte, DEAD_ID)

    def _close_start_state_loop(self, nfa: NFA):
        start = nfa.states[nfa.start_id]
        if self.anchored or (self.match_kind.is_leftmost() and start.is_match()):
            for byte, target in list(start.trans.all_items()):
                if target == nfa.start_id:
                    start.trans.set_next_state(byte, DEAD_ID)