import pytest

from multimatch.failure import (
    fill_failure_transitions_leftmost,
    fill_failure_transitions_standard,
)
from multimatch.matches import MatchKind
from multimatch.nfa import DEAD_ID, FAIL_ID, NFA, START_ID, State, Transitions


def _new_state(nfa, depth, dense_depth):
    nfa.states.append(
        State(Transitions(dense=depth < dense_depth), fail=nfa.start_id, depth=depth)
    )
    return len(nfa.states) - 1


def _flip(byte):
    if ord("a") <= byte <= ord("z"):
        return byte - 32
    if ord("A") <= byte <= ord("Z"):
        return byte + 32
    return byte


def make_trie(patterns, kind=MatchKind.STANDARD, dense_depth=2, nocase=False):
    """A bare trie with start and dead loops, ready for failure links."""
    nfa = NFA(match_kind=kind)
    for _ in range(3):
        _new_state(nfa, 0, dense_depth)
    for index, pattern in enumerate(patterns):
        nfa.pattern_count += 1
        nfa.max_pattern_len = max(nfa.max_pattern_len, len(pattern))
        prev = nfa.start_id
        skipped = False
        saw_match = False
        for depth, byte in enumerate(pattern):
            saw_match = saw_match or nfa.states[prev].is_match()
            if kind.is_leftmost_first() and saw_match:
                skipped = True
                break
            nxt = nfa.states[prev].trans.next_state(byte)
            if nxt == FAIL_ID:
                nxt = _new_state(nfa, depth + 1, dense_depth)
                nfa.states[prev].trans.set_next_state(byte, nxt)
                if nocase:
                    nfa.states[prev].trans.set_next_state(_flip(byte), nxt)
            prev = nxt
        if not skipped:
            nfa.states[prev].add_match(index, len(pattern))
    start = nfa.states[nfa.start_id]
    for byte in range(256):
        if start.trans.next_state(byte) == FAIL_ID:
            start.trans.set_next_state(byte, nfa.start_id)
        nfa.states[DEAD_ID].trans.set_next_state(byte, DEAD_ID)
    return nfa


def walk(nfa, text):
    state = nfa.start_id
    for byte in text:
        state = nfa.transition(state, byte)
    return state


def overlapping_search(nfa, haystack):
    found = set()
    state = nfa.start_id
    for end, byte in enumerate(haystack, start=1):
        state = nfa.next_state(state, byte)
        for pattern, _ in nfa.matches(state):
            found.add((pattern, end))
    return found


def naive_search(patterns, haystack):
    return {
        (index, end)
        for index, pattern in enumerate(patterns)
        for end in range(len(pattern), len(haystack) + 1)
        if haystack[end - len(pattern):end] == pattern
    }


def test_standard_failure_points_to_suffix_state():
    nfa = make_trie([b"abcd", b"cef"])
    fill_failure_transitions_standard(nfa, False)
    assert nfa.failure_transition(walk(nfa, b"abc")) == walk(nfa, b"c")
    assert nfa.failure_transition(walk(nfa, b"ab")) == START_ID


def test_standard_chained_failures_and_copied_matches():
    nfa = make_trie([b"abcd", b"b", b"bcd", b"cd"])
    fill_failure_transitions_standard(nfa, False)
    assert nfa.failure_transition(walk(nfa, b"ab")) == walk(nfa, b"b")
    assert nfa.failure_transition(walk(nfa, b"abc")) == walk(nfa, b"bc")
    assert nfa.failure_transition(walk(nfa, b"bc")) == walk(nfa, b"c")
    assert nfa.matches(walk(nfa, b"ab")) == ((1, 1),)
    assert nfa.matches(walk(nfa, b"abcd")) == ((0, 4), (2, 3), (3, 2))


@pytest.mark.parametrize("dense_depth", [0, 2, 10])
def test_standard_search_finds_every_occurrence(dense_depth):
    patterns = [b"he", b"she", b"his", b"hers", b"s"]
    haystack = b"ushers say his hershey"
    nfa = make_trie(patterns, dense_depth=dense_depth)
    fill_failure_transitions_standard(nfa, False)
    assert overlapping_search(nfa, haystack) == naive_search(patterns, haystack)


def test_standard_failure_links_are_shallower():
    nfa = make_trie([b"abab", b"bab", b"ba", b"aab"])
    fill_failure_transitions_standard(nfa, False)
    for state_id in range(START_ID + 1, nfa.state_len()):
        fail = nfa.failure_transition(state_id)
        assert nfa.states[fail].depth < nfa.states[state_id].depth


def test_standard_empty_pattern_matches_everywhere():
    nfa = make_trie([b"", b"a"])
    fill_failure_transitions_standard(nfa, False)
    assert (0, 0) in nfa.matches(walk(nfa, b"a"))
    assert (1, 1) in nfa.matches(walk(nfa, b"a"))


def test_standard_tracking_avoids_duplicate_matches():
    tracked = make_trie([b"ab", b"b"], nocase=True)
    fill_failure_transitions_standard(tracked, True)
    matches = tracked.matches(walk(tracked, b"ab"))
    assert sorted(matches) == [(0, 2), (1, 1)]

    untracked = make_trie([b"ab", b"b"], nocase=True)
    fill_failure_transitions_standard(untracked, False)
    assert len(untracked.matches(walk(untracked, b"ab"))) > len(matches)


def test_leftmost_first_match_path_fails_to_dead():
    nfa = make_trie([b"Samwise", b"Sam"], kind=MatchKind.LEFTMOST_FIRST)
    fill_failure_transitions_leftmost(nfa, False)
    assert nfa.failure_transition(walk(nfa, b"Sam")) == DEAD_ID
    assert nfa.failure_transition(walk(nfa, b"Samw")) == DEAD_ID
    assert nfa.failure_transition(walk(nfa, b"Samwise")) == DEAD_ID
    assert nfa.failure_transition(walk(nfa, b"Sa")) == START_ID


def test_standard_keeps_restart_links_where_leftmost_does_not():
    nfa = make_trie([b"Samwise", b"Sam"])
    fill_failure_transitions_standard(nfa, False)
    assert nfa.failure_transition(walk(nfa, b"Sam")) == START_ID


def test_leftmost_match_after_start_fails_to_dead():
    nfa = make_trie([b"a", b"bc"], kind=MatchKind.LEFTMOST_LONGEST)
    fill_failure_transitions_leftmost(nfa, False)
    assert nfa.failure_transition(walk(nfa, b"a")) == DEAD_ID
    assert nfa.failure_transition(walk(nfa, b"b")) == START_ID
    assert nfa.failure_transition(walk(nfa, b"bc")) == DEAD_ID


def test_leftmost_keeps_links_before_any_match():
    nfa = make_trie([b"abcd", b"bc"], kind=MatchKind.LEFTMOST_LONGEST)
    fill_failure_transitions_leftmost(nfa, False)
    abc = walk(nfa, b"abc")
    assert nfa.failure_transition(abc) == walk(nfa, b"bc")
    assert nfa.matches(abc) == ((1, 2),)
    assert nfa.failure_transition(walk(nfa, b"abcd")) == DEAD_ID


def test_leftmost_tracking_avoids_duplicate_matches():
    nfa = make_trie([b"abc", b"bc"], kind=MatchKind.LEFTMOST_LONGEST, nocase=True)
    fill_failure_transitions_leftmost(nfa, True)
    for state in nfa.states:
        assert len(set(state.matches)) == len(state.matches)
    assert nfa.failure_transition(walk(nfa, b"ab")) == walk(nfa, b"b")