# multimatch

Build Aho-Corasick automata over byte patterns, in two forms:

- `multimatch.nfa.NFA`: the prefix trie of the patterns wired up with
  failure transitions, built by `multimatch.nfa_builder.NFABuilder`;
- `multimatch.dfa.DFA`: the same automaton with every failure transition
  followed ahead of time, one target per state and byte, built from an NFA by
  `multimatch.dfa.DFABuilder`.

Match semantics are chosen with `multimatch.matches.MatchKind`:

- `MatchKind.STANDARD`: the textbook construction, which reports every match
  as soon as it is seen;
- `MatchKind.LEFTMOST_FIRST`: the pattern given first wins among matches that
  start at the same place, as with a Perl-style regex alternation;
- `MatchKind.LEFTMOST_LONGEST`: the longest match wins, as with POSIX
  alternation.

Under the leftmost kinds, states that follow a match get no failure
transition that would lose that match. They lead to the dead state instead.

## Installation

```
pip install .
```

## Example

```python
from multimatch.dfa import DFABuilder
from multimatch.matches import MatchKind
from multimatch.nfa_builder import NFABuilder

nfa = NFABuilder(match_kind=MatchKind.LEFTMOST_FIRST).build([b"Samwise", b"Sam"])
dfa = DFABuilder(premultiply=False).build(nfa)

state = dfa.start_id
for end, byte in enumerate(b"Samwise", start=1):
    state = dfa.next_state(state, byte)
    if dfa.is_match_state(state):
        match = dfa.get_match(state, 0, end)
        print(match.pattern, match.start(), match.end)
```

This prints `1 0 3` and then `0 0 7`.

## API

### `multimatch.nfa_builder`

`NFABuilder(match_kind=MatchKind.STANDARD, dense_depth=2, anchored=False,
ascii_case_insensitive=False, max_state_id=sys.maxsize)`

- `build(patterns)` compiles an iterable of patterns into an `NFA`. A pattern
  may be `bytes`, another bytes-like object, or `str`, which is encoded as
  UTF-8. Pattern indexes follow the order of the iterable.
- States shallower than `dense_depth` get a 256-entry transition table.
  Deeper states get a sorted sparse list.
- `anchored=True` gives no failure transitions, so matches must start at the
  beginning of the input.
- `ascii_case_insensitive=True` makes ASCII letters match either case.
- If a state ID above `max_state_id` is needed, the build raises
  `StateIDOverflowError`.
- Under leftmost-first, a pattern with an earlier pattern as a prefix is left
  out of the trie, because it can never match.

`opposite_ascii_case(byte)` flips the case of an ASCII letter byte. Other
bytes are returned unchanged.

### `multimatch.nfa`

The constants `FAIL_ID` (0), `DEAD_ID` (1) and `START_ID` (2) name the
reserved states.

`NFA` has these attributes: `match_kind`, `anchored`, `start_id`,
`max_pattern_len`, `pattern_count` and `states`.

Its methods are:

- `state_len()`
- `matches(state_id)`
- `failure_transition(state_id)`
- `transition(state_id, byte)`, the raw transition, which may be `FAIL_ID`
- `all_transitions(state_id)`
- `next_state(state_id, byte)`, which follows failure links
- `is_valid(state_id)`
- `is_match_state(state_id)`
- `get_match(state_id, match_index, end)`
- `match_count(state_id)`
- `heap_bytes()`

`str(nfa)` gives a readable dump of every state.

`State` and `Transitions` are the building blocks of an `NFA`.

### `multimatch.failure`

`fill_failure_transitions_standard(nfa, track_seen)` and
`fill_failure_transitions_leftmost(nfa, track_seen)` wire failure links into a
trie. `NFABuilder.build` calls them for you. `track_seen` must be true when one
state can be reached from the same parent on two bytes, as with case
insensitivity.

### `multimatch.dfa`

`DFABuilder(premultiply=True, max_state_id=sys.maxsize)` has one method,
`build(nfa)`, which returns a `DFA`.

- Match states are moved right after the fail and dead states, so
  `is_match_or_dead_state(id)` is simply `id <= max_match`.
- With `premultiply=True`, state IDs are multiplied by the alphabet length
  (always 256). `next_state` then adds the byte to the state ID.
- If premultiplied IDs would exceed `max_state_id`, the build raises
  `PremultiplyOverflowError`.

`DFA` has these methods:

- `next_state(state_id, byte)`
- `is_valid(state_id)`
- `is_match_state(state_id)`
- `is_match_or_dead_state(state_id)`
- `get_match(state_id, match_index, end)`
- `match_count(state_id)`

It has these attributes:

- `start_id`
- `max_match`
- `state_count`
- `max_pattern_len`
- `pattern_count`
- `premultiplied`
- `heap_bytes`

### `multimatch.matches`

`Match(pattern, length, end)` is a frozen dataclass.

- `start()` returns the start offset.
- `is_empty()` is true when the match covers no bytes.
- `shifted(by)` returns a copy moved forward by `by` bytes.
- `Match.from_span(pattern, start, end)` builds a match from a start and end
  offset.

`MatchKind` has two methods: `is_leftmost()` and `is_leftmost_first()`.

### `multimatch.errors`

`AutomatonError` is the base class of `StateIDOverflowError` and
`PremultiplyOverflowError`. Each carries a short `description` and keeps the
limits it was raised with.

## What this package does not do

The package builds automata and lets you step through them one byte at a
time. It does not provide:

- search routines over a haystack, such as find, find-all, overlapping
  iteration or replacement;
- stream searching;
- prefilters;
- byte equivalence classes, so the DFA alphabet is always the 256 byte
  values.

Searching is left to the caller. Drive `next_state` and read matches with
`get_match` and `match_count`.

## Tests

```
pip install .[test]
pytest
```