"""Match semantics and the match value reported by searches."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class MatchKind(enum.Enum):
    """The match semantics an automaton is built with."""

    STANDARD = "standard"
    LEFTMOST_FIRST = "leftmost-first"
    LEFTMOST_LONGEST = "leftmost-longest"

    def is_leftmost(self):
        """True for either of the leftmost semantics."""
        return self in (MatchKind.LEFTMOST_FIRST, MatchKind.LEFTMOST_LONGEST)

    def is_leftmost_first(self):
        """True only for leftmost-first semantics."""
        return self is MatchKind.LEFTMOST_FIRST


@dataclass(frozen=True)
class Match:
    """A match: the pattern's index, its length and the exclusive end offset."""

    pattern: int
    length: int
    end: int

    def __post_init__(self):
        if self.length < 0:
            raise ValueError(f"match length must not be negative: {self.length}")
        if self.length > self.end:
            raise ValueError(
                f"match length {self.length} exceeds its end offset {self.end}"
            )

    def start(self):
        """The starting offset of the match."""
        return self.end - self.length

    def is_empty(self):
        """True when the match covers no bytes."""
        return self.length == 0

    def shifted(self, by):
        """A copy of this match moved forward by ``by`` bytes."""
        return Match(self.pattern, self.length, self.end + by)

    @classmethod
    def from_span(cls, pattern, start, end):
        """Build a match from a start and end offset."""
        if end < start:
            raise ValueError(f"span end {end} precedes start {start}")
        return cls(pattern, end - start, end)