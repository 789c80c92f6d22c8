"""Aho-Corasick NFA and DFA construction over byte patterns."""

__version__ = "0.1.0"
__all__ = ["errors", "matches", "nfa", "failure", "nfa_builder", "dfa"]