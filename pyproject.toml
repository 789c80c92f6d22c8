[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "multimatch"
version = "0.1.0"
description = "Aho-Corasick automata (NFA and DFA) for many byte patterns at once, with standard and leftmost match semantics"
requires-python = ">=3.10"
dependencies = []
keywords = ["aho-corasick", "pattern-matching", "automaton", "dfa", "nfa", "trie"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Indexing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["multimatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
