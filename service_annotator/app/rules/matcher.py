"""
Pattern matching for rule namespace and name patterns.

A pattern is a comma-separated list of entries. Each entry is a glob where
``*`` matches any run of characters (including none), optionally prefixed
with ``!`` to negate it. Entries are evaluated left to right and the last
entry that matches decides the outcome. An empty pattern matches everything.
"""

import re
from functools import lru_cache
from typing import List, Pattern, Tuple


MATCH_ALL = "*"
NEGATION_PREFIX = "!"

# Grammar accepted when rules are loaded
PATTERN_GRAMMAR = re.compile(r"!?(?:[a-z0-9\-*]+(?:,[a-z0-9\-*]+)*)")


@lru_cache(maxsize=1024)
def _compile_glob(glob: str) -> Pattern[str]:
    parts = [re.escape(part) for part in glob.split("*")]
    return re.compile(".*".join(parts), re.DOTALL)


@lru_cache(maxsize=1024)
def _parse_entries(pattern: str) -> Tuple[Tuple[bool, Pattern[str]], ...]:
    entries: List[Tuple[bool, Pattern[str]]] = []
    for entry in pattern.split(","):
        if not entry:
            continue
        negated = entry.startswith(NEGATION_PREFIX)
        if negated:
            entry = entry[len(NEGATION_PREFIX):]
        entries.append((negated, _compile_glob(entry)))
    return tuple(entries)


def match(pattern: str, candidate: str) -> bool:
    """Return True if ``candidate`` is selected by ``pattern``."""
    if pattern == "":
        pattern = MATCH_ALL

    result = False
    for negated, glob in _parse_entries(pattern):
        if glob.fullmatch(candidate):
            result = not negated
    return result


def validate_pattern(pattern: str) -> bool:
    """Check a pattern against the grammar accepted for rules."""
    if pattern == "":
        return True
    return PATTERN_GRAMMAR.fullmatch(pattern) is not None
