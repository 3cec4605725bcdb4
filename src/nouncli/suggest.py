"""Typo suggestions for unknown commands.

Uses Levenshtein edit distance rather than :mod:`difflib` ratios so that the
threshold is an absolute number of edits: short command names would
otherwise match almost anything.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

MAX_SUGGESTION_DISTANCE = 2


def levenshtein(a: str, b: str) -> int:
    """Return the edit distance between *a* and *b* (insert, delete, substitute)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j - 1], previous[j], current[j - 1]))
        previous = current
    return previous[-1]


def suggest(
    token: str,
    known_names: Iterable[str],
    max_distance: int = MAX_SUGGESTION_DISTANCE,
) -> Optional[str]:
    """Return the known name closest to *token*, or ``None``.

    Comparison is case-insensitive. A name is only proposed when its distance
    is at most *max_distance*. Ties go to the earliest name in
    *known_names*.

    Example::

        >>> suggest("custmer", ["customer", "order", "product"])
        'customer'
    """
    needle = token.lower()
    best: Optional[str] = None
    best_distance = max_distance + 1
    for name in known_names:
        distance = levenshtein(needle, name.lower())
        if distance < best_distance:
            best, best_distance = name, distance
    return best
