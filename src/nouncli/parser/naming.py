"""Deterministic naming rules for resources.

A resource named ``OrderItem`` is addressed on the command line as
``order-item`` and on the wire as ``/orderitems``. Both rules are pure
functions of the resource name, so help text, path construction and tests
all agree on them.
"""

from __future__ import annotations

import re

_VOWEL_Y = re.compile(r"[aeiou]y$", re.IGNORECASE)
_UPPER = re.compile(r"([A-Z])")


def pluralize(word: str) -> str:
    """Return the plural of *word* using simple English heuristics.

    * consonant + ``y`` -> ``ies`` (``Category`` -> ``Categories``)
    * trailing ``s``, ``x``, ``ch`` or ``sh`` -> append ``es``
    * anything else -> append ``s``

    Args:
        word: Singular form, in any casing.

    Returns:
        The plural form, casing preserved.
    """
    if word.endswith("y") and not _VOWEL_Y.search(word):
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "ch", "sh")):
        return word + "es"
    return word + "s"


def to_kebab_case(name: str) -> str:
    """Convert ``PascalCase``/``camelCase`` to lowercase ``kebab-case``.

    Example::

        >>> to_kebab_case("OrderItem")
        'order-item'
    """
    return _UPPER.sub(r"-\1", name).lower().lstrip("-")
