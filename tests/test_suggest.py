"""Tests for nouncli.suggest."""

from __future__ import annotations

import pytest

from nouncli.suggest import levenshtein, suggest

KNOWN = ["customer", "order", "product"]


class TestLevenshtein:
    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ("", "", 0),
            ("abc", "", 3),
            ("", "abc", 3),
            ("kitten", "sitting", 3),
            ("custmer", "customer", 1),
            ("order", "order", 0),
            ("flaw", "lawn", 2),
        ],
    )
    def test_distance(self, a: str, b: str, expected: int) -> None:
        assert levenshtein(a, b) == expected

    def test_symmetric(self) -> None:
        assert levenshtein("login", "logout") == levenshtein("logout", "login")


class TestSuggest:
    def test_close_match(self) -> None:
        assert suggest("custmer", KNOWN) == "customer"

    def test_no_match_beyond_threshold(self) -> None:
        assert suggest("zzzzz", KNOWN) is None

    def test_case_insensitive(self) -> None:
        assert suggest("ORDR", KNOWN) == "order"

    def test_returns_original_casing(self) -> None:
        assert suggest("lineitem", ["LineItem"]) == "LineItem"

    def test_distance_two_is_accepted(self) -> None:
        assert suggest("ordr_", KNOWN) == "order"

    def test_distance_three_is_rejected(self) -> None:
        assert suggest("oxxxr", ["order"]) is None

    def test_tie_goes_to_first(self) -> None:
        assert suggest("cat", ["bat", "hat"]) == "bat"
        assert suggest("cat", ["hat", "bat"]) == "hat"

    def test_empty_universe(self) -> None:
        assert suggest("anything", []) is None
