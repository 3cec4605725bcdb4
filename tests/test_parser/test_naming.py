"""Tests for nouncli.parser.naming."""

from __future__ import annotations

import pytest

from nouncli.parser.extractor import parse_resource
from nouncli.parser.naming import pluralize, to_kebab_case


class TestPluralize:
    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("Customer", "Customers"),
            ("Category", "Categories"),
            ("Day", "Days"),
            ("Key", "Keys"),
            ("Address", "Addresses"),
            ("Box", "Boxes"),
            ("Match", "Matches"),
            ("Wish", "Wishes"),
            ("Order", "Orders"),
        ],
    )
    def test_rules(self, word: str, expected: str) -> None:
        assert pluralize(word) == expected


class TestToKebabCase:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Customer", "customer"),
            ("OrderItem", "order-item"),
            ("lineItem", "line-item"),
            ("order", "order"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert to_kebab_case(name) == expected

    def test_idempotent(self) -> None:
        assert to_kebab_case(to_kebab_case("OrderItem")) == "order-item"


class TestDerivedNamesAreStable:
    @pytest.mark.parametrize(
        "name", ["Customer", "OrderItem", "Category", "Box", "APIKey", "lineItem"]
    )
    def test_reparsing_derived_names(self, name: str) -> None:
        resource = parse_resource(name, {})
        again = parse_resource(resource.command_name, {})
        assert again.command_name == resource.command_name
        assert resource.plural_name == resource.plural_name.lower()
        assert to_kebab_case(resource.command_name) == resource.command_name
