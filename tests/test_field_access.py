"""Tests for provider field access helpers.

These tests validate:
- Root-then-nested lookup order
- Empty values degrade to absent
- Value coercion (numbers, lists, nested mappings)
- Input contacts are never mutated
"""

import copy

import pytest

from pipelines.lead_quality.utils.field_access import (
    NESTED_CONTAINERS,
    get_field,
    get_first_field,
)


class TestGetField:
    """Tests for get_field lookup and coercion."""

    def test_root_value_returned(self):
        assert get_field({"FIRST_NAME": "Ann"}, "FIRST_NAME") == "Ann"

    def test_root_wins_over_nested(self):
        contact = {"city": "Miami", "data": {"city": "Tampa"}}
        assert get_field(contact, "city") == "Miami"

    def test_containers_checked_in_order(self):
        assert NESTED_CONTAINERS == ("fields", "data", "profile")
        contact = {
            "profile": {"city": "Orlando"},
            "data": {"city": "Tampa"},
            "fields": {"city": "Miami"},
        }
        assert get_field(contact, "city") == "Miami"

    def test_empty_root_falls_through_to_nested(self):
        contact = {"city": "", "data": {"city": "Tampa"}}
        assert get_field(contact, "city") == "Tampa"

    def test_whitespace_only_is_absent(self):
        assert get_field({"email": "   "}, "email") is None

    def test_missing_field_is_none(self):
        assert get_field({"other": "x"}, "email") is None

    def test_number_coerced_to_string(self):
        assert get_field({"data": {"zip": 33101}}, "zip") == "33101"

    def test_list_joined_with_commas(self):
        contact = {"SKIPTRACE_WIRELESS_NUMBERS": ["3055551000", "3055551001"]}
        assert get_field(contact, "SKIPTRACE_WIRELESS_NUMBERS") == "3055551000,3055551001"

    def test_empty_list_is_absent(self):
        assert get_field({"phone": []}, "phone") is None

    def test_nested_mapping_is_not_a_value(self):
        assert get_field({"address": {"street": "1 Main"}}, "address") is None

    def test_non_mapping_container_ignored(self):
        assert get_field({"data": "garbage"}, "city") is None

    @pytest.mark.parametrize("contact", [None, "string", 42, ["a"]])
    def test_non_mapping_contact_is_absent(self, contact):
        assert get_field(contact, "city") is None

    def test_contact_not_mutated(self):
        contact = {"city": "", "data": {"city": "Tampa", "zip": 33101}}
        snapshot = copy.deepcopy(contact)

        get_field(contact, "city")
        get_field(contact, "zip")

        assert contact == snapshot


class TestGetFirstField:
    """Tests for ordered field cascades."""

    def test_first_present_name_wins(self):
        contact = {"LAST_NAME": "Doe", "last_name": "Smith"}
        assert get_first_field(contact, ("SKIPTRACE_LAST_NAME", "LAST_NAME", "last_name")) == "Doe"

    def test_empty_values_skipped(self):
        contact = {"LAST_NAME": " ", "data": {"last_name": "Smith"}}
        assert get_first_field(contact, ("LAST_NAME", "last_name")) == "Smith"

    def test_nothing_present(self):
        assert get_first_field({}, ("a", "b")) is None
