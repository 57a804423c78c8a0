"""Tests for name, location and email resolution."""

import pytest

from pipelines.lead_quality.utils.identity import (
    is_email_at_least_valid,
    is_email_valid_esp,
    is_missing_name_or_address,
    parse_name,
    resolve_location,
    resolve_name,
    select_quality_email,
)

from fixtures.sample_contacts import make_commercial_contact, make_residential_contact


class TestNameResolution:
    """Tests for full-name parsing and the per-field cascade."""

    @pytest.mark.parametrize(
        "full_name,expected",
        [
            ("John Doe", ("John", "Doe")),
            ("John Michael Doe", ("John Michael", "Doe")),
            ("Cher", ("Cher", "")),
            ("  ", ("", "")),
        ],
    )
    def test_parse_name(self, full_name, expected):
        assert parse_name(full_name) == expected

    def test_full_name_field_preferred(self):
        contact = {"SKIPTRACE_NAME": "Jane Doe", "FIRST_NAME": "Other", "LAST_NAME": "Person"}
        assert resolve_name(contact) == ("Jane", "Doe")

    def test_cascade_when_full_name_missing(self):
        contact = {"FIRST_NAME": "Omar", "data": {"last_name": "Reyes"}}
        assert resolve_name(contact) == ("Omar", "Reyes")

    def test_blank_full_name_falls_back(self):
        contact = {"SKIPTRACE_NAME": "   ", "first_name": "Ann"}
        assert resolve_name(contact) == ("Ann", "")

    def test_nothing_resolves_to_empty(self):
        assert resolve_name({}) == ("", "")


class TestLocationResolution:
    """Tests for per-component location cascades."""

    def test_residential_skiptrace_fields(self):
        location = resolve_location(make_residential_contact(), "residential")
        assert location == {
            "address": "100 Main St",
            "city": "Miami",
            "state": "FL",
            "zip": "33101",
        }

    def test_residential_ignores_company_fields(self):
        contact = {"COMPANY_ADDRESS": "1 Corp Way", "address": "9 Home Rd"}
        assert resolve_location(contact, "residential")["address"] == "9 Home Rd"

    def test_commercial_uses_company_fields(self):
        location = resolve_location(make_commercial_contact(), "commercial")
        assert location["address"] == "500 Commerce Blvd"
        assert location["state"] == "TX"

    def test_skiptrace_wins_for_commercial(self):
        contact = make_commercial_contact(SKIPTRACE_CITY="Austin")
        assert resolve_location(contact, "commercial")["city"] == "Austin"

    def test_components_resolve_independently(self):
        contact = {
            "SKIPTRACE_ADDRESS": "1 Main St",
            "data": {"city": "Tampa", "postal_code": "33602"},
        }

        location = resolve_location(contact, "residential")

        assert location == {"address": "1 Main St", "city": "Tampa", "state": "", "zip": "33602"}

    def test_values_trimmed(self):
        assert resolve_location({"city": "  Miami "}, "residential")["city"] == "Miami"

    @pytest.mark.parametrize(
        "first,last,address,expected",
        [
            ("Jane", "Doe", "1 Main", False),
            ("Jane", "", "1 Main", False),
            ("", "", "1 Main", True),
            ("Jane", "Doe", "", True),
        ],
    )
    def test_missing_name_or_address(self, first, last, address, expected):
        assert is_missing_name_or_address(first, last, address) is expected


class TestEmailSelection:
    """Tests for scope-aware email selection and status checks."""

    @pytest.mark.parametrize(
        "status,expected",
        [("Valid (Esp)", True), ("valid(esp)", True), (" VALID (ESP) ", True), ("Valid", False), (None, False)],
    )
    def test_valid_esp(self, status, expected):
        assert is_email_valid_esp(status) is expected

    @pytest.mark.parametrize(
        "status,expected",
        [(None, True), ("", True), ("Valid", True), ("Valid (Esp)", True), ("Invalid", False), ("Unknown", False)],
    )
    def test_at_least_valid(self, status, expected):
        assert is_email_at_least_valid(status) is expected

    def test_residential_personal_email(self):
        selection = select_quality_email(make_residential_contact(), "residential")
        assert selection == {
            "email": "jane0@example.com",
            "validation_status": "Valid (Esp)",
            "is_valid": True,
            "is_valid_esp": True,
        }

    def test_commercial_business_email(self):
        contact = make_commercial_contact(BUSINESS_EMAIL_VALIDATION_STATUS="Invalid")

        selection = select_quality_email(contact, "commercial")

        assert selection["email"] == "omar0@acme.example"
        assert selection["is_valid"] is False
        assert selection["is_valid_esp"] is False

    def test_personal_email_ignored_for_commercial(self):
        contact = {"PERSONAL_EMAIL": "me@home.example"}
        assert select_quality_email(contact, "commercial")["email"] == ""

    def test_generic_fallback_has_no_status(self):
        selection = select_quality_email({"email": "x@y.example"}, "residential")
        assert selection == {
            "email": "x@y.example",
            "validation_status": None,
            "is_valid": True,
            "is_valid_esp": False,
        }

    def test_no_email(self):
        selection = select_quality_email({}, "residential")
        assert selection["email"] == ""
