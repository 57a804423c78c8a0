"""Tests for phone normalization and categorization."""

import pytest

from pipelines.lead_quality.utils.phones import (
    join_phones,
    normalize_phone,
    parse_all_phones,
    split_phone_list,
)

from fixtures.sample_contacts import make_commercial_contact, make_residential_contact


class TestNormalizePhone:
    """Tests for E.164 normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("(305) 555-1234", "+13055551234"),
            ("305.555.1234", "+13055551234"),
            ("1-305-555-1234", "+13055551234"),
            ("+44 20 7946 0958", "+442079460958"),
            ("555-1234", ""),
            ("", ""),
            (None, ""),
            ("call me", ""),
        ],
    )
    def test_normalization(self, raw, expected):
        assert normalize_phone(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["(305) 555-1234", "1 305 555 1234", "+442079460958", "12345", "", "3055551234x99"],
    )
    def test_idempotent(self, raw):
        once = normalize_phone(raw)
        assert normalize_phone(once) == once


class TestSplitPhoneList:
    """Tests for provider phone list splitting."""

    def test_all_separators(self):
        assert split_phone_list("305-555-1000, 305-555-1001|305-555-1002;") == [
            "305-555-1000",
            "305-555-1001",
            "305-555-1002",
        ]

    def test_empty(self):
        assert split_phone_list(None) == []
        assert split_phone_list("") == []


class TestParseAllPhones:
    """Tests for phone categorization and best-phone selection."""

    def test_residential_categories(self):
        contact = make_residential_contact(phone="954-555-7777")

        phones = parse_all_phones(contact, "residential")

        assert phones["wireless"] == ["+13055551000"]
        assert phones["landline"] == ["+13055552000"]
        assert phones["all"] == ["+13055551000", "+13055552000", "+19545557777"]
        assert phones["best"] == "+13055551000"

    def test_mobile_phone_counts_as_wireless(self):
        contact = {"mobile_phone": "3055559999"}
        phones = parse_all_phones(contact, "residential")
        assert phones["wireless"] == ["+13055559999"]
        assert phones["best"] == "+13055559999"

    def test_duplicates_dropped_across_categories(self):
        contact = make_residential_contact(
            SKIPTRACE_LANDLINE_NUMBERS="(305) 555-1000",
            mobile_phone="305.555.1000",
            phone="13055551000",
        )

        phones = parse_all_phones(contact, "residential")

        assert phones["all"] == ["+13055551000"]
        assert phones["landline"] == []

    def test_landline_is_best_without_wireless(self):
        contact = make_residential_contact(SKIPTRACE_WIRELESS_NUMBERS=None)
        phones = parse_all_phones(contact, "residential")
        assert phones["best"] == "+13055552000"

    def test_other_is_best_as_last_resort(self):
        phones = parse_all_phones({"phone": "305-555-3333"}, "residential")
        assert phones["wireless"] == []
        assert phones["landline"] == []
        assert phones["best"] == "+13055553333"

    def test_no_phones(self):
        phones = parse_all_phones({"phone": "12345"}, "residential")
        assert phones == {"all": [], "wireless": [], "landline": [], "best": ""}

    def test_commercial_reads_b2b_fields(self):
        contact = make_commercial_contact(SKIPTRACE_WIRELESS_NUMBERS="305-555-8888")

        phones = parse_all_phones(contact, "commercial")

        assert phones["wireless"] == ["+12145553000"]
        assert phones["landline"] == ["+12145554000"]
        assert "+13055558888" not in phones["all"]

    def test_residential_ignores_b2b_fields(self):
        contact = {"SKIPTRACE_B2B_WIRELESS": "214-555-3000"}
        assert parse_all_phones(contact, "residential")["best"] == ""

    def test_lists_split(self):
        contact = {"SKIPTRACE_WIRELESS_NUMBERS": "3055551000|3055551001"}
        phones = parse_all_phones(contact, "residential")
        assert phones["wireless"] == ["+13055551000", "+13055551001"]

    def test_join_phones(self):
        assert join_phones(["+13055551000", "+13055551001"]) == "+13055551000|+13055551001"
        assert join_phones([]) == ""
