"""Tests for RequestValidationAgent and payload validation."""

import pytest

from pipelines.lead_quality.agents.request_validation_agent import (
    RequestValidationAgent,
    RequestValidationError,
    parse_zip_codes,
    validate_payload,
    validate_quality_tier,
)


@pytest.fixture
def valid_body():
    return {
        "leadRequest": "  Kitchen remodeling  ",
        "zipCodes": "33101, 33130",
        "leadScope": "Residential",
    }


def _error_code(body):
    with pytest.raises(RequestValidationError) as exc_info:
        validate_payload(body)
    return exc_info.value.code


class TestParseZipCodes:
    """Tests for ZIP extraction."""

    def test_string_input(self):
        assert parse_zip_codes("33101, 33130 33101 9021 abcde 123456") == ["33101", "33130"]

    def test_list_input(self):
        assert parse_zip_codes(["33101", 33130, "bad"]) == ["33101", "33130"]

    @pytest.mark.parametrize("raw", [None, 33101, {"zip": "33101"}])
    def test_unsupported_types(self, raw):
        assert parse_zip_codes(raw) == []


class TestValidatePayload:
    """Tests for payload rules."""

    def test_defaults(self, valid_body):
        context = validate_payload(valid_body)

        assert context == {
            "lead_request": "Kitchen remodeling",
            "zips": ["33101", "33130"],
            "scope": "residential",
            "use_case": "both",
            "requested_count": 200,
            "min_match_score_override": None,
        }

    def test_explicit_values(self, valid_body):
        valid_body.update({"useCase": "CALL", "minMatchScore": "2", "requestedCount": 50})

        context = validate_payload(valid_body)

        assert context["use_case"] == "call"
        assert context["min_match_score_override"] == 2
        assert context["requested_count"] == 50

    def test_blank_optional_values_use_defaults(self, valid_body):
        valid_body.update({"minMatchScore": "", "requestedCount": None})
        context = validate_payload(valid_body)
        assert context["min_match_score_override"] is None
        assert context["requested_count"] == 200

    def test_zero_match_score_is_kept(self, valid_body):
        valid_body["minMatchScore"] = 0
        assert validate_payload(valid_body)["min_match_score_override"] == 0

    def test_not_an_object(self):
        assert _error_code(["leadRequest"]) == "invalid_payload"

    @pytest.mark.parametrize("lead_request", [None, "", "ab", "   ab  ", "x" * 201])
    def test_bad_lead_request(self, valid_body, lead_request):
        valid_body["leadRequest"] = lead_request
        assert _error_code(valid_body) == "invalid_lead_request"

    def test_no_valid_zips(self, valid_body):
        valid_body["zipCodes"] = "123, abcde"
        assert _error_code(valid_body) == "invalid_zip_codes"

    def test_too_many_zips(self, valid_body):
        valid_body["zipCodes"] = [f"{10000 + i}" for i in range(201)]
        assert _error_code(valid_body) == "invalid_zip_codes"

    def test_bad_scope(self, valid_body):
        valid_body["leadScope"] = "industrial"
        assert _error_code(valid_body) == "invalid_scope"

    def test_missing_scope(self, valid_body):
        del valid_body["leadScope"]
        assert _error_code(valid_body) == "invalid_scope"

    def test_bad_use_case(self, valid_body):
        valid_body["useCase"] = "sms"
        assert _error_code(valid_body) == "invalid_use_case"

    @pytest.mark.parametrize("score", [4, -1, "high", True])
    def test_bad_match_score(self, valid_body, score):
        valid_body["minMatchScore"] = score
        assert _error_code(valid_body) == "invalid_min_match_score"

    @pytest.mark.parametrize("count", [0, 1001, "many", 2.5])
    def test_bad_requested_count(self, valid_body, count):
        valid_body["requestedCount"] = count
        assert _error_code(valid_body) == "invalid_requested_count"

    def test_error_details_hold_no_payload_text(self, valid_body):
        valid_body["leadRequest"] = "ab"
        with pytest.raises(RequestValidationError) as exc_info:
            validate_payload(valid_body)
        error = exc_info.value.to_dict()
        assert error["details"] == {"lead_request_length": 2}
        assert "ab" not in error["message"]


class TestValidateQualityTier:
    """Tests for tier resolution."""

    def test_default(self):
        assert validate_quality_tier(None) == "balanced"
        assert validate_quality_tier("", default="scale") == "scale"

    def test_normalized(self):
        assert validate_quality_tier(" HOT ") == "hot"

    def test_unknown(self):
        with pytest.raises(RequestValidationError) as exc_info:
            validate_quality_tier("premium")
        assert exc_info.value.code == "invalid_quality_tier"


class TestRequestValidationAgent:
    """Tests for RequestValidationAgent wrapper."""

    def test_run(self, valid_body):
        valid_body["qualityTier"] = "scale"

        result = RequestValidationAgent().run({"request": valid_body})

        assert result["scope_context"]["scope"] == "residential"
        assert result["quality_tier"] == "scale"

    def test_default_tier_from_agent(self, valid_body):
        result = RequestValidationAgent(default_quality_tier="hot").run({"request": valid_body})
        assert result["quality_tier"] == "hot"

    def test_missing_request(self):
        with pytest.raises(ValueError, match="'request' key missing"):
            RequestValidationAgent().run({})

    def test_invalid_payload_propagates(self, valid_body):
        valid_body["leadScope"] = "nope"
        with pytest.raises(RequestValidationError):
            RequestValidationAgent().run({"request": valid_body})
