"""Tests for vertical intent packs."""

import pytest

from pipelines.lead_quality.utils.intent_packs import (
    INTENT_PACKS,
    PACK_ORDER,
    build_packed_keywords,
    map_tier_to_intent_strength,
    resolve_intent_pack,
)


class TestResolveIntentPack:
    """Tests for request → pack matching."""

    @pytest.mark.parametrize(
        "request_text,expected",
        [
            ("Kitchen remodel leads", "remodeling"),
            ("roof repair", "roofing"),
            ("AC repair and furnace tune-up", "hvac"),
            ("leaky faucet", "plumbing"),
            ("panel upgrade", "electrical"),
            ("handyman jobs", "home_services"),
            ("dog walkers", "home_services"),
            ("", "home_services"),
        ],
    )
    def test_matching(self, request_text, expected):
        assert resolve_intent_pack(request_text)["id"] == expected

    def test_first_pack_in_order_wins(self):
        # "kitchen" (remodeling) is checked before "plumb" (plumbing)
        assert resolve_intent_pack("kitchen plumbing")["id"] == "remodeling"

    def test_order_covers_every_pack(self):
        assert set(PACK_ORDER) == set(INTENT_PACKS)


class TestBuildPackedKeywords:
    """Tests for keyword packing."""

    def test_request_first_and_deduplicated(self):
        pack = INTENT_PACKS["roofing"]

        lines = build_packed_keywords("roof repair estimate", pack).split("\n")

        assert lines[0] == "roof repair estimate"
        assert len(lines) == len(set(lines))
        assert len(lines) == len(pack["keywords"])

    def test_request_trimmed(self):
        lines = build_packed_keywords("  solar panels ", INTENT_PACKS["electrical"]).split("\n")
        assert lines[0] == "solar panels"


class TestIntentStrength:
    """Tests for tier → intent strength mapping."""

    @pytest.mark.parametrize(
        "tier,expected",
        [("hot", ["high"]), ("balanced", ["high", "medium"]), ("scale", ["medium", "low"]), ("other", ["high", "medium"])],
    )
    def test_mapping(self, tier, expected):
        assert map_tier_to_intent_strength(tier) == expected

    def test_returns_fresh_list(self):
        strengths = map_tier_to_intent_strength("hot")
        strengths.append("low")
        assert map_tier_to_intent_strength("hot") == ["high"]
