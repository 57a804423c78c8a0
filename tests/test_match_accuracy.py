"""Tests for match tier classification and effective scope."""

from itertools import combinations

import pytest

from pipelines.lead_quality.utils.match_accuracy import (
    classify_match_descriptor,
    evaluate_match_by_tier,
    tier_to_numeric_score,
)
from pipelines.lead_quality.utils.scope import resolve_effective_scope

TOKENS = ("ADDRESS", "EMAIL", "NAME")
TIER_RANK = {"low": 1, "medium": 2, "high": 3}


class TestClassifyMatchDescriptor:
    """Tests for descriptor → tier rules."""

    @pytest.mark.parametrize(
        "descriptor,expected",
        [
            ("ADDRESS,EMAIL", "high"),
            ("ADDRESS,EMAIL,NAME", "high"),
            ("email,address", "high"),
            ("NAME,ADDRESS", "medium"),
            ("NAME,COMPANY_ADDRESS", "medium"),
            ("COMPANY_ADDRESS,EMAIL", "high"),
            ("EMAIL,NAME", "low"),
            ("ADDRESS", "low"),
            ("PHONE", "low"),
            ("", "low"),
            (None, "low"),
        ],
    )
    def test_rules(self, descriptor, expected):
        assert classify_match_descriptor(descriptor) == expected

    def test_adding_tokens_never_lowers_tier(self):
        subsets = [
            frozenset(combo)
            for size in range(len(TOKENS) + 1)
            for combo in combinations(TOKENS, size)
        ]
        for smaller in subsets:
            for larger in subsets:
                if not smaller <= larger:
                    continue
                small_tier = classify_match_descriptor(",".join(sorted(smaller)))
                large_tier = classify_match_descriptor(",".join(sorted(larger)))
                assert TIER_RANK[large_tier] >= TIER_RANK[small_tier], (smaller, larger)


class TestEvaluateMatchByTier:
    """Tests for scope-aware descriptor lookup."""

    def test_residential_reads_b2c_field(self):
        contact = {"SKIPTRACE_MATCH_BY": "ADDRESS,EMAIL", "SKIPTRACE_B2B_MATCH_BY": "NAME"}
        assert evaluate_match_by_tier(contact, "residential") == "high"

    def test_commercial_reads_b2b_field(self):
        contact = {"SKIPTRACE_MATCH_BY": "ADDRESS,EMAIL", "SKIPTRACE_B2B_MATCH_BY": "NAME"}
        assert evaluate_match_by_tier(contact, "commercial") == "low"

    def test_missing_descriptor_is_low(self):
        assert evaluate_match_by_tier({}, "residential") == "low"


class TestTierToNumericScore:
    """Tests for tier → numeric score."""

    @pytest.mark.parametrize(
        "tier,expected",
        [("high", 3), ("medium", 2), ("low", 1), (None, 0), ("bogus", 0)],
    )
    def test_mapping(self, tier, expected):
        assert tier_to_numeric_score(tier) == expected


class TestResolveEffectiveScope:
    """Tests for the mixed-scope alternation policy."""

    def test_both_alternates_by_index(self):
        scopes = [resolve_effective_scope("both", i) for i in range(4)]
        assert scopes == ["residential", "commercial", "residential", "commercial"]

    @pytest.mark.parametrize("scope", ["residential", "commercial"])
    def test_fixed_scope_unchanged(self, scope):
        assert all(resolve_effective_scope(scope, i) == scope for i in range(3))
